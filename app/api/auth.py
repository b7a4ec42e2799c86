"""
Bearer authentication dependency guarding the token routes.
"""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Annotated, Optional

from fastapi import Depends, HTTPException, Request

from app.dependencies import get_token_verifier
from app.services import AuthenticationError, TokenVerifier

logger = logging.getLogger(__name__)

AUTH_ERROR_DETAIL = "Could not authenticate user"
_BEARER_PREFIX = "Bearer "


def unauthorized(detail: str = AUTH_ERROR_DETAIL) -> HTTPException:
    """Build the 401 response shared by every authentication failure."""
    return HTTPException(
        status_code=HTTPStatus.UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def authenticate_request(
    request: Request,
    verifier: Annotated[TokenVerifier, Depends(get_token_verifier)],
) -> str:
    """Verify the bearer token and record its subject on ``request.state``."""
    auth_header = request.headers.get("Authorization")
    if not auth_header:
        logger.warning("Authorization header is empty")
        raise unauthorized()

    token = auth_header[len(_BEARER_PREFIX):]
    if not auth_header.startswith(_BEARER_PREFIX) or not token:
        logger.warning("Invalid authorization header format")
        raise unauthorized()

    try:
        subject = verifier.verify(token)
    except AuthenticationError as exc:
        raise unauthorized() from exc

    request.state.user_id = subject
    return subject


def get_authenticated_user_id(request: Request) -> Optional[str]:
    """Return the identity attached by :func:`authenticate_request`, if any."""
    return getattr(request.state, "user_id", None)


__all__ = [
    "AUTH_ERROR_DETAIL",
    "authenticate_request",
    "get_authenticated_user_id",
    "unauthorized",
]
