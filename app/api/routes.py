"""
FastAPI routes for the OAuth token vault.
"""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import ValidationError

from app.api.auth import authenticate_request, get_authenticated_user_id, unauthorized
from app.clients import SecretStoreError
from app.dependencies import get_token_retriever, get_token_saver
from app.schemas import SaveTokenRequest, SaveTokenResponse, TokenResponse
from app.services import OAuthTokenRetriever, OAuthTokenSaver, TokenDecodeError

router = APIRouter()
token_router = APIRouter(
    prefix="/token",
    tags=["token"],
    dependencies=[Depends(authenticate_request)],
)
logger = logging.getLogger(__name__)

SAVE_ERROR_DETAIL = "Could not save token"
RETRIEVE_ERROR_DETAIL = "Could not retrieve token"


@router.get("/health", status_code=HTTPStatus.OK)
async def healthcheck() -> dict:
    """Simple health endpoint for monitoring."""
    return {"status": "ok"}


async def parse_save_request(request: Request) -> SaveTokenRequest:
    """Read the save payload once the caller has been authenticated."""
    try:
        body = await request.json()
        return SaveTokenRequest.model_validate(body)
    except (ValueError, ValidationError) as exc:
        logger.warning("Rejected token save payload: %s", exc)
        raise HTTPException(
            status_code=HTTPStatus.BAD_REQUEST, detail=SAVE_ERROR_DETAIL
        ) from exc


@token_router.put(
    "/save",
    response_model=SaveTokenResponse,
    openapi_extra={
        "requestBody": {
            "required": True,
            "content": {
                "application/json": {"schema": SaveTokenRequest.model_json_schema()}
            },
        }
    },
)
def save_token(
    payload: Annotated[SaveTokenRequest, Depends(parse_save_request)],
    user_id: Annotated[Optional[str], Depends(get_authenticated_user_id)],
    saver: Annotated[OAuthTokenSaver, Depends(get_token_saver)],
) -> SaveTokenResponse:
    """Create or overwrite the caller's stored OAuth token."""
    if not user_id or payload.user_id != user_id:
        logger.warning("Token subject does not match user_id %s", payload.user_id)
        raise unauthorized()

    try:
        saver.save_token(payload)
    except SecretStoreError as exc:
        raise HTTPException(
            status_code=HTTPStatus.INTERNAL_SERVER_ERROR, detail=SAVE_ERROR_DETAIL
        ) from exc

    return SaveTokenResponse()


@token_router.get("/get", response_model=TokenResponse)
def retrieve_token(
    user_id: Annotated[Optional[str], Depends(get_authenticated_user_id)],
    retriever: Annotated[OAuthTokenRetriever, Depends(get_token_retriever)],
) -> TokenResponse:
    """Return the caller's stored OAuth token, expired or not."""
    if not user_id:
        raise unauthorized(RETRIEVE_ERROR_DETAIL)

    try:
        token = retriever.retrieve_token(user_id=user_id)
    except (SecretStoreError, TokenDecodeError) as exc:
        raise HTTPException(
            status_code=HTTPStatus.INTERNAL_SERVER_ERROR,
            detail=RETRIEVE_ERROR_DETAIL,
        ) from exc

    if not token.access_token:
        logger.error("Stored token for %s has an empty access token", user_id)
        raise HTTPException(
            status_code=HTTPStatus.INTERNAL_SERVER_ERROR,
            detail=RETRIEVE_ERROR_DETAIL,
        )

    return TokenResponse(
        access_token=token.access_token,
        refresh_token=token.refresh_token,
        expiry=token.expiry,
    )


router.include_router(token_router)

__all__ = ["router"]
