"""
Save and retrieve OAuth tokens held in the secret store.
"""

from __future__ import annotations

import logging

from pydantic import ValidationError

from app.clients.secrets_manager import (
    SecretCreator,
    SecretGetter,
    SecretIDResolver,
    SecretNotFoundError,
    SecretPutter,
)
from app.models.oauth import StoredOAuthToken
from app.schemas import SaveTokenRequest

logger = logging.getLogger(__name__)

TOKEN_DOMAIN = "token"


class TokenDecodeError(Exception):
    """Raised when a stored secret cannot be read back as an OAuth token."""


class OAuthTokenSaver:
    """Persist a user's token, creating the secret on first save."""

    def __init__(
        self,
        resolver: SecretIDResolver,
        putter: SecretPutter,
        creator: SecretCreator,
    ) -> None:
        self._resolver = resolver
        self._putter = putter
        self._creator = creator

    def save_token(self, request: SaveTokenRequest) -> None:
        token = StoredOAuthToken(
            access_token=request.access_token,
            refresh_token=request.refresh_token,
            expiry=request.expiry,
        )
        payload = token.model_dump_json()

        resolved = self._resolver.resolve_secret_id(TOKEN_DOMAIN, request.user_id)
        if not resolved.exists:
            logger.info("Creating token secret %s", resolved.secret_id)
            self._creator.create_secret(resolved.secret_id, payload)
            return

        logger.info("Updating token secret %s", resolved.secret_id)
        self._putter.put_secret(resolved.secret_id, payload)


class OAuthTokenRetriever:
    """Load a user's token from the secret store.

    Expired tokens are returned unchanged; checking ``expiry`` is left to the
    caller.
    """

    def __init__(self, resolver: SecretIDResolver, getter: SecretGetter) -> None:
        self._resolver = resolver
        self._getter = getter

    def retrieve_token(self, *, user_id: str) -> StoredOAuthToken:
        resolved = self._resolver.resolve_secret_id(TOKEN_DOMAIN, user_id)
        if not resolved.exists:
            logger.error(
                "Could not retrieve token. Secret %s does not exist", resolved.secret_id
            )
            raise SecretNotFoundError(f"Secret {resolved.secret_id} does not exist.")

        secret = self._getter.get_secret(resolved.secret_id)
        try:
            return StoredOAuthToken.model_validate_json(secret)
        except ValidationError as exc:
            logger.error(
                "Unable to decode secret %s as an OAuth token: %s",
                resolved.secret_id,
                exc,
            )
            raise TokenDecodeError(
                f"Secret {resolved.secret_id} does not hold an OAuth token."
            ) from exc


__all__ = [
    "OAuthTokenRetriever",
    "OAuthTokenSaver",
    "TOKEN_DOMAIN",
    "TokenDecodeError",
]
