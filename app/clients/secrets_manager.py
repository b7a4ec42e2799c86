"""
Thin wrapper around AWS Secrets Manager used to persist OAuth tokens.

Secrets are addressed as ``<root-domain>/<domain>/<user-id>``. The store has no
upsert, so callers check with :meth:`SecretsManagerClient.resolve_secret_id` and
then choose between create and put.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional, Protocol

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from app.core.config import AWSSettings

logger = logging.getLogger(__name__)

_NOT_FOUND_CODE = "ResourceNotFoundException"


class SecretStoreError(Exception):
    """Raised when Secrets Manager rejects or fails a request."""


class SecretNotFoundError(SecretStoreError):
    """Raised when a secret that was expected to exist is missing."""


@dataclass(frozen=True)
class ResolvedSecret:
    """Outcome of probing the store for a secret identifier."""

    secret_id: str
    exists: bool


def build_secret_id(root_domain: str, domain: str, user_id: str) -> str:
    """Compose the identifier under which a user's secret lives."""
    return f"{root_domain}/{domain}/{user_id}"


def is_not_found(exc: ClientError) -> bool:
    """Return True when a botocore error reports a missing secret."""
    return exc.response.get("Error", {}).get("Code") == _NOT_FOUND_CODE


class SecretGetter(Protocol):
    def get_secret(self, secret_id: str) -> str:
        ...


class SecretPutter(Protocol):
    def put_secret(self, secret_id: str, value: str) -> None:
        ...


class SecretCreator(Protocol):
    def create_secret(self, secret_id: str, value: str) -> None:
        ...


class SecretIDResolver(Protocol):
    def resolve_secret_id(self, domain: str, user_id: str) -> ResolvedSecret:
        ...


class SecretsManagerClient:
    """Get, put, create and describe secrets under a fixed root domain."""

    def __init__(self, settings: AWSSettings, client: Optional[Any] = None) -> None:
        self._root_domain = settings.secrets_root_domain
        self._client = client or boto3.client(
            "secretsmanager",
            region_name=settings.region_name,
            endpoint_url=settings.endpoint_url,
        )

    def get_secret(self, secret_id: str) -> str:
        """Return the current string value of a secret."""
        try:
            response = self._client.get_secret_value(SecretId=secret_id)
        except ClientError as exc:
            if is_not_found(exc):
                raise SecretNotFoundError(f"Secret {secret_id} does not exist.") from exc
            logger.error("Unable to get secret %s: %s", secret_id, exc)
            raise SecretStoreError(f"Unable to get secret {secret_id}.") from exc
        except BotoCoreError as exc:
            logger.error("Unable to get secret %s: %s", secret_id, exc)
            raise SecretStoreError(f"Unable to get secret {secret_id}.") from exc

        value = response.get("SecretString")
        if value is None:
            raise SecretStoreError(f"Secret {secret_id} holds no string value.")
        return value

    def put_secret(self, secret_id: str, value: str) -> None:
        """Overwrite the value of an existing secret."""
        try:
            self._client.put_secret_value(SecretId=secret_id, SecretString=value)
        except (ClientError, BotoCoreError) as exc:
            logger.error("Unable to put secret %s: %s", secret_id, exc)
            raise SecretStoreError(f"Unable to put secret {secret_id}.") from exc

    def create_secret(self, secret_id: str, value: str) -> None:
        """Create a new secret holding ``value``."""
        try:
            self._client.create_secret(Name=secret_id, SecretString=value)
        except (ClientError, BotoCoreError) as exc:
            logger.error("Unable to create secret %s: %s", secret_id, exc)
            raise SecretStoreError(f"Unable to create secret {secret_id}.") from exc

    def resolve_secret_id(self, domain: str, user_id: str) -> ResolvedSecret:
        """Build the identifier for ``user_id`` and report whether it exists."""
        secret_id = build_secret_id(self._root_domain, domain, user_id)
        try:
            self._client.describe_secret(SecretId=secret_id)
        except ClientError as exc:
            if is_not_found(exc):
                logger.info("Secret %s does not exist yet", secret_id)
                return ResolvedSecret(secret_id=secret_id, exists=False)
            logger.error("Unable to resolve secret %s: %s", secret_id, exc)
            raise SecretStoreError(f"Unable to resolve secret {secret_id}.") from exc
        except BotoCoreError as exc:
            logger.error("Unable to resolve secret %s: %s", secret_id, exc)
            raise SecretStoreError(f"Unable to resolve secret {secret_id}.") from exc
        return ResolvedSecret(secret_id=secret_id, exists=True)


__all__ = [
    "ResolvedSecret",
    "SecretCreator",
    "SecretGetter",
    "SecretIDResolver",
    "SecretNotFoundError",
    "SecretPutter",
    "SecretStoreError",
    "SecretsManagerClient",
    "build_secret_id",
    "is_not_found",
]
