"""
AWS KMS wrapper that exposes the public half of the token signing key.
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Protocol

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from app.core.config import AWSSettings

logger = logging.getLogger(__name__)


class PublicKeyUnavailableError(Exception):
    """Raised when the public key cannot be fetched from KMS."""


class PublicKeyProvider(Protocol):
    """Anything able to hand back DER-encoded public key bytes."""

    def get_public_key(self) -> bytes:
        ...


class KMSPublicKeyProvider:
    """Fetch the public key for a configured KMS key id.

    Every call performs a ``GetPublicKey`` round trip; callers that need the key
    more than once are expected to hold on to it.
    """

    def __init__(self, settings: AWSSettings, client: Optional[Any] = None) -> None:
        self._key_id = settings.kms_key_id
        self._client = client or boto3.client(
            "kms",
            region_name=settings.region_name,
            endpoint_url=settings.endpoint_url,
        )

    @property
    def key_id(self) -> str:
        return self._key_id

    def get_public_key(self) -> bytes:
        """Return the DER-encoded SubjectPublicKeyInfo for the key."""
        try:
            response = self._client.get_public_key(KeyId=self._key_id)
        except (ClientError, BotoCoreError) as exc:
            logger.error("Unable to get public key %s from KMS: %s", self._key_id, exc)
            raise PublicKeyUnavailableError(
                f"Unable to get public key {self._key_id} from KMS."
            ) from exc

        public_key = response.get("PublicKey")
        if not public_key:
            raise PublicKeyUnavailableError(
                f"KMS returned no public key material for {self._key_id}."
            )
        return public_key


__all__ = ["KMSPublicKeyProvider", "PublicKeyProvider", "PublicKeyUnavailableError"]
