"""Expose constructed client wrappers."""

from .kms import KMSPublicKeyProvider, PublicKeyProvider, PublicKeyUnavailableError
from .secrets_manager import (
    ResolvedSecret,
    SecretNotFoundError,
    SecretsManagerClient,
    SecretStoreError,
    build_secret_id,
)

__all__ = [
    "KMSPublicKeyProvider",
    "PublicKeyProvider",
    "PublicKeyUnavailableError",
    "ResolvedSecret",
    "SecretNotFoundError",
    "SecretStoreError",
    "SecretsManagerClient",
    "build_secret_id",
]
