"""Service layer exports."""

from .oauth_tokens import (
    TOKEN_DOMAIN,
    OAuthTokenRetriever,
    OAuthTokenSaver,
    TokenDecodeError,
)
from .token_verifier import AuthenticationError, PublicKeyDecodeError, TokenVerifier

__all__ = [
    "AuthenticationError",
    "OAuthTokenRetriever",
    "OAuthTokenSaver",
    "PublicKeyDecodeError",
    "TOKEN_DOMAIN",
    "TokenDecodeError",
    "TokenVerifier",
]
