"""Bearer token verification against the KMS-held public key."""

from __future__ import annotations

import logging
from typing import Any, Optional

import jwt
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from app.clients.kms import PublicKeyProvider

logger = logging.getLogger(__name__)

RSA_ALGORITHMS = ("RS256", "RS384", "RS512")


class AuthenticationError(Exception):
    """Raised for every verification failure; the reason is only logged."""

    def __init__(self, message: str = "Could not authenticate user") -> None:
        super().__init__(message)


class PublicKeyDecodeError(ValueError):
    """Raised when the fetched key material is not a usable RSA public key."""


class TokenVerifier:
    """Validate JWTs signed by the private half of the configured key.

    The public key is fetched and decoded once, when the verifier is built.
    """

    def __init__(
        self,
        key_provider: PublicKeyProvider,
        *,
        algorithm: str = "RS256",
        audience: Optional[str] = None,
        issuer: Optional[str] = None,
    ) -> None:
        if algorithm not in RSA_ALGORITHMS:
            raise ValueError(f"Unsupported token algorithm {algorithm!r}.")

        raw_key = key_provider.get_public_key()
        try:
            public_key = serialization.load_der_public_key(raw_key)
        except (ValueError, TypeError, UnsupportedAlgorithm) as exc:
            raise PublicKeyDecodeError("Failed to parse public key.") from exc
        if not isinstance(public_key, rsa.RSAPublicKey):
            raise PublicKeyDecodeError(
                f"Expected an RSA public key, got {type(public_key).__name__}."
            )
        self._public_key = public_key

        self._algorithm = algorithm
        self._audience = audience
        self._issuer = issuer

    @property
    def algorithm(self) -> str:
        return self._algorithm

    def verify(self, token: str) -> str:
        """Return the token's subject, or raise :class:`AuthenticationError`."""
        claims = self._decode(token)

        if not isinstance(claims, dict):
            logger.warning("Token claims are not a JSON object")
            raise AuthenticationError()

        subject = claims.get("sub")
        if not isinstance(subject, str) or not subject:
            logger.warning("Token carries no subject claim")
            raise AuthenticationError()
        return subject

    def _decode(self, token: str) -> Any:
        try:
            header = jwt.get_unverified_header(token)
        except jwt.PyJWTError as exc:
            logger.warning("Invalid token or parsing error: %s", exc)
            raise AuthenticationError() from exc

        if header.get("alg") != self._algorithm:
            logger.warning("Unexpected signing method: %s", header.get("alg"))
            raise AuthenticationError()

        options = {
            "verify_aud": self._audience is not None,
            "verify_iss": self._issuer is not None,
        }
        try:
            return jwt.decode(
                token,
                self._public_key,
                algorithms=[self._algorithm],
                audience=self._audience,
                issuer=self._issuer,
                options=options,
            )
        except jwt.PyJWTError as exc:
            logger.warning("Invalid token or parsing error: %s", exc)
            raise AuthenticationError() from exc


__all__ = [
    "AuthenticationError",
    "PublicKeyDecodeError",
    "RSA_ALGORITHMS",
    "TokenVerifier",
]
