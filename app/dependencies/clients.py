"""
Construction of the AWS-backed services and their FastAPI dependency accessors.

Everything is built once by :func:`build_services` when the application starts
and kept on ``app.state``; request handlers reach it through the ``get_*``
functions below, which tests replace via ``app.dependency_overrides``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from fastapi import Request

from app.clients import KMSPublicKeyProvider, SecretsManagerClient
from app.core.config import AppSettings
from app.services import OAuthTokenRetriever, OAuthTokenSaver, TokenVerifier

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ServiceContainer:
    """Handles shared by all requests for the lifetime of the process."""

    token_verifier: TokenVerifier
    token_saver: OAuthTokenSaver
    token_retriever: OAuthTokenRetriever


def build_services(settings: AppSettings) -> ServiceContainer:
    """Create the AWS clients and the services layered on top of them.

    Fetches the verification key from KMS; failures propagate and abort startup.
    """
    secrets = SecretsManagerClient(settings.aws)
    key_provider = KMSPublicKeyProvider(settings.aws)
    verifier = TokenVerifier(
        key_provider,
        algorithm=settings.auth.algorithm,
        audience=settings.auth.audience,
        issuer=settings.auth.issuer,
    )
    logger.info(
        "Loaded %s verification key %s", verifier.algorithm, key_provider.key_id
    )
    return ServiceContainer(
        token_verifier=verifier,
        token_saver=OAuthTokenSaver(
            resolver=secrets, putter=secrets, creator=secrets
        ),
        token_retriever=OAuthTokenRetriever(resolver=secrets, getter=secrets),
    )


def _services(request: Request) -> ServiceContainer:
    return request.app.state.services


def get_token_verifier(request: Request) -> TokenVerifier:
    """Provide the process-wide token verifier."""
    return _services(request).token_verifier


def get_token_saver(request: Request) -> OAuthTokenSaver:
    """Provide the token saver."""
    return _services(request).token_saver


def get_token_retriever(request: Request) -> OAuthTokenRetriever:
    """Provide the token retriever."""
    return _services(request).token_retriever


__all__ = [
    "ServiceContainer",
    "build_services",
    "get_token_retriever",
    "get_token_saver",
    "get_token_verifier",
]
