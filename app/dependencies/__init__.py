"""Expose dependency helpers for FastAPI routers."""

from .clients import (
    ServiceContainer,
    build_services,
    get_token_retriever,
    get_token_saver,
    get_token_verifier,
)

__all__ = [
    "ServiceContainer",
    "build_services",
    "get_token_retriever",
    "get_token_saver",
    "get_token_verifier",
]
