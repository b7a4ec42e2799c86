"""Public schema exports."""

from .token import SaveTokenRequest, SaveTokenResponse, TokenResponse

__all__ = [
    "SaveTokenRequest",
    "SaveTokenResponse",
    "TokenResponse",
]
