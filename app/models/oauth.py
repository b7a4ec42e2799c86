"""
Domain models for OAuth token persistence.
"""

from datetime import datetime

from pydantic import BaseModel, Field


class StoredOAuthToken(BaseModel):
    """OAuth token as serialized into a Secrets Manager secret string."""

    access_token: str
    token_type: str = Field("Bearer", description="Stored for compatibility; unused.")
    refresh_token: str = ""
    expiry: datetime


__all__ = ["StoredOAuthToken"]
