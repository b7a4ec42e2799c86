"""Request and response schemas for the token endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any

from pydantic import (
    AwareDatetime,
    BaseModel,
    ConfigDict,
    Field,
    StringConstraints,
    field_validator,
)

NonBlankStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class SaveTokenRequest(BaseModel):
    """Payload accepted by ``PUT /token/save``."""

    user_id: NonBlankStr = Field(..., description="Owner of the token.")
    access_token: NonBlankStr
    refresh_token: NonBlankStr
    expiry: AwareDatetime = Field(
        ..., description="RFC3339 timestamp, offset required."
    )

    @field_validator("expiry", mode="before")
    @classmethod
    def _expiry_must_be_timestamp_string(cls, value: Any) -> Any:
        """Only RFC3339 strings are accepted; Unix numbers are not."""
        if isinstance(value, datetime):
            return value
        if not isinstance(value, str):
            raise ValueError("expiry must be an RFC3339 timestamp string")
        if value.strip().lstrip("+-").replace(".", "", 1).isdigit():
            raise ValueError("expiry must be an RFC3339 timestamp string")
        return value


class TokenResponse(BaseModel):
    """Token fields returned by ``GET /token/get``."""

    access_token: str
    refresh_token: str
    expiry: datetime


class SaveTokenResponse(BaseModel):
    """Acknowledgement returned after a successful save."""

    model_config = ConfigDict(populate_by_name=True)

    message: str = Field("Token saved successfully", alias="Message")


__all__ = ["SaveTokenRequest", "SaveTokenResponse", "TokenResponse"]
