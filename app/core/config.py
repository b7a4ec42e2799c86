"""
Application configuration models and helpers.

Settings are read from the process environment (and an optional ``.env`` file)
once per process and shared by the FastAPI app and the AWS client factories.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

import os

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _load_env_file(path: str = ".env") -> None:
    """Best-effort load key=value pairs from a .env file into ``os.environ``.

    Nested settings objects are built through ``default_factory`` and never see
    the parent's ``env_file``, so values are exported up front instead.
    """
    env_path = Path(path)
    if not env_path.exists():
        return
    for raw_line in env_path.read_text().splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        key, sep, value = line.partition("=")
        key = key.strip()
        if not sep or not key or key in os.environ:
            continue
        os.environ[key] = value.strip().strip('"').strip("'")


_load_env_file()


class AWSSettings(BaseSettings):
    """Settings for the AWS services backing the vault."""

    model_config = SettingsConfigDict(populate_by_name=True, extra="ignore")

    region_name: str = Field("us-east-1", alias="AWS_REGION")
    endpoint_url: Optional[str] = Field(
        None,
        alias="AWS_ENDPOINT_URL",
        description="Optional endpoint override, e.g. a LocalStack URL.",
    )
    secrets_root_domain: str = Field(
        ...,
        alias="SMS_ROOT_DOMAIN",
        description="Root segment of every secret identifier.",
    )
    kms_key_id: str = Field(
        ...,
        alias="KMS_KEY_ID",
        description="KMS key whose public half verifies bearer tokens.",
    )

    @field_validator("secrets_root_domain", "kms_key_id")
    @classmethod
    def _require_value(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be empty")
        return value.strip()


class AuthSettings(BaseSettings):
    """Bearer token verification settings."""

    model_config = SettingsConfigDict(populate_by_name=True, extra="ignore")

    algorithm: Literal["RS256", "RS384", "RS512"] = Field(
        "RS256",
        alias="JWT_ALGORITHM",
        description="RSA signing algorithm tokens must declare.",
    )
    audience: Optional[str] = Field(
        None,
        alias="JWT_AUDIENCE",
        description="When set, tokens must carry a matching ``aud`` claim.",
    )
    issuer: Optional[str] = Field(
        None,
        alias="JWT_ISSUER",
        description="When set, tokens must carry a matching ``iss`` claim.",
    )


class AppSettings(BaseSettings):
    """Root settings object for the FastAPI application."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        populate_by_name=True,
        extra="ignore",
    )

    log_level: str = Field("INFO", alias="APP_LOG_LEVEL")
    aws: AWSSettings = Field(default_factory=AWSSettings)
    auth: AuthSettings = Field(default_factory=AuthSettings)


@lru_cache()
def get_settings() -> AppSettings:
    """Return a cached settings object."""
    return AppSettings()  # type: ignore[call-arg]


__all__ = [
    "AppSettings",
    "AuthSettings",
    "AWSSettings",
    "get_settings",
]
