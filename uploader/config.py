"""
Application configuration using Pydantic Settings.
All environment variables are loaded here with sensible defaults.

Nothing here raises at import time when storage credentials are missing;
`check_storage_settings` reports them so the owning process can decide
whether to refuse to start.
"""
from dataclasses import dataclass, field
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional, Union

from uploader.constants import ALLOWED_FILE_TYPES, ALLOW_ANY_TYPE, MAX_FILE_SIZE


def parse_allowed_types(value: Optional[str]) -> Union[List[str], str]:
    """
    Parse a comma-separated list of MIME types.

    Args:
        value: e.g. "audio/mpeg, audio/wav" or "*"

    Returns:
        The wildcard marker, or a list of stripped, non-empty types
    """
    if value is None:
        return list(ALLOWED_FILE_TYPES)
    value = value.strip()
    if value == ALLOW_ANY_TYPE:
        return ALLOW_ANY_TYPE
    return [item.strip() for item in value.split(',') if item.strip()]


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Environment
    environment: str = "dev"
    log_level: str = "INFO"

    # AWS S3 / S3-compatible storage
    aws_region: Optional[str] = None
    aws_access_key_id: Optional[str] = None
    aws_secret_access_key: Optional[str] = None
    aws_s3_bucket: Optional[str] = None
    aws_s3_endpoint: Optional[str] = None  # Only for S3-compatible stores (MinIO, R2, ...)

    # Upload policy (authoritative copy)
    allowed_file_types: str = ",".join(ALLOWED_FILE_TYPES)  # Comma-separated, or "*"
    max_file_size: int = MAX_FILE_SIZE

    # Read path
    download_timeout: float = 30.0  # Seconds for fetching an object via its signed URL

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    @property
    def allowed_types(self) -> Union[List[str], str]:
        return parse_allowed_types(self.allowed_file_types)


@dataclass(frozen=True)
class StartupCheck:
    """Result of validating the settings a process needs before serving."""
    ok: bool
    missing: List[str] = field(default_factory=list)


REQUIRED_STORAGE_SETTINGS = (
    "aws_region",
    "aws_access_key_id",
    "aws_secret_access_key",
    "aws_s3_bucket",
)


def check_storage_settings(config: Settings) -> StartupCheck:
    """
    Verify that every setting required to talk to the bucket is present.

    Args:
        config: Settings instance to inspect

    Returns:
        StartupCheck listing missing environment variable names (upper-case)
    """
    missing = [
        name.upper()
        for name in REQUIRED_STORAGE_SETTINGS
        if not getattr(config, name)
    ]
    return StartupCheck(ok=not missing, missing=missing)


# Global settings instance
settings = Settings()
