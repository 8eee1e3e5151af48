"""
Configuration Management

Optional settings loaded from OHHAUTH_* environment variables or a .env file.
Signing never reads these implicitly; callers opt in through
Credentials.from_settings() and configure_logging().
"""
import logging
from functools import partial
from typing import Optional

from pydantic import ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings

from ohhauth.credentials import SignatureMethod
from ohhauth.nonce import DEFAULT_NONCE_LENGTH, NonceSource, generate_nonce
from ohhauth.verify import TIMESTAMP_TOLERANCE_SECONDS


class Settings(BaseSettings):
    """Library settings loaded from environment variables."""

    model_config = ConfigDict(
        env_prefix="OHHAUTH_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ============================================================
    # Credentials (optional - only used by Credentials.from_settings)
    # ============================================================
    consumer_key: Optional[str] = Field(None, description="OAuth consumer key")
    consumer_secret: Optional[str] = Field(None, description="OAuth consumer secret")
    token: Optional[str] = Field(None, description="OAuth access token")
    token_secret: Optional[str] = Field(None, description="OAuth access token secret")

    # ============================================================
    # Signing
    # ============================================================
    signature_method: str = Field("HMAC-SHA1", description="HMAC-SHA1 or HMAC-SHA256")
    nonce_length: int = Field(DEFAULT_NONCE_LENGTH, ge=8, description="Hex characters per generated nonce")
    timestamp_tolerance_seconds: int = Field(
        TIMESTAMP_TOLERANCE_SECONDS,
        ge=0,
        description="Allowed clock skew when verifying requests",
    )

    # ============================================================
    # Logging Configuration
    # ============================================================
    log_level: str = Field("INFO", description="Logging level (DEBUG/INFO/WARNING/ERROR)")
    log_format: str = Field(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log format string"
    )

    @field_validator("signature_method")
    @classmethod
    def _check_signature_method(cls, value: str) -> str:
        return SignatureMethod.parse(value).value

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Invalid log level: {value}")
        return level


# Global settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Get library settings (singleton).

    Returns:
        Settings instance
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reload_settings():
    """Reload settings from environment (useful for testing)."""
    global _settings
    _settings = Settings()
    return _settings


def configure_logging(settings: Optional[Settings] = None) -> None:
    """Apply log level and format from settings to the root logger."""
    settings = settings or get_settings()
    logging.basicConfig(level=settings.log_level, format=settings.log_format)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def nonce_source_from_settings(settings: Optional[Settings] = None) -> NonceSource:
    """Nonce source producing nonces of the configured length."""
    settings = settings or get_settings()
    return partial(generate_nonce, settings.nonce_length)
