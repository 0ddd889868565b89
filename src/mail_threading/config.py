"""Configuration management for Mail Threading.

This module handles application configuration using Pydantic settings.
Configuration can be loaded from environment variables or .env files.
"""

from datetime import tzinfo
from functools import lru_cache
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from mail_threading.exceptions import ConfigurationError

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class Settings(BaseSettings):
    """Application settings with environment variable support.

    All settings can be overridden via environment variables with
    the MAIL_THREADS_ prefix (e.g., MAIL_THREADS_PAGE_SIZE).
    """

    model_config = SettingsConfigDict(
        env_prefix="MAIL_THREADS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Pagination
    page_size: int = Field(
        default=30,
        ge=1,
        description="Number of messages the mail API returns for a full page",
    )

    # Payload parsing
    default_timezone: str = Field(
        default="UTC",
        description=(
            "IANA zone applied to naive wall-clock dates such as the "
            "'D/M/YYYY, HH:MM:SS am' form returned by the mail API"
        ),
    )
    sent_display_name: str = Field(
        default="You",
        description="Sender name used for sent messages when the account has none",
    )

    # Application Configuration
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode",
    )

    @field_validator("default_timezone")
    @classmethod
    def _known_timezone(cls, value: str) -> str:
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown time zone: {value!r}") from e
        return value

    @field_validator("log_level")
    @classmethod
    def _known_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"Unknown log level: {value!r}")
        return level

    def timezone(self) -> tzinfo:
        """Return the zone used for naive dates from the mail API."""
        return ZoneInfo(self.default_timezone)


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Returns:
        Settings: Application settings instance.

    Raises:
        ConfigurationError: If the environment holds invalid values.
    """
    try:
        return Settings()
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e
