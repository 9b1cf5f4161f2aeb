"""Configuration with pydantic-settings.

Values come from ``SCRATCH_ORG_*`` environment variables or a local ``.env``
file. Everything has a default so the library can be used without a hub org
configured; ``RestHubConnection.from_settings`` checks the connection fields it
needs.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Scratch org provisioner settings."""

    model_config = SettingsConfigDict(
        env_prefix="SCRATCH_ORG_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Logging configuration
    service_name: str = Field(
        default="scratch-org",
        description="Service name for structured logging",
    )
    log_format: Literal["json", "console"] = Field(
        default="console",
        description="Log output format",
    )
    log_level: str = Field(
        default="INFO",
        description="Log level (DEBUG, INFO, WARNING, ERROR)",
    )

    # Hub org connection
    instance_url: str | None = Field(
        default=None,
        description="Hub org instance URL",
        examples=["https://mycompany.my.salesforce.com"],
    )
    access_token: str | None = Field(
        default=None,
        description="Access token issued for the hub org",
    )
    api_version: str = Field(
        default="59.0",
        pattern=r"^\d+\.\d+$",
        description="REST API version used for record creation",
    )
    http_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Timeout for requests to the hub org (seconds)",
    )

    # Local authorizations
    auth_dir: Path = Field(
        default_factory=lambda: Path.home() / ".sfdx",
        description="Directory holding <username>.json authorization files",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensure log level is valid."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper_v = v.upper()
        if upper_v not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return upper_v


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
