"""Configuration settings for the EO goal tracker."""

from decimal import Decimal
from functools import lru_cache
from typing import Any, Literal

from pydantic import Field, SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class FlatSettings(BaseSettings):
    """Flat settings read from environment variables (or a .env file)."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Xero API
    xero_client_id: SecretStr = Field(..., validation_alias="XERO_CLIENT_ID")
    xero_client_secret: SecretStr = Field(..., validation_alias="XERO_CLIENT_SECRET")
    xero_scopes: str | None = Field(default=None, validation_alias="XERO_SCOPES")
    xero_timeout: float = Field(default=30.0, validation_alias="XERO_TIMEOUT")
    xero_rate_limit_backoff: float = Field(
        default=2.0, ge=0, validation_alias="XERO_RATE_LIMIT_BACKOFF"
    )

    # Pushover
    pushover_token: SecretStr | None = Field(default=None, validation_alias="PUSHOVER_TOKEN")
    pushover_user: SecretStr | None = Field(default=None, validation_alias="PUSHOVER_USER")

    # EO accelerator report
    eo_participant_name: str | None = Field(default=None, validation_alias="EO_PARTICIPANT_NAME")
    eo_participant_chapter: str | None = Field(
        default=None, validation_alias="EO_PARTICIPANT_CHAPTER"
    )
    eo_endpoint_directory_url: str | None = Field(
        default=None, validation_alias="EO_ENDPOINT_DIRECTORY_URL"
    )
    eo_timeout: float = Field(default=30.0, validation_alias="EO_TIMEOUT")

    # Goal
    revenue_goal: Decimal = Field(
        default=Decimal("1500000"), gt=0, validation_alias="REVENUE_GOAL"
    )

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", validation_alias="LOG_LEVEL"
    )
    log_format: Literal["json", "console"] = Field(
        default="console", validation_alias="LOG_FORMAT"
    )

    @field_validator("xero_client_id", "xero_client_secret", mode="before")
    @classmethod
    def _require_non_empty(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = value.strip()
            if not value:
                raise ValueError("must not be empty")
        return value

    @field_validator(
        "xero_scopes",
        "pushover_token",
        "pushover_user",
        "eo_participant_name",
        "eo_participant_chapter",
        "eo_endpoint_directory_url",
        mode="before",
    )
    @classmethod
    def _blank_to_none(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = value.strip()
            return value or None
        return value

    @model_validator(mode="after")
    def _require_a_feature(self) -> "FlatSettings":
        if not (self.push_enabled or self.report_enabled):
            raise ValueError(
                "No notification feature configured: set PUSHOVER_TOKEN and "
                "PUSHOVER_USER, or EO_PARTICIPANT_NAME, EO_PARTICIPANT_CHAPTER "
                "and EO_ENDPOINT_DIRECTORY_URL"
            )
        return self

    @property
    def push_enabled(self) -> bool:
        """Whether Pushover credentials are configured."""
        return self.pushover_token is not None and self.pushover_user is not None

    @property
    def report_enabled(self) -> bool:
        """Whether the EO accelerator report is configured."""
        return (
            self.eo_participant_name is not None
            and self.eo_participant_chapter is not None
            and self.eo_endpoint_directory_url is not None
        )


@lru_cache
def get_settings() -> FlatSettings:
    """Get cached settings instance."""
    return FlatSettings()
