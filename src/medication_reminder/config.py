"""Application configuration using pydantic-settings."""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    The Twilio credentials, sending number, public base URL and port have no
    defaults: constructing ``Settings`` without them raises a
    ``ValidationError`` naming every missing field.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application settings
    environment: Literal["development", "staging", "production"] = "development"
    log_level: str = "INFO"
    log_dir: str | None = Field(
        default=None,
        description="Directory for combined.log and error.log (stdout only if unset)",
    )
    host: str = "0.0.0.0"
    port: int = Field(..., ge=1, le=65535)
    base_url: str = Field(
        ...,
        min_length=1,
        description="Externally reachable base URL for Twilio callbacks (e.g., https://your-domain.com)",
    )

    # Twilio settings
    twilio_account_sid: str = Field(..., min_length=1)
    twilio_auth_token: str = Field(..., min_length=1)
    twilio_phone_number: str = Field(..., min_length=1)

    # Call flow settings
    voice: str = "alice"
    speech_language: str = "en-US"
    listen_timeout_seconds: int = Field(default=10, ge=1, le=60)
    call_log_limit: int = Field(default=50, ge=1, le=1000)
    medications: list[str] = Field(
        default_factory=lambda: ["Aspirin", "Cardivol", "Metformin"],
        description="Medications named in the reminder message",
    )

    @field_validator("base_url", mode="before")
    @classmethod
    def strip_trailing_slash(cls, v):
        """Callback URLs are built as base_url + path."""
        return v.rstrip("/") if isinstance(v, str) else v

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment == "development"

    def callback_url(self, path: str) -> str:
        """Absolute URL Twilio should call for the given path."""
        return f"{self.base_url}{path}"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load settings once per process."""
    return Settings()
