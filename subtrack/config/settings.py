"""
Application Settings for SubTrack

Centralized configuration using Pydantic Settings with .env support.
All environment variables are validated at startup.
"""

from functools import lru_cache
from typing import Optional
from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


SUPPORTED_LOCALES = ("en", "pt-BR")


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    The scheduler endpoints are disabled until SCHEDULER_API_KEY is set.
    Email delivery goes through Resend when RESEND_API_KEY is set.
    """

    # Application Settings
    environment: str = "development"
    debug: bool = False
    log_level: str = "INFO"

    # Database Configuration (SQLModel/SQLAlchemy)
    database_url: str = "sqlite+aiosqlite:///./subtrack.db"
    database_pool_size: int = 5
    database_max_overflow: int = 10
    database_pool_timeout: int = 30
    database_echo: bool = False

    # Renewal notifications
    notification_days_before: int = 10
    notification_locale: str = "en"
    # Stored string for the terminal status (older data uses INACTIVE)
    canceled_status_value: str = "CANCELED"

    # Scheduler trigger
    scheduler_api_key: Optional[str] = None

    # Email delivery (Resend)
    resend_api_key: Optional[str] = None
    resend_api_url: str = "https://api.resend.com/emails"
    resend_from_email: str = "SubTrack <no-reply@subtrack.local>"
    resend_renewal_template_id: Optional[str] = None
    http_timeout_seconds: float = 10.0

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @model_validator(mode="after")
    def validate_notification_settings(self) -> "Settings":
        """Validate the notification window and locale."""
        if self.notification_locale not in SUPPORTED_LOCALES:
            raise ValueError(
                f"NOTIFICATION_LOCALE must be one of {', '.join(SUPPORTED_LOCALES)}"
            )
        if self.notification_days_before < 0:
            raise ValueError("NOTIFICATION_DAYS_BEFORE cannot be negative")
        return self

    @property
    def email_enabled(self) -> bool:
        """Check if an email transport is configured."""
        return bool(self.resend_api_key)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Convenience export for direct import
settings = get_settings()
