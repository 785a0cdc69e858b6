"""Configuration and environment loading for the academy portal."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Supabase
    supabase_url: str
    supabase_service_role_key: str

    # Email (Resend)
    resend_api_key: str | None = None  # Unset = log-only email sender
    email_api_url: str = "https://api.resend.com/emails"
    email_from: str = "UC Investment Academy <onboarding@resend.dev>"
    email_timeout_seconds: float = 10.0

    # Admin sessions
    admin_session_ttl_minutes: int = 480
    login_max_attempts: int = 5
    login_lockout_seconds: int = 900

    # Listings
    applications_page_size: int = 10

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = False


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
