"""Application Configuration: environment-driven settings via pydantic-settings.

Invariants:
    - All secrets come from environment variables (never hardcoded)
    - get_settings() is cached (lru_cache): single instance per process
    - Every non-secret setting has a default so the app boots without a .env
"""

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Branding / outbound links
    app_name: str = "यादव समाज वागड़ चौरासी"
    public_url: str = "http://localhost:5173"
    support_whatsapp_number: str = "919982151938"

    @field_validator("public_url", mode="before")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Deep links are built as {public_url}?v=<id>."""
        if isinstance(v, str):
            return v.rstrip("/")
        return v

    # Document store (path-addressed JSON REST API)
    document_store_url: str = "https://samaj-diary-default-rtdb.firebaseio.com"
    document_store_auth: str | None = None
    document_store_timeout_seconds: float = 10.0

    # Messaging gateway (WhatsApp OTP template)
    gateway_url: str = "https://www.fast2sms.com/dev/whatsapp"
    gateway_auth_key: str = "gateway-placeholder"
    gateway_message_id: str = "0"
    gateway_phone_number_id: str = "0"
    gateway_timeout_seconds: float = 15.0

    # Anthropic (daily quote / almanac / name cleanup)
    anthropic_api_key: str = "sk-ant-placeholder"
    anthropic_max_retries: int = 3
    anthropic_timeout_seconds: int = 60
    anthropic_base_delay_ms: int = 1000
    anthropic_max_delay_ms: int = 30_000
    content_model: str = "claude-haiku-4-5-20251001"
    content_max_tokens: int = 500

    # Daily content cache
    content_timezone: str = "Asia/Kolkata"

    # Registration wizard
    otp_expiry_seconds: int = 300
    otp_max_attempts: int = 5
    wizard_ttl_seconds: int = 1800

    # Admin console
    admin_email: str = "admin@example.com"
    admin_password: str = "change-me"
    admin_session_ttl_seconds: int = 12 * 3600

    # API
    cors_origins: list[str] = ["http://localhost:5173"]

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"


@lru_cache
def get_settings() -> Settings:
    return Settings()
