"""Application configuration using Pydantic Settings."""

from functools import lru_cache
from typing import Any

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Tenant Teardown API"
    app_env: str = "development"
    debug: bool = False
    log_level: str = "INFO"
    api_v1_prefix: str = "/api/v1"
    secret_key: str = "change-me-in-production"

    # Database (PostgreSQL)
    database_url: str = "postgresql+asyncpg://localhost:5432/receptionist"
    database_pool_size: int = 10
    database_max_overflow: int = 20

    # Voice AI platform (ElevenLabs Conversational AI)
    elevenlabs_api_key: str = ""
    elevenlabs_api_base: str = "https://api.elevenlabs.io/v1"

    # Telephony (Twilio) - platform master account
    twilio_account_sid: str = ""
    twilio_auth_token: str = ""

    # Neutral webhooks numbers are pointed at once their tenant is gone
    neutral_voice_webhook_url: str = "https://demo.twilio.com/welcome/voice/"
    neutral_sms_webhook_url: str = "https://demo.twilio.com/welcome/sms/reply"

    # Teardown
    external_request_timeout_seconds: float = 15.0
    teardown_lock_ttl_seconds: int = 900
    reset_shared_number_webhooks: bool = False

    # JWT Settings (admin callers)
    jwt_algorithm: str = "HS256"
    jwt_access_token_expire_minutes: int = 30

    # Platform owners allowed to delete tenants
    super_admin_emails: list[str] = []

    # CORS
    cors_origins: list[str] = ["http://localhost:3000"]

    @field_validator("cors_origins", "super_admin_emails", mode="before")
    @classmethod
    def parse_list(cls, v: Any) -> list[str]:
        if isinstance(v, str):
            import json
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                return [item.strip() for item in v.split(",") if item.strip()]
        return v

    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.app_env.lower() == "production"

    @property
    def voice_platform_configured(self) -> bool:
        """Check if the voice AI platform key is present."""
        return bool(self.elevenlabs_api_key)

    @property
    def telephony_configured(self) -> bool:
        """Check if platform Twilio credentials are present."""
        return bool(self.twilio_account_sid and self.twilio_auth_token)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
