"""Credential resolution for the voice AI platform and the telephony provider."""

from dataclasses import dataclass
from typing import Optional

from app.core.config import Settings, settings as app_settings
from app.models.tenant import Tenant


@dataclass(frozen=True)
class TeardownConfig:
    """Everything the teardown saga needs from the environment.

    Built once from Settings at startup and passed into the service, so tests
    can hand in fake credentials without touching process environment.
    """

    voice_api_key: str = ""
    voice_api_base: str = "https://api.elevenlabs.io/v1"
    twilio_account_sid: str = ""
    twilio_auth_token: str = ""
    neutral_voice_url: str = "https://demo.twilio.com/welcome/voice/"
    neutral_sms_url: str = "https://demo.twilio.com/welcome/sms/reply"
    request_timeout: float = 15.0
    lock_ttl_seconds: int = 900
    reset_shared_number_webhooks: bool = False

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "TeardownConfig":
        settings = settings or app_settings
        return cls(
            voice_api_key=settings.elevenlabs_api_key,
            voice_api_base=settings.elevenlabs_api_base,
            twilio_account_sid=settings.twilio_account_sid,
            twilio_auth_token=settings.twilio_auth_token,
            neutral_voice_url=settings.neutral_voice_webhook_url,
            neutral_sms_url=settings.neutral_sms_webhook_url,
            request_timeout=settings.external_request_timeout_seconds,
            lock_ttl_seconds=settings.teardown_lock_ttl_seconds,
            reset_shared_number_webhooks=settings.reset_shared_number_webhooks,
        )


@dataclass(frozen=True)
class VoicePlatformCredentials:
    api_key: str
    api_base: str


@dataclass(frozen=True)
class TelephonyCredentials:
    """HTTP Basic credentials for one Twilio account."""

    account_sid: str
    auth_token: str
    is_subaccount: bool = False

    def __repr__(self) -> str:
        return f"TelephonyCredentials(account_sid={self.account_sid!r}, is_subaccount={self.is_subaccount})"


def resolve_voice_credentials(config: TeardownConfig) -> Optional[VoicePlatformCredentials]:
    """Return the platform API key, or None when the platform is not configured."""
    if not config.voice_api_key:
        return None
    return VoicePlatformCredentials(api_key=config.voice_api_key, api_base=config.voice_api_base)


def resolve_telephony_credentials(
    tenant: Tenant,
    config: TeardownConfig,
) -> Optional[TelephonyCredentials]:
    """Pick the Twilio account that owns the tenant's numbers.

    A tenant subaccount wins over the platform master account. Returns None
    when neither is available.
    """
    if tenant.has_twilio_subaccount:
        return TelephonyCredentials(
            account_sid=tenant.twilio_subaccount_sid,
            auth_token=tenant.twilio_subaccount_auth_token,
            is_subaccount=True,
        )
    if config.twilio_account_sid and config.twilio_auth_token:
        return TelephonyCredentials(
            account_sid=config.twilio_account_sid,
            auth_token=config.twilio_auth_token,
        )
    return None
