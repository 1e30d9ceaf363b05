"""Reset Twilio webhooks so calls stop reaching a deleted tenant."""

from typing import Callable, Optional

from app.core.exceptions import ConfigurationMissingError, ExternalApiError
from app.core.logging import get_logger
from app.schemas.teardown import StepResult
from app.services.credentials import (
    TeardownConfig,
    TelephonyCredentials,
    resolve_telephony_credentials,
)
from app.services.teardown_base import TeardownContext, TeardownStep
from app.services.telephony import TelephonyClient

logger = get_logger(__name__)

TelephonyClientFactory = Callable[[Optional[TelephonyCredentials], TeardownConfig], TelephonyClient]


def default_telephony_client(
    credentials: Optional[TelephonyCredentials],
    config: TeardownConfig,
) -> TelephonyClient:
    return TelephonyClient(credentials, timeout=config.request_timeout)


class TelephonyCleaner(TeardownStep):
    """Point each number's inbound webhooks at a neutral placeholder.

    Numbers are not released: they stay allocated (and billed) on the Twilio
    account so an operator can reuse them.
    """

    name = "telephony"
    tolerant = True

    def __init__(self, client_factory: Optional[TelephonyClientFactory] = None):
        self._client_factory = client_factory or default_telephony_client

    async def run(self, context: TeardownContext) -> StepResult:
        config = context.config
        numbers = [
            phone for phone in context.phone_numbers
            if phone.twilio_sid and (not phone.is_shared or config.reset_shared_number_webhooks)
        ]

        if not numbers:
            return StepResult.ok(self.name, "No telephony numbers to reset")

        credentials = resolve_telephony_credentials(context.tenant, config)
        try:
            client = self._client_factory(credentials, config)
        except ConfigurationMissingError as e:
            logger.warning(
                "telephony_not_configured",
                numbers=[phone.number for phone in numbers],
                error=e.message,
            )
            return StepResult.warned(self.name, "No Twilio credentials available; webhooks not reset")

        account = "subaccount" if credentials.is_subaccount else "main account"
        errors: list[str] = []
        reset = 0

        for phone in numbers:
            try:
                await client.reset_webhooks(
                    phone.twilio_sid,
                    voice_url=config.neutral_voice_url,
                    sms_url=config.neutral_sms_url,
                )
                reset += 1
                logger.info("telephony_webhook_reset", phone_number=phone.number, account=account)
            except ExternalApiError as e:
                errors.append(f"{phone.number}: {e.message}")
                logger.warning(
                    "telephony_webhook_reset_failed",
                    phone_number=phone.number,
                    account=account,
                    status=e.upstream_status,
                    error=e.message,
                )

        if errors:
            return StepResult.warned(
                self.name,
                f"Reset {reset} of {len(numbers)} webhook(s) via {account}",
                errors=errors,
                affected=reset,
            )
        return StepResult.ok(self.name, f"Reset {reset} webhook(s) via {account}", affected=reset)
