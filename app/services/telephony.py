"""Twilio wrapper used to neutralise phone number routing."""

import asyncio
from typing import Optional

from twilio.base.exceptions import TwilioException, TwilioRestException
from twilio.http.http_client import TwilioHttpClient
from twilio.rest import Client as TwilioClient

from app.core.exceptions import ConfigurationMissingError, ExternalApiError
from app.services.credentials import TelephonyCredentials

PROVIDER = "Twilio"


class TelephonyClient:
    """Twilio REST client bound to one account (master or subaccount).

    The SDK authenticates with HTTP Basic using the account SID and auth
    token, and scopes IncomingPhoneNumbers calls to that account.
    """

    def __init__(
        self,
        credentials: Optional[TelephonyCredentials],
        timeout: float = 15.0,
        client: Optional[TwilioClient] = None,
    ):
        if credentials is None:
            raise ConfigurationMissingError(PROVIDER)
        self.credentials = credentials
        self._client = client or TwilioClient(
            credentials.account_sid,
            credentials.auth_token,
            http_client=TwilioHttpClient(timeout=timeout),
        )

    async def reset_webhooks(self, twilio_sid: str, voice_url: str, sms_url: str) -> None:
        """Point a number's voice and SMS webhooks at neutral endpoints.

        The number stays allocated on the account; nothing is released.
        """
        try:
            # The SDK is blocking; keep the event loop free while it runs
            await asyncio.to_thread(
                self._client.incoming_phone_numbers(twilio_sid).update,
                voice_url=voice_url,
                voice_method="POST",
                sms_url=sms_url,
                sms_method="POST",
            )
        except TwilioRestException as e:
            raise ExternalApiError(PROVIDER, e.msg or str(e), status_code=e.status) from e
        except (TwilioException, OSError) as e:
            # requests' connection errors and timeouts are OSErrors
            raise ExternalApiError(PROVIDER, f"{type(e).__name__}: {e}") from e
