"""Tests for Twilio webhook reset."""

import uuid
from dataclasses import replace
from unittest.mock import MagicMock

import pytest
from twilio.base.exceptions import TwilioRestException

from app.core.exceptions import ConfigurationMissingError, ExternalApiError
from app.models.tenant import Tenant
from app.schemas.teardown import StepOutcome
from app.services.credentials import TeardownConfig, TelephonyCredentials
from app.services.teardown_base import PhoneNumberRef, TeardownContext
from app.services.telephony import TelephonyClient
from app.services.telephony_cleaner import TelephonyCleaner


def _number(twilio_sid, is_shared=False) -> PhoneNumberRef:
    return PhoneNumberRef(
        id=uuid.uuid4(),
        number=f"+1415{uuid.uuid4().int % 10**7:07d}",
        twilio_sid=twilio_sid,
        voice_number_id=None,
        is_shared=is_shared,
    )


def _context(config, phone_numbers, subaccount=False) -> TeardownContext:
    tenant_id = uuid.uuid4()
    tenant = Tenant(
        id=tenant_id,
        name="Acme",
        slug="acme",
        email="owner@acme.example.com",
        twilio_subaccount_sid="ACsub" if subaccount else None,
        twilio_subaccount_auth_token="sub-token" if subaccount else None,
    )
    return TeardownContext(
        session=None,
        tenant_id=tenant_id,
        tenant=tenant,
        config=config,
        phone_numbers=list(phone_numbers),
    )


class TestTelephonyClient:
    def test_requires_credentials(self):
        with pytest.raises(ConfigurationMissingError):
            TelephonyClient(None)

    @pytest.mark.asyncio
    async def test_reset_webhooks_posts_neutral_urls(self):
        rest = MagicMock()
        client = TelephonyClient(TelephonyCredentials("ACmaster", "token"), client=rest)

        await client.reset_webhooks(
            "PN123",
            voice_url="https://demo.twilio.com/welcome/voice/",
            sms_url="https://demo.twilio.com/welcome/sms/reply",
        )

        rest.incoming_phone_numbers.assert_called_once_with("PN123")
        rest.incoming_phone_numbers.return_value.update.assert_called_once_with(
            voice_url="https://demo.twilio.com/welcome/voice/",
            voice_method="POST",
            sms_url="https://demo.twilio.com/welcome/sms/reply",
            sms_method="POST",
        )

    @pytest.mark.asyncio
    async def test_rest_error_is_wrapped(self):
        rest = MagicMock()
        rest.incoming_phone_numbers.return_value.update.side_effect = TwilioRestException(
            401, "/Accounts/ACmaster/IncomingPhoneNumbers/PN123.json", msg="Authenticate"
        )
        client = TelephonyClient(TelephonyCredentials("ACmaster", "token"), client=rest)

        with pytest.raises(ExternalApiError) as exc_info:
            await client.reset_webhooks("PN123", voice_url="v", sms_url="s")

        assert exc_info.value.upstream_status == 401
        assert "Authenticate" in exc_info.value.message


class TestTelephonyCleaner:
    @pytest.mark.asyncio
    async def test_subaccount_preferred(self, twilio_fake, config):
        cleaner = TelephonyCleaner(twilio_fake.client_factory)

        result = await cleaner.run(_context(config, [_number("PN1")], subaccount=True))

        assert result.outcome == StepOutcome.OK
        assert "subaccount" in result.detail
        assert twilio_fake.updates[0][0] == "ACsub"

    @pytest.mark.asyncio
    async def test_master_account_fallback(self, twilio_fake, config):
        cleaner = TelephonyCleaner(twilio_fake.client_factory)

        result = await cleaner.run(_context(config, [_number("PN1"), _number("PN2")]))

        assert result.outcome == StepOutcome.OK
        assert result.affected == 2
        assert "main account" in result.detail
        assert {account for account, _, _ in twilio_fake.updates} == {"ACmaster"}
        _, _, kwargs = twilio_fake.updates[0]
        assert kwargs == {
            "voice_url": config.neutral_voice_url,
            "voice_method": "POST",
            "sms_url": config.neutral_sms_url,
            "sms_method": "POST",
        }

    @pytest.mark.asyncio
    async def test_no_credentials_is_a_warning(self, twilio_fake):
        cleaner = TelephonyCleaner(twilio_fake.client_factory)

        result = await cleaner.run(_context(TeardownConfig(), [_number("PN1")]))

        assert result.outcome == StepOutcome.WARNED
        assert twilio_fake.updates == []

    @pytest.mark.asyncio
    async def test_no_numbers_is_ok(self, twilio_fake, config):
        cleaner = TelephonyCleaner(twilio_fake.client_factory)

        result = await cleaner.run(_context(config, [_number(None)]))

        assert result.outcome == StepOutcome.OK
        assert twilio_fake.credentials == []

    @pytest.mark.asyncio
    async def test_failed_number_does_not_stop_the_rest(self, twilio_fake, config):
        twilio_fake.failing.add("PN2")
        cleaner = TelephonyCleaner(twilio_fake.client_factory)

        result = await cleaner.run(
            _context(config, [_number("PN1"), _number("PN2"), _number("PN3")])
        )

        assert result.outcome == StepOutcome.WARNED
        assert result.detail == "Reset 2 of 3 webhook(s) via main account"
        assert len(result.errors) == 1
        assert twilio_fake.reset_sids == ["PN1", "PN2", "PN3"]

    @pytest.mark.asyncio
    async def test_shared_numbers_skipped_by_default(self, twilio_fake, config):
        cleaner = TelephonyCleaner(twilio_fake.client_factory)

        await cleaner.run(_context(config, [_number("PN1"), _number("PNshared", is_shared=True)]))

        assert twilio_fake.reset_sids == ["PN1"]

    @pytest.mark.asyncio
    async def test_shared_numbers_reset_when_enabled(self, twilio_fake, config):
        cleaner = TelephonyCleaner(twilio_fake.client_factory)
        config = replace(config, reset_shared_number_webhooks=True)

        await cleaner.run(_context(config, [_number("PN1"), _number("PNshared", is_shared=True)]))

        assert twilio_fake.reset_sids == ["PN1", "PNshared"]
