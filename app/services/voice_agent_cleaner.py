"""Remove a tenant's agent and phone number bindings from the voice AI platform."""

from typing import Callable, Optional

from app.core.exceptions import ConfigurationMissingError, ExternalApiError
from app.core.logging import get_logger
from app.schemas.teardown import StepResult
from app.services.credentials import (
    TeardownConfig,
    VoicePlatformCredentials,
    resolve_voice_credentials,
)
from app.services.teardown_base import TeardownContext, TeardownStep
from app.services.voice_platform import VoicePlatformClient

logger = get_logger(__name__)

VoiceClientFactory = Callable[[Optional[VoicePlatformCredentials], TeardownConfig], VoicePlatformClient]


def default_voice_client(
    credentials: Optional[VoicePlatformCredentials],
    config: TeardownConfig,
) -> VoicePlatformClient:
    return VoicePlatformClient(credentials, timeout=config.request_timeout)


class VoiceAgentCleaner(TeardownStep):
    """Best-effort deletion of the agent and its bindings.

    Bindings go first because they reference the agent. Each call is
    isolated: one failure never prevents the remaining calls.
    """

    name = "voice_agent"
    tolerant = True

    def __init__(self, client_factory: Optional[VoiceClientFactory] = None):
        self._client_factory = client_factory or default_voice_client

    async def run(self, context: TeardownContext) -> StepResult:
        try:
            client = self._client_factory(resolve_voice_credentials(context.config), context.config)
        except ConfigurationMissingError as e:
            logger.warning(
                "voice_platform_not_configured",
                agent_id=context.agent_id,
                error=e.message,
            )
            return StepResult.warned(self.name, "Voice platform not configured; cleanup skipped")

        # Shared numbers keep their registration, other tenants still use it
        bindings = [
            phone for phone in context.phone_numbers
            if phone.voice_number_id and not phone.is_shared
        ]

        if not context.agent_id and not bindings:
            logger.info("voice_agent_not_provisioned")
            return StepResult.ok(self.name, "No agent provisioned")

        errors: list[str] = []
        deleted = 0

        for phone in bindings:
            try:
                await client.delete_phone_number(phone.voice_number_id)
                deleted += 1
                logger.info("voice_binding_deleted", phone_number=phone.number)
            except ExternalApiError as e:
                errors.append(f"binding {phone.number}: {e.message}")
                logger.warning(
                    "voice_binding_delete_failed",
                    phone_number=phone.number,
                    status=e.upstream_status,
                    error=e.message,
                )

        if context.agent_id:
            try:
                await client.delete_agent(context.agent_id)
                deleted += 1
                logger.info("voice_agent_deleted", agent_id=context.agent_id)
            except ExternalApiError as e:
                errors.append(f"agent {context.agent_id}: {e.message}")
                logger.warning(
                    "voice_agent_delete_failed",
                    agent_id=context.agent_id,
                    status=e.upstream_status,
                    error=e.message,
                )

        if errors:
            return StepResult.warned(
                self.name,
                f"{len(errors)} voice platform deletion(s) failed",
                errors=errors,
                affected=deleted,
            )
        return StepResult.ok(
            self.name,
            f"Deleted agent and {len(bindings)} binding(s)" if context.agent_id
            else f"Deleted {len(bindings)} binding(s)",
            affected=deleted,
        )
