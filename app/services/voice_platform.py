"""ElevenLabs Conversational AI client (agent and phone number removal)."""

from typing import Optional

import httpx

from app.core.exceptions import ConfigurationMissingError, ExternalApiError
from app.core.logging import get_logger
from app.services.credentials import VoicePlatformCredentials

logger = get_logger(__name__)

PROVIDER = "ElevenLabs"


class VoicePlatformClient:
    """Thin async client for the voice AI platform.

    Every call is attempted once. A 404 on DELETE means the resource is
    already gone and counts as success.
    """

    def __init__(
        self,
        credentials: Optional[VoicePlatformCredentials],
        timeout: float = 15.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if credentials is None or not credentials.api_key:
            raise ConfigurationMissingError(PROVIDER)
        self.api_key = credentials.api_key
        self.base_url = credentials.api_base.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    def _get_headers(self) -> dict:
        return {"xi-api-key": self.api_key}

    async def _delete(self, endpoint: str) -> bool:
        """Issue a DELETE. Returns False when the resource did not exist."""
        try:
            async with httpx.AsyncClient(
                transport=self._transport,
                timeout=self.timeout,
            ) as client:
                response = await client.delete(
                    f"{self.base_url}{endpoint}",
                    headers=self._get_headers(),
                )
        except httpx.HTTPError as e:
            raise ExternalApiError(PROVIDER, f"{type(e).__name__}: {e}") from e

        if response.status_code == 404:
            logger.info("voice_platform_resource_already_deleted", endpoint=endpoint)
            return False
        if response.is_error:
            raise ExternalApiError(
                PROVIDER,
                _error_message(response),
                status_code=response.status_code,
            )
        return True

    async def delete_agent(self, agent_id: str) -> bool:
        """Delete a conversational agent."""
        return await self._delete(f"/convai/agents/{agent_id}")

    async def delete_phone_number(self, phone_number_id: str) -> bool:
        """Delete a phone number registration (binding) from the platform."""
        return await self._delete(f"/convai/phone-numbers/{phone_number_id}")


def _error_message(response: httpx.Response) -> str:
    fallback = f"HTTP {response.status_code}"
    try:
        data = response.json()
    except ValueError:
        return response.text or fallback

    detail = data.get("detail") if isinstance(data, dict) else None
    if isinstance(detail, dict):
        return detail.get("message") or fallback
    if detail:
        return str(detail)
    if isinstance(data, dict) and data.get("error"):
        return str(data["error"])
    return fallback
