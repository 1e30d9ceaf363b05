"""Shared step interface and run context for the teardown saga."""

import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.phone_number import PhoneNumber
from app.models.tenant import Tenant
from app.schemas.teardown import StepResult
from app.services.credentials import TeardownConfig


@dataclass(frozen=True)
class PhoneNumberRef:
    """What external cleanup needs to know about a number."""

    id: uuid.UUID
    number: str
    twilio_sid: Optional[str]
    voice_number_id: Optional[str]
    is_shared: bool

    @classmethod
    def from_model(cls, phone: PhoneNumber) -> "PhoneNumberRef":
        return cls(
            id=phone.id,
            number=phone.number,
            twilio_sid=phone.twilio_sid,
            voice_number_id=phone.voice_number_id,
            is_shared=phone.is_shared,
        )


@dataclass
class TeardownContext:
    """State shared by every step of one teardown run.

    Phone numbers and the agent id are captured before any step runs, so
    external cleanup never depends on rows that later steps delete.
    """

    session: AsyncSession
    tenant_id: uuid.UUID
    tenant: Tenant
    config: TeardownConfig
    phone_numbers: list[PhoneNumberRef] = field(default_factory=list)
    agent_id: Optional[str] = None


class TeardownStep(ABC):
    """A single named step of the saga."""

    name: str
    # Tolerant steps never stop the saga, even on unexpected errors
    tolerant: bool = False

    @abstractmethod
    async def run(self, context: TeardownContext) -> StepResult:
        """Run the step.

        Tolerant steps report failures as a WARNED result. Steps touching the
        datastore raise DatastoreError, which the orchestrator records as
        FATAL and stops on.
        """
        pass
