"""Step ledger and API schemas for tenant teardown."""

import enum
import uuid
from typing import Optional

from pydantic import BaseModel, Field


class StepOutcome(str, enum.Enum):
    """How a teardown step ended."""

    OK = "ok"
    WARNED = "warned"  # tolerated failure, saga continued
    FATAL = "fatal"  # saga stopped here


class StepResult(BaseModel):
    """One entry of the teardown ledger."""

    step: str
    outcome: StepOutcome
    detail: str = ""
    errors: list[str] = Field(default_factory=list)
    affected: int = 0

    @classmethod
    def ok(cls, step: str, detail: str = "", affected: int = 0) -> "StepResult":
        return cls(step=step, outcome=StepOutcome.OK, detail=detail, affected=affected)

    @classmethod
    def warned(
        cls,
        step: str,
        detail: str,
        errors: Optional[list[str]] = None,
        affected: int = 0,
    ) -> "StepResult":
        return cls(
            step=step,
            outcome=StepOutcome.WARNED,
            detail=detail,
            errors=errors or [],
            affected=affected,
        )

    @classmethod
    def fatal(cls, step: str, detail: str) -> "StepResult":
        return cls(step=step, outcome=StepOutcome.FATAL, detail=detail)

    @property
    def is_fatal(self) -> bool:
        return self.outcome == StepOutcome.FATAL


class TeardownResult(BaseModel):
    """Overall result of a teardown run plus its ordered ledger."""

    tenant_id: uuid.UUID
    success: bool
    steps: list[StepResult] = Field(default_factory=list)
    failed_step: Optional[str] = None
    error: Optional[str] = None

    @property
    def warnings(self) -> list[StepResult]:
        return [s for s in self.steps if s.outcome == StepOutcome.WARNED]

    def step(self, name: str) -> Optional[StepResult]:
        """Look up a ledger entry by step name."""
        for entry in self.steps:
            if entry.step == name:
                return entry
        return None


class TeardownResponse(BaseModel):
    """Response body of the admin delete-tenant endpoint."""

    success: bool
    message: Optional[str] = None
    error: Optional[str] = None
    tenant_id: Optional[uuid.UUID] = None
    failed_step: Optional[str] = None
    steps: list[StepResult] = Field(default_factory=list)
