"""Pydantic schemas for API requests and responses."""

from app.schemas.teardown import (
    StepOutcome,
    StepResult,
    TeardownResponse,
    TeardownResult,
)

__all__ = [
    "StepOutcome",
    "StepResult",
    "TeardownResponse",
    "TeardownResult",
]
