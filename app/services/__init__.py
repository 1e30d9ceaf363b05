"""Business logic services."""

from app.services.teardown_service import TeardownService

__all__ = [
    "TeardownService",
]
