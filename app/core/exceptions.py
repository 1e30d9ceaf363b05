"""Error taxonomy for tenant teardown.

Fatal errors stop the saga and are reported to the caller. Tolerated errors
(missing provider configuration, provider API failures) are caught inside the
external cleanup steps and end up in the step ledger instead.
"""

import uuid
from typing import Optional


class TeardownError(Exception):
    """Base class for teardown errors."""

    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class TenantNotFoundError(TeardownError):
    """The tenant does not exist (or was already torn down)."""

    status_code = 404

    def __init__(self, tenant_id: uuid.UUID):
        super().__init__("Tenant not found")
        self.tenant_id = tenant_id


class TeardownInProgressError(TeardownError):
    """Another teardown holds the lock for this tenant."""

    status_code = 409

    def __init__(self, tenant_id: uuid.UUID):
        super().__init__("Teardown already in progress for this tenant")
        self.tenant_id = tenant_id


class ConfigurationMissingError(TeardownError):
    """Credentials for an external provider are not configured."""

    def __init__(self, provider: str):
        super().__init__(f"{provider} credentials not configured")
        self.provider = provider


class ExternalApiError(TeardownError):
    """A call to the voice platform or telephony provider failed."""

    status_code = 502

    def __init__(self, provider: str, message: str, status_code: Optional[int] = None):
        super().__init__(f"{provider} API error: {message}")
        self.provider = provider
        self.upstream_status = status_code


class DatastoreError(TeardownError):
    """A delete against the relational or identity store failed."""

    def __init__(self, step: str, message: str):
        super().__init__(f"Failed to delete {step}: {message}")
        self.step = step
