"""Per-tenant advisory lock backed by the tenant_teardown_locks table."""

import secrets
import uuid
from datetime import datetime, timedelta, timezone

from sqlalchemy import delete, insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.logging import get_logger
from app.models.teardown_lock import TenantTeardownLock

logger = get_logger(__name__)


class TeardownLock:
    """Serialises teardowns of the same tenant.

    The primary key on tenant_id is the mutex: a second insert fails until
    the holder releases the row or its TTL passes. Expired rows belong to a
    crashed run and are reclaimed.
    """

    def __init__(self, session: AsyncSession, tenant_id: uuid.UUID, ttl_seconds: int = 900):
        self.session = session
        self.tenant_id = tenant_id
        self.ttl = timedelta(seconds=ttl_seconds)
        self.owner = secrets.token_hex(16)
        self.held = False

    async def acquire(self) -> bool:
        """Try to take the lock. Returns False if another run holds it."""
        now = datetime.now(timezone.utc)

        expired = await self.session.execute(
            delete(TenantTeardownLock)
            .where(
                TenantTeardownLock.tenant_id == self.tenant_id,
                TenantTeardownLock.expires_at < now,
            )
            .execution_options(synchronize_session=False)
        )
        if expired.rowcount:
            logger.warning("teardown_lock_reclaimed", tenant_id=str(self.tenant_id))

        try:
            await self.session.execute(
                insert(TenantTeardownLock).values(
                    tenant_id=self.tenant_id,
                    owner=self.owner,
                    acquired_at=now,
                    expires_at=now + self.ttl,
                )
            )
            await self.session.commit()
        except IntegrityError:
            await self.session.rollback()
            logger.warning("teardown_lock_busy", tenant_id=str(self.tenant_id))
            return False

        self.held = True
        return True

    async def release(self) -> None:
        """Drop the lock row if this run still owns it.

        Anything still pending on the session belongs to an interrupted step
        and is rolled back rather than committed with the release.
        """
        if not self.held:
            return
        await self.session.rollback()
        await self.session.execute(
            delete(TenantTeardownLock)
            .where(
                TenantTeardownLock.tenant_id == self.tenant_id,
                TenantTeardownLock.owner == self.owner,
            )
            .execution_options(synchronize_session=False)
        )
        await self.session.commit()
        self.held = False
