"""Tenant teardown orchestration.

Runs the saga that removes a tenant from the voice AI platform, Twilio and
the database:

    voice agent -> telephony -> relational tables -> identities -> tenant

External cleanup is best-effort and never blocks the purge. Any datastore
failure stops the run at that step; earlier steps stay committed, so the
same call can simply be retried.
"""

import uuid
from typing import Optional

import structlog
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import DatastoreError, TeardownInProgressError, TenantNotFoundError
from app.core.logging import get_logger
from app.models.phone_number import PhoneNumber
from app.models.tenant import Tenant
from app.models.voice_agent import VoiceAgent
from app.schemas.teardown import StepOutcome, StepResult, TeardownResult
from app.services.credentials import TeardownConfig
from app.services.identity_purger import IdentityPurger, LocalAuthAdmin
from app.services.relational_purger import RelationalPurger, TenantDeleteStep
from app.services.teardown_base import PhoneNumberRef, TeardownContext, TeardownStep
from app.services.teardown_lock import TeardownLock
from app.services.telephony_cleaner import TelephonyCleaner, TelephonyClientFactory
from app.services.voice_agent_cleaner import VoiceAgentCleaner, VoiceClientFactory

logger = get_logger(__name__)


class TeardownService:
    """Deletes a tenant and everything provisioned for it."""

    def __init__(
        self,
        session: AsyncSession,
        config: Optional[TeardownConfig] = None,
        voice_client_factory: Optional[VoiceClientFactory] = None,
        telephony_client_factory: Optional[TelephonyClientFactory] = None,
        auth_admin: Optional[LocalAuthAdmin] = None,
    ):
        self.session = session
        self.config = config or TeardownConfig.from_settings()
        self.voice_agent_cleaner = VoiceAgentCleaner(voice_client_factory)
        self.telephony_cleaner = TelephonyCleaner(telephony_client_factory)
        self.relational_purger = RelationalPurger()
        self.identity_purger = IdentityPurger(auth_admin)

    def build_plan(self) -> list[TeardownStep]:
        """Steps in execution order."""
        return [
            self.voice_agent_cleaner,
            self.telephony_cleaner,
            *self.relational_purger.steps,
            self.identity_purger,
            TenantDeleteStep(),
        ]

    async def teardown(self, tenant_id: uuid.UUID) -> TeardownResult:
        """Tear down a tenant.

        Raises:
            TenantNotFoundError: no such tenant (including one already torn down).
            TeardownInProgressError: another run holds this tenant's lock.
        """
        with structlog.contextvars.bound_contextvars(
            tenant_id=str(tenant_id),
            teardown_id=uuid.uuid4().hex[:12],
        ):
            if await self._load_tenant(tenant_id) is None:
                raise TenantNotFoundError(tenant_id)

            lock = TeardownLock(self.session, tenant_id, ttl_seconds=self.config.lock_ttl_seconds)
            if not await lock.acquire():
                raise TeardownInProgressError(tenant_id)

            try:
                # A run that finished while we waited leaves nothing to do
                tenant = await self._load_tenant(tenant_id)
                if tenant is None:
                    raise TenantNotFoundError(tenant_id)

                logger.info("tenant_teardown_started", tenant_name=tenant.name)
                context = await self._build_context(tenant)
                return await self._run(context)
            finally:
                await self._release(lock)

    async def _load_tenant(self, tenant_id: uuid.UUID) -> Optional[Tenant]:
        result = await self.session.execute(
            select(Tenant)
            .where(Tenant.id == tenant_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def _build_context(self, tenant: Tenant) -> TeardownContext:
        result = await self.session.execute(
            select(PhoneNumber).where(PhoneNumber.tenant_id == tenant.id)
        )
        phone_numbers = [PhoneNumberRef.from_model(p) for p in result.scalars().all()]

        result = await self.session.execute(
            select(VoiceAgent.agent_id)
            .where(VoiceAgent.tenant_id == tenant.id, VoiceAgent.agent_id.is_not(None))
            .limit(1)
        )
        agent_id = result.scalar_one_or_none()

        logger.info(
            "tenant_snapshot_loaded",
            agent_id=agent_id,
            phone_numbers=[p.number for p in phone_numbers],
        )
        return TeardownContext(
            session=self.session,
            tenant_id=tenant.id,
            tenant=tenant,
            config=self.config,
            phone_numbers=phone_numbers,
            agent_id=agent_id,
        )

    async def _run(self, context: TeardownContext) -> TeardownResult:
        ledger: list[StepResult] = []

        for step in self.build_plan():
            result = await self._run_step(step, context)
            ledger.append(result)

            if result.is_fatal:
                logger.error("tenant_teardown_aborted", step=step.name, error=result.detail)
                return TeardownResult(
                    tenant_id=context.tenant_id,
                    success=False,
                    steps=ledger,
                    failed_step=step.name,
                    error=result.detail,
                )

        warnings = [r.step for r in ledger if r.outcome == StepOutcome.WARNED]
        logger.info("tenant_teardown_completed", steps=len(ledger), warnings=warnings)
        return TeardownResult(tenant_id=context.tenant_id, success=True, steps=ledger)

    async def _run_step(self, step: TeardownStep, context: TeardownContext) -> StepResult:
        logger.info("teardown_step_started", step=step.name)
        try:
            return await step.run(context)
        except DatastoreError as e:
            return StepResult.fatal(step.name, e.message)
        except Exception as e:
            if not step.tolerant:
                raise
            logger.exception("teardown_step_crashed", step=step.name)
            return StepResult.warned(step.name, f"Unexpected error: {e}", errors=[str(e)])

    async def _release(self, lock: TeardownLock) -> None:
        try:
            await lock.release()
        except SQLAlchemyError as e:
            await self.session.rollback()
            # The row expires on its own after the TTL
            logger.error("teardown_lock_release_failed", error=str(e))
