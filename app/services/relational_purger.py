"""Delete every tenant-scoped row, children before parents.

Foreign keys to tenants, calls and phone numbers do not cascade, so the
order of RelationalPurger.steps is load-bearing. Each table is its own
step: it deletes by tenant id (or by the tenant's current call ids for call
children) and commits, so a retry after a failure only redoes what is left.
"""

from typing import Any

from sqlalchemy import delete, select, update
from sqlalchemy.exc import SQLAlchemyError

from app.core.exceptions import DatastoreError
from app.core.logging import get_logger
from app.models.appointment import Appointment, AppointmentReminder
from app.models.billing import PurchasedCredit, Subscription
from app.models.calendar_connection import CalendarConnection
from app.models.call import Call, CallEvent, CallTranscript
from app.models.phone_number import PhoneNumber
from app.models.service import Service
from app.models.tenant import Tenant
from app.models.voice_agent import VoiceAgent
from app.schemas.teardown import StepResult
from app.services.teardown_base import TeardownContext, TeardownStep

logger = get_logger(__name__)


def describe_db_error(error: SQLAlchemyError) -> str:
    """Underlying driver message without SQLAlchemy's statement dump."""
    orig = getattr(error, "orig", None)
    return str(orig) if orig is not None else str(error)


class TableDeleteStep(TeardownStep):
    """Delete all rows of one tenant-scoped table."""

    def __init__(self, table: str, model: Any):
        self.name = table
        self.model = model

    async def purge(self, context: TeardownContext) -> int:
        result = await context.session.execute(
            delete(self.model)
            .where(self.model.tenant_id == context.tenant_id)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    async def run(self, context: TeardownContext) -> StepResult:
        session = context.session
        try:
            count = await self.purge(context)
            await session.commit()
        except SQLAlchemyError as e:
            await session.rollback()
            logger.error("relational_purge_failed", table=self.name, error=describe_db_error(e))
            raise DatastoreError(self.name, describe_db_error(e)) from e

        logger.info("relational_rows_deleted", table=self.name, count=count)
        return StepResult.ok(self.name, f"Deleted {count} row(s)", affected=count)


class CallChildDeleteStep(TableDeleteStep):
    """Delete rows keyed by call id (events, transcripts) for the tenant's calls.

    The tenant's call ids stay inside the database as a subquery; a busy
    tenant can have more calls than one statement can bind.
    """

    async def purge(self, context: TeardownContext) -> int:
        tenant_calls = select(Call.id).where(Call.tenant_id == context.tenant_id)
        result = await context.session.execute(
            delete(self.model)
            .where(self.model.call_id.in_(tenant_calls))
            .execution_options(synchronize_session=False)
        )
        return result.rowcount


class PhoneNumberPurgeStep(TableDeleteStep):
    """Hard-delete the tenant's own numbers, detach shared pool numbers."""

    def __init__(self):
        super().__init__("phone_numbers", PhoneNumber)

    async def purge(self, context: TeardownContext) -> int:
        session = context.session

        detached = await session.execute(
            update(PhoneNumber)
            .where(
                PhoneNumber.tenant_id == context.tenant_id,
                PhoneNumber.is_shared.is_(True),
            )
            .values(tenant_id=None, assigned_at=None, webhook_configured=False)
            .execution_options(synchronize_session=False)
        )
        if detached.rowcount:
            logger.info("shared_phone_numbers_detached", count=detached.rowcount)

        deleted = await session.execute(
            delete(PhoneNumber)
            .where(
                PhoneNumber.tenant_id == context.tenant_id,
                PhoneNumber.is_shared.is_(False),
            )
            .execution_options(synchronize_session=False)
        )
        return deleted.rowcount + detached.rowcount


class RelationalPurger:
    """Ordered set of table steps for the relational store."""

    def __init__(self):
        self.steps: list[TeardownStep] = [
            TableDeleteStep("appointment_reminders", AppointmentReminder),
            TableDeleteStep("appointments", Appointment),
            CallChildDeleteStep("call_transcripts", CallTranscript),
            CallChildDeleteStep("call_events", CallEvent),
            TableDeleteStep("calls", Call),
            TableDeleteStep("services", Service),
            PhoneNumberPurgeStep(),
            TableDeleteStep("purchased_credits", PurchasedCredit),
            TableDeleteStep("subscriptions", Subscription),
            TableDeleteStep("calendar_connections", CalendarConnection),
            TableDeleteStep("voice_agents", VoiceAgent),
        ]

    @property
    def order(self) -> list[str]:
        return [step.name for step in self.steps]


class TenantDeleteStep(TeardownStep):
    """Delete the tenant row itself. Runs after every child is gone."""

    name = "tenant"

    async def run(self, context: TeardownContext) -> StepResult:
        session = context.session
        try:
            result = await session.execute(
                delete(Tenant)
                .where(Tenant.id == context.tenant_id)
                .execution_options(synchronize_session=False)
            )
            await session.commit()
        except SQLAlchemyError as e:
            await session.rollback()
            logger.error("tenant_delete_failed", error=describe_db_error(e))
            raise DatastoreError("tenant", describe_db_error(e)) from e

        return StepResult.ok(self.name, "Tenant deleted", affected=result.rowcount)
