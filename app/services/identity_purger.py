"""Remove tenant members: role rows, profiles, then auth identities."""

import uuid
from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import DatastoreError
from app.core.logging import get_logger
from app.models.profile import UserProfile
from app.models.user import User
from app.models.user_role import UserRole
from app.schemas.teardown import StepResult
from app.services.relational_purger import describe_db_error
from app.services.teardown_base import TeardownContext, TeardownStep

logger = get_logger(__name__)


class LocalAuthAdmin:
    """Deletes authentication identities stored in the users table."""

    async def delete_user(self, session: AsyncSession, user_id: uuid.UUID) -> None:
        await session.execute(
            delete(User)
            .where(User.id == user_id)
            .execution_options(synchronize_session=False)
        )
        await session.commit()


class IdentityPurger(TeardownStep):
    """Purge the tenant's member users.

    Roles and profiles are fatal on failure; an orphaned profile would leave
    tenant data behind. Auth identities are best-effort per user. One that
    fails to delete is left behind as residual state: it has no profile or
    role, so it grants nothing, and later runs do not revisit it.
    """

    name = "identities"

    def __init__(self, auth_admin: Optional[LocalAuthAdmin] = None):
        self.auth_admin = auth_admin or LocalAuthAdmin()

    async def _delete_table(self, session: AsyncSession, table: str, statement) -> None:
        try:
            await session.execute(statement.execution_options(synchronize_session=False))
            await session.commit()
        except SQLAlchemyError as e:
            await session.rollback()
            logger.error("identity_purge_failed", table=table, error=describe_db_error(e))
            raise DatastoreError(table, describe_db_error(e)) from e

    async def run(self, context: TeardownContext) -> StepResult:
        session = context.session
        tenant_members = select(UserProfile.id).where(UserProfile.tenant_id == context.tenant_id)

        try:
            result = await session.execute(tenant_members)
            user_ids = list(result.scalars().all())
        except SQLAlchemyError as e:
            await session.rollback()
            raise DatastoreError("profiles", describe_db_error(e)) from e

        if not user_ids:
            return StepResult.ok(self.name, "No member users")

        await self._delete_table(
            session,
            "user_roles",
            delete(UserRole).where(UserRole.user_id.in_(tenant_members)),
        )
        await self._delete_table(
            session,
            "profiles",
            delete(UserProfile).where(UserProfile.tenant_id == context.tenant_id),
        )
        logger.info("member_profiles_deleted", count=len(user_ids))

        errors: list[str] = []
        for user_id in user_ids:
            try:
                await self.auth_admin.delete_user(session, user_id)
            except Exception as e:
                await session.rollback()
                errors.append(f"auth user {user_id}: {e}")
                logger.warning("auth_user_delete_failed", user_id=str(user_id), error=str(e))

        if errors:
            return StepResult.warned(
                self.name,
                f"Removed {len(user_ids)} member(s); {len(errors)} auth identity deletion(s) failed",
                errors=errors,
                affected=len(user_ids),
            )
        return StepResult.ok(self.name, f"Removed {len(user_ids)} member(s)", affected=len(user_ids))
