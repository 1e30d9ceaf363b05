"""Advisory lock row held while a tenant is being torn down."""

from datetime import datetime
import uuid

from sqlalchemy import DateTime, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base


class TenantTeardownLock(Base):
    """One row per tenant whose teardown is running.

    Deliberately not a foreign key to tenants: the lock outlives the tenant
    row until the saga releases it.
    """

    __tablename__ = "tenant_teardown_locks"

    tenant_id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True)
    owner: Mapped[str] = mapped_column(String(64), nullable=False)
    acquired_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
