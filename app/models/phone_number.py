"""Phone number model for multi-tenant telephony."""

from datetime import datetime
from typing import Optional
import uuid

from sqlalchemy import Boolean, DateTime, ForeignKey, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base, TimestampMixin, UUIDMixin


class PhoneNumber(Base, UUIDMixin, TimestampMixin):
    """Phone number owned by (or lent to) a tenant.

    Shared numbers belong to the free-tier pool. They are detached from a
    tenant on teardown but never released or unregistered.
    """

    __tablename__ = "phone_numbers"

    # Nullable so shared numbers can sit in the pool unassigned
    tenant_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("tenants.id"), nullable=True, index=True
    )

    # The actual phone number (E.164 format)
    number: Mapped[str] = mapped_column(String(20), unique=True, nullable=False, index=True)
    friendly_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    # Twilio SID for this number
    twilio_sid: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    # Phone number id registered on the voice AI platform
    voice_number_id: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    is_shared: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    # Status
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    webhook_configured: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    assigned_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    @property
    def is_available(self) -> bool:
        """Check if number is available for assignment."""
        return self.is_active and self.tenant_id is None

    def __repr__(self) -> str:
        return f"<PhoneNumber {self.number}>"
