"""Tenant model for multi-tenancy."""

import enum
from typing import Optional

from sqlalchemy import Boolean, Enum, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base, TimestampMixin, UUIDMixin


class TenantStatus(str, enum.Enum):
    """Tenant account status."""

    ACTIVE = "active"
    SUSPENDED = "suspended"
    TRIAL = "trial"
    CANCELLED = "cancelled"


class Tenant(Base, UUIDMixin, TimestampMixin):
    """Tenant (business account) model.

    Root of everything provisioned for a customer. Children reference it
    without cascading deletes, so it is always the last row removed.
    """

    __tablename__ = "tenants"

    # Basic info
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(100), unique=True, nullable=False, index=True)
    status: Mapped[TenantStatus] = mapped_column(
        Enum(TenantStatus, name="tenant_status_enum"),
        default=TenantStatus.TRIAL,
        nullable=False,
    )

    # Contact
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    phone: Mapped[Optional[str]] = mapped_column(String(50))

    # Telephony subaccount (takes priority over platform credentials)
    twilio_subaccount_sid: Mapped[Optional[str]] = mapped_column(String(64))
    twilio_subaccount_auth_token: Mapped[Optional[str]] = mapped_column(Text)

    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    @property
    def has_twilio_subaccount(self) -> bool:
        return bool(self.twilio_subaccount_sid and self.twilio_subaccount_auth_token)

    def __repr__(self) -> str:
        return f"<Tenant {self.slug}>"
