"""Appointments booked by the voice agent and their reminders."""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base, TenantMixin, TimestampMixin, UUIDMixin


class Appointment(Base, UUIDMixin, TenantMixin, TimestampMixin):
    """Appointment booked for one of the tenant's customers."""

    __tablename__ = "appointments"

    service_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("services.id"), nullable=True
    )
    customer_name: Mapped[str] = mapped_column(String(200), nullable=False)
    customer_phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    scheduled_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    status: Mapped[str] = mapped_column(String(50), default="scheduled", nullable=False)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)


class AppointmentReminder(Base, UUIDMixin, TenantMixin, TimestampMixin):
    """Scheduled SMS or call reminder for an appointment."""

    __tablename__ = "appointment_reminders"

    appointment_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("appointments.id"), nullable=False, index=True
    )
    channel: Mapped[str] = mapped_column(String(20), default="sms", nullable=False)
    remind_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    status: Mapped[str] = mapped_column(String(50), default="pending", nullable=False)
