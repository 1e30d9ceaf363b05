"""Call records with their events and transcripts."""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import JSON, DateTime, Float, ForeignKey, Integer, String, Text, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base, TenantMixin, UUIDMixin


class Call(Base, UUIDMixin, TenantMixin):
    """A single inbound or outbound call handled for a tenant."""

    __tablename__ = "calls"

    phone_number_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("phone_numbers.id"), nullable=True, index=True
    )

    # Call identification
    call_sid: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    conversation_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    # Call details
    direction: Mapped[str] = mapped_column(String(20), default="inbound")
    status: Mapped[str] = mapped_column(String(50), default="completed")
    caller_number: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    callee_number: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    summary: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Timing
    started_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    ended_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    duration_seconds: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)


class CallEvent(Base, UUIDMixin):
    """Event emitted while a call was in progress."""

    __tablename__ = "call_events"

    call_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("calls.id"), nullable=False, index=True
    )
    event_type: Mapped[str] = mapped_column(String(100), nullable=False)
    event_data: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )


class CallTranscript(Base, UUIDMixin):
    """Call transcript entries."""

    __tablename__ = "call_transcripts"

    call_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("calls.id"), nullable=False, index=True
    )

    speaker: Mapped[str] = mapped_column(String(50), nullable=False)  # "caller", "agent"
    text: Mapped[str] = mapped_column(Text, nullable=False)
    confidence: Mapped[Optional[float]] = mapped_column(Float, nullable=True)

    start_time_ms: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    end_time_ms: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
