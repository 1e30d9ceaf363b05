"""External calendar connected to a tenant account."""

from typing import Optional

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base, TenantMixin, TimestampMixin, UUIDMixin


class CalendarConnection(Base, UUIDMixin, TenantMixin, TimestampMixin):
    """OAuth connection to a calendar provider."""

    __tablename__ = "calendar_connections"

    provider: Mapped[str] = mapped_column(String(50), default="google", nullable=False)
    calendar_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    access_token: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    refresh_token: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
