"""Billing records: subscriptions and purchased call credits."""

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base, TenantMixin, TimestampMixin, UUIDMixin


class Subscription(Base, UUIDMixin, TenantMixin, TimestampMixin):
    """Stripe subscription backing a tenant's plan."""

    __tablename__ = "subscriptions"

    stripe_subscription_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    plan: Mapped[str] = mapped_column(String(50), default="starter", nullable=False)
    status: Mapped[str] = mapped_column(String(50), default="trialing", nullable=False)
    current_period_end: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )


class PurchasedCredit(Base, UUIDMixin, TenantMixin, TimestampMixin):
    """One-off top-up of call minutes."""

    __tablename__ = "purchased_credits"

    minutes: Mapped[int] = mapped_column(Integer, nullable=False)
    minutes_used: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    stripe_payment_intent_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
