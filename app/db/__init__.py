"""Database module."""

from app.db.base import Base, TenantMixin, TimestampMixin, UUIDMixin

__all__ = ["Base", "TenantMixin", "TimestampMixin", "UUIDMixin"]
