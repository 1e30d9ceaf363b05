"""Role assignments for tenant members."""

import enum
import uuid

from sqlalchemy import Enum, ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base, UUIDMixin


class AppRole(str, enum.Enum):
    """User role within a tenant."""

    ADMIN = "admin"  # Tenant administrator
    STAFF = "staff"  # Front desk / provider
    MEMBER = "member"  # Read-only member


class UserRole(Base, UUIDMixin):
    """A single role granted to a user."""

    __tablename__ = "user_roles"
    __table_args__ = (
        UniqueConstraint("user_id", "role", name="uq_user_role"),
    )

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id"), nullable=False, index=True
    )
    role: Mapped[AppRole] = mapped_column(
        Enum(AppRole, name="app_role_enum"),
        default=AppRole.MEMBER,
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<UserRole user={self.user_id} role={self.role.value}>"
