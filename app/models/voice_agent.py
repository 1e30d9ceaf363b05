"""Voice agent record linking a tenant to its hosted conversational agent."""

from typing import Optional

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base, TenantMixin, TimestampMixin, UUIDMixin


class VoiceAgent(Base, UUIDMixin, TenantMixin, TimestampMixin):
    """Conversational agent provisioned on the voice AI platform.

    agent_id is empty when the tenant never finished agent setup.
    """

    __tablename__ = "voice_agents"

    agent_id: Mapped[Optional[str]] = mapped_column(String(100), nullable=True, index=True)
    name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    def __repr__(self) -> str:
        return f"<VoiceAgent tenant={self.tenant_id} agent={self.agent_id}>"
