"""Create tenant graph tables and the teardown lock table.

Revision ID: 001
Revises:
Create Date: 2026-10-19
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    ]


def _tenant_fk() -> sa.Column:
    # No ON DELETE CASCADE: teardown removes children explicitly
    return sa.Column("tenant_id", sa.Uuid, sa.ForeignKey("tenants.id"), nullable=False, index=True)


def upgrade() -> None:
    conn = op.get_bind()
    inspector = sa.inspect(conn)
    existing_tables = inspector.get_table_names()

    if "tenants" not in existing_tables:
        op.create_table(
            "tenants",
            sa.Column("id", sa.Uuid, primary_key=True),
            sa.Column("name", sa.String(255), nullable=False),
            sa.Column("slug", sa.String(100), nullable=False, unique=True, index=True),
            sa.Column(
                "status",
                sa.Enum("ACTIVE", "SUSPENDED", "TRIAL", "CANCELLED", name="tenant_status_enum"),
                nullable=False,
            ),
            sa.Column("email", sa.String(255), nullable=False),
            sa.Column("phone", sa.String(50), nullable=True),
            sa.Column("twilio_subaccount_sid", sa.String(64), nullable=True),
            sa.Column("twilio_subaccount_auth_token", sa.Text, nullable=True),
            sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
            *_timestamps(),
        )

    if "users" not in existing_tables:
        op.create_table(
            "users",
            sa.Column("id", sa.Uuid, primary_key=True),
            sa.Column("email", sa.String(255), nullable=False, unique=True, index=True),
            sa.Column("hashed_password", sa.Text, nullable=True),
            sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
            sa.Column("is_admin", sa.Boolean, nullable=False, server_default=sa.false()),
            sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
            sa.Column("last_sign_in_at", sa.DateTime(timezone=True), nullable=True),
        )

    if "profiles" not in existing_tables:
        op.create_table(
            "profiles",
            sa.Column("id", sa.Uuid, sa.ForeignKey("users.id"), primary_key=True),
            _tenant_fk(),
            sa.Column("email", sa.String(255), nullable=False),
            sa.Column("full_name", sa.String(200), nullable=True),
            sa.Column("phone", sa.String(50), nullable=True),
            *_timestamps(),
        )

    if "user_roles" not in existing_tables:
        op.create_table(
            "user_roles",
            sa.Column("id", sa.Uuid, primary_key=True),
            sa.Column("user_id", sa.Uuid, sa.ForeignKey("users.id"), nullable=False, index=True),
            sa.Column("role", sa.Enum("ADMIN", "STAFF", "MEMBER", name="app_role_enum"), nullable=False),
            sa.UniqueConstraint("user_id", "role", name="uq_user_role"),
        )

    if "voice_agents" not in existing_tables:
        op.create_table(
            "voice_agents",
            sa.Column("id", sa.Uuid, primary_key=True),
            _tenant_fk(),
            sa.Column("agent_id", sa.String(100), nullable=True, index=True),
            sa.Column("name", sa.String(255), nullable=True),
            *_timestamps(),
        )

    if "phone_numbers" not in existing_tables:
        op.create_table(
            "phone_numbers",
            sa.Column("id", sa.Uuid, primary_key=True),
            sa.Column("tenant_id", sa.Uuid, sa.ForeignKey("tenants.id"), nullable=True, index=True),
            sa.Column("number", sa.String(20), nullable=False, unique=True, index=True),
            sa.Column("friendly_name", sa.String(100), nullable=True),
            sa.Column("twilio_sid", sa.String(50), nullable=True),
            sa.Column("voice_number_id", sa.String(100), nullable=True),
            sa.Column("is_shared", sa.Boolean, nullable=False, server_default=sa.false()),
            sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
            sa.Column("webhook_configured", sa.Boolean, nullable=False, server_default=sa.false()),
            sa.Column("assigned_at", sa.DateTime(timezone=True), nullable=True),
            *_timestamps(),
        )

    if "services" not in existing_tables:
        op.create_table(
            "services",
            sa.Column("id", sa.Uuid, primary_key=True),
            _tenant_fk(),
            sa.Column("name", sa.String(200), nullable=False),
            sa.Column("description", sa.Text, nullable=True),
            sa.Column("duration_minutes", sa.Integer, nullable=False, server_default="30"),
            sa.Column("price_cents", sa.Integer, nullable=True),
            sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
            *_timestamps(),
        )

    if "calls" not in existing_tables:
        op.create_table(
            "calls",
            sa.Column("id", sa.Uuid, primary_key=True),
            _tenant_fk(),
            sa.Column("phone_number_id", sa.Uuid, sa.ForeignKey("phone_numbers.id"), nullable=True, index=True),
            sa.Column("call_sid", sa.String(255), nullable=True),
            sa.Column("conversation_id", sa.String(255), nullable=True),
            sa.Column("direction", sa.String(20), nullable=True),
            sa.Column("status", sa.String(50), nullable=True),
            sa.Column("caller_number", sa.String(50), nullable=True),
            sa.Column("callee_number", sa.String(50), nullable=True),
            sa.Column("summary", sa.Text, nullable=True),
            sa.Column("started_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
            sa.Column("ended_at", sa.DateTime(timezone=True), nullable=True),
            sa.Column("duration_seconds", sa.Integer, nullable=True),
        )

    if "call_events" not in existing_tables:
        op.create_table(
            "call_events",
            sa.Column("id", sa.Uuid, primary_key=True),
            sa.Column("call_id", sa.Uuid, sa.ForeignKey("calls.id"), nullable=False, index=True),
            sa.Column("event_type", sa.String(100), nullable=False),
            sa.Column("event_data", sa.JSON, nullable=True),
            sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        )

    if "call_transcripts" not in existing_tables:
        op.create_table(
            "call_transcripts",
            sa.Column("id", sa.Uuid, primary_key=True),
            sa.Column("call_id", sa.Uuid, sa.ForeignKey("calls.id"), nullable=False, index=True),
            sa.Column("speaker", sa.String(50), nullable=False),
            sa.Column("text", sa.Text, nullable=False),
            sa.Column("confidence", sa.Float, nullable=True),
            sa.Column("start_time_ms", sa.Integer, nullable=False, server_default="0"),
            sa.Column("end_time_ms", sa.Integer, nullable=False, server_default="0"),
            sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        )

    if "appointments" not in existing_tables:
        op.create_table(
            "appointments",
            sa.Column("id", sa.Uuid, primary_key=True),
            _tenant_fk(),
            sa.Column("service_id", sa.Uuid, sa.ForeignKey("services.id"), nullable=True),
            sa.Column("customer_name", sa.String(200), nullable=False),
            sa.Column("customer_phone", sa.String(50), nullable=True),
            sa.Column("scheduled_at", sa.DateTime(timezone=True), nullable=False),
            sa.Column("status", sa.String(50), nullable=False, server_default="scheduled"),
            sa.Column("notes", sa.Text, nullable=True),
            *_timestamps(),
        )

    if "appointment_reminders" not in existing_tables:
        op.create_table(
            "appointment_reminders",
            sa.Column("id", sa.Uuid, primary_key=True),
            _tenant_fk(),
            sa.Column("appointment_id", sa.Uuid, sa.ForeignKey("appointments.id"), nullable=False, index=True),
            sa.Column("channel", sa.String(20), nullable=False, server_default="sms"),
            sa.Column("remind_at", sa.DateTime(timezone=True), nullable=False),
            sa.Column("status", sa.String(50), nullable=False, server_default="pending"),
            *_timestamps(),
        )

    if "subscriptions" not in existing_tables:
        op.create_table(
            "subscriptions",
            sa.Column("id", sa.Uuid, primary_key=True),
            _tenant_fk(),
            sa.Column("stripe_subscription_id", sa.String(255), nullable=True),
            sa.Column("plan", sa.String(50), nullable=False, server_default="starter"),
            sa.Column("status", sa.String(50), nullable=False, server_default="trialing"),
            sa.Column("current_period_end", sa.DateTime(timezone=True), nullable=True),
            *_timestamps(),
        )

    if "purchased_credits" not in existing_tables:
        op.create_table(
            "purchased_credits",
            sa.Column("id", sa.Uuid, primary_key=True),
            _tenant_fk(),
            sa.Column("minutes", sa.Integer, nullable=False),
            sa.Column("minutes_used", sa.Integer, nullable=False, server_default="0"),
            sa.Column("stripe_payment_intent_id", sa.String(255), nullable=True),
            *_timestamps(),
        )

    if "calendar_connections" not in existing_tables:
        op.create_table(
            "calendar_connections",
            sa.Column("id", sa.Uuid, primary_key=True),
            _tenant_fk(),
            sa.Column("provider", sa.String(50), nullable=False, server_default="google"),
            sa.Column("calendar_id", sa.String(255), nullable=True),
            sa.Column("access_token", sa.Text, nullable=True),
            sa.Column("refresh_token", sa.Text, nullable=True),
            *_timestamps(),
        )

    if "tenant_teardown_locks" not in existing_tables:
        op.create_table(
            "tenant_teardown_locks",
            sa.Column("tenant_id", sa.Uuid, primary_key=True),
            sa.Column("owner", sa.String(64), nullable=False),
            sa.Column("acquired_at", sa.DateTime(timezone=True), nullable=False),
            sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        )


def downgrade() -> None:
    for table in (
        "tenant_teardown_locks",
        "calendar_connections",
        "purchased_credits",
        "subscriptions",
        "appointment_reminders",
        "appointments",
        "call_transcripts",
        "call_events",
        "calls",
        "services",
        "phone_numbers",
        "voice_agents",
        "user_roles",
        "profiles",
        "users",
        "tenants",
    ):
        op.drop_table(table)
    op.execute("DROP TYPE IF EXISTS app_role_enum")
    op.execute("DROP TYPE IF EXISTS tenant_status_enum")
