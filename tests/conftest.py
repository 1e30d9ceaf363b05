"""Pytest configuration and fixtures."""

import uuid
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from typing import Optional
from unittest.mock import MagicMock

import httpx
import pytest
from sqlalchemy import event, text
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from twilio.base.exceptions import TwilioRestException

import app.models  # noqa: F401
from app.db.base import Base
from app.models import (
    AppRole,
    Appointment,
    AppointmentReminder,
    CalendarConnection,
    Call,
    CallEvent,
    CallTranscript,
    PhoneNumber,
    PurchasedCredit,
    Service,
    Subscription,
    Tenant,
    TenantStatus,
    User,
    UserProfile,
    UserRole,
    VoiceAgent,
)
from app.services.credentials import TeardownConfig
from app.services.telephony import TelephonyClient
from app.services.voice_platform import VoicePlatformClient

VOICE_API_BASE = "https://voice.test/v1"


@pytest.fixture
async def db_session():
    """Create a test database session with foreign keys enforced."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        poolclass=StaticPool,
    )

    @event.listens_for(engine.sync_engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async_session = sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False
    )

    async with async_session() as session:
        yield session

    await engine.dispose()


@pytest.fixture
def config():
    """Teardown config with platform credentials for both providers."""
    return TeardownConfig(
        voice_api_key="xi-test-key",
        voice_api_base=VOICE_API_BASE,
        twilio_account_sid="ACmaster",
        twilio_auth_token="master-token",
    )


class FakeVoicePlatform:
    """Records DELETE calls made against the voice AI platform."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        # path -> status code to return instead of 200
        self.responses: dict[str, int] = {}

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        status = self.responses.get(request.url.path, 200)
        if status >= 400:
            return httpx.Response(
                status,
                json={"detail": {"status": "error", "message": f"upstream returned {status}"}},
            )
        return httpx.Response(status, json={})

    @property
    def paths(self) -> list[str]:
        return [request.url.path for request in self.requests]

    def fail(self, path: str, status: int = 500) -> None:
        self.responses[f"/v1{path}"] = status

    def client_factory(self, credentials, config):
        return VoicePlatformClient(
            credentials,
            timeout=config.request_timeout,
            transport=httpx.MockTransport(self.handler),
        )


class FakeTwilio:
    """Stands in for the Twilio REST client, one per resolved account."""

    def __init__(self):
        # (account_sid, number_sid, update kwargs)
        self.updates: list[tuple[str, str, dict]] = []
        self.failing: set[str] = set()
        self.credentials = []

    def _rest_client(self, account_sid: str) -> MagicMock:
        rest = MagicMock()

        def incoming_phone_numbers(sid):
            number = MagicMock()

            def update(**kwargs):
                self.updates.append((account_sid, sid, kwargs))
                if sid in self.failing:
                    raise TwilioRestException(
                        404,
                        f"/Accounts/{account_sid}/IncomingPhoneNumbers/{sid}.json",
                        msg="The requested resource was not found",
                    )

            number.update.side_effect = update
            return number

        rest.incoming_phone_numbers.side_effect = incoming_phone_numbers
        return rest

    @property
    def reset_sids(self) -> list[str]:
        return [sid for _, sid, _ in self.updates]

    def client_factory(self, credentials, config):
        self.credentials.append(credentials)
        rest = self._rest_client(credentials.account_sid) if credentials else None
        return TelephonyClient(credentials, timeout=config.request_timeout, client=rest)


@pytest.fixture
def voice_platform():
    return FakeVoicePlatform()


@pytest.fixture
def twilio_fake():
    return FakeTwilio()


def _random_number() -> str:
    return f"+1415{uuid.uuid4().int % 10**7:07d}"


@pytest.fixture
def seed_tenant(db_session):
    """Factory that seeds a fully provisioned tenant.

    Returns plain ids (not ORM instances) so tests can re-query after the
    session has been committed or rolled back.
    """

    async def _seed(
        slug: str = "acme-dental",
        agent_id: Optional[str] = "agent_A1",
        subaccount: bool = False,
        calls: int = 3,
        own_number: bool = True,
        shared_number: bool = True,
        members: int = 1,
    ) -> SimpleNamespace:
        now = datetime.now(timezone.utc)
        tenant_id = uuid.uuid4()
        db_session.add(
            Tenant(
                id=tenant_id,
                name=slug.replace("-", " ").title(),
                slug=slug,
                email=f"owner@{slug}.example.com",
                status=TenantStatus.ACTIVE,
                twilio_subaccount_sid=f"AC{slug}" if subaccount else None,
                twilio_subaccount_auth_token="sub-token" if subaccount else None,
            )
        )
        await db_session.flush()

        own_number_id = uuid.uuid4() if own_number else None
        shared_number_id = uuid.uuid4() if shared_number else None
        service_id = uuid.uuid4()
        appointment_id = uuid.uuid4()

        db_session.add_all([
            VoiceAgent(tenant_id=tenant_id, agent_id=agent_id, name="Front desk"),
            Service(id=service_id, tenant_id=tenant_id, name="Cleaning"),
            Subscription(tenant_id=tenant_id, plan="growth", status="active"),
            PurchasedCredit(tenant_id=tenant_id, minutes=100),
            CalendarConnection(tenant_id=tenant_id, provider="google"),
        ])
        if own_number:
            db_session.add(
                PhoneNumber(
                    id=own_number_id,
                    tenant_id=tenant_id,
                    number=_random_number(),
                    twilio_sid=f"PN{slug}-own",
                    voice_number_id=f"phnum_{slug}_own",
                    is_shared=False,
                    webhook_configured=True,
                    assigned_at=now,
                )
            )
        if shared_number:
            db_session.add(
                PhoneNumber(
                    id=shared_number_id,
                    tenant_id=tenant_id,
                    number=_random_number(),
                    twilio_sid=f"PN{slug}-shared",
                    voice_number_id="phnum_shared_pool",
                    is_shared=True,
                    webhook_configured=True,
                    assigned_at=now,
                )
            )
        await db_session.flush()

        db_session.add(
            Appointment(
                id=appointment_id,
                tenant_id=tenant_id,
                service_id=service_id,
                customer_name="Jane Caller",
                scheduled_at=now + timedelta(days=2),
            )
        )
        call_ids = [uuid.uuid4() for _ in range(calls)]
        for call_id in call_ids:
            db_session.add(
                Call(
                    id=call_id,
                    tenant_id=tenant_id,
                    phone_number_id=own_number_id,
                    call_sid=f"CA{call_id.hex[:10]}",
                    caller_number="+15551230000",
                )
            )
        await db_session.flush()

        db_session.add(
            AppointmentReminder(
                tenant_id=tenant_id,
                appointment_id=appointment_id,
                remind_at=now + timedelta(days=1),
            )
        )
        for call_id in call_ids:
            db_session.add_all([
                CallEvent(call_id=call_id, event_type="call.started"),
                CallTranscript(call_id=call_id, speaker="caller", text="I need to book a cleaning"),
            ])

        user_ids = [uuid.uuid4() for _ in range(members)]
        for index, user_id in enumerate(user_ids):
            db_session.add(User(id=user_id, email=f"member{index}@{slug}.example.com"))
        await db_session.flush()
        for index, user_id in enumerate(user_ids):
            db_session.add_all([
                UserProfile(id=user_id, tenant_id=tenant_id, email=f"member{index}@{slug}.example.com"),
                UserRole(user_id=user_id, role=AppRole.ADMIN if index == 0 else AppRole.STAFF),
            ])

        await db_session.commit()

        return SimpleNamespace(
            tenant_id=tenant_id,
            own_number_id=own_number_id,
            shared_number_id=shared_number_id,
            call_ids=call_ids,
            user_ids=user_ids,
            slug=slug,
        )

    return _seed


@pytest.fixture
def block_deletes(db_session):
    """Make every DELETE on a table fail, as a locked or constrained row would."""

    async def _block(table: str) -> None:
        await db_session.execute(
            text(
                f"CREATE TRIGGER block_{table}_delete BEFORE DELETE ON {table} "
                f"BEGIN SELECT RAISE(ABORT, '{table} rows are locked'); END"
            )
        )
        await db_session.commit()

    return _block
