"""Tests for the admin tenant teardown endpoint."""

import uuid

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import func, select

from app.api.deps import get_teardown_service
from app.core.database import get_db
from app.core.security import create_access_token
from app.main import app
from app.models import Call, Tenant, User
from app.services.teardown_service import TeardownService


@pytest.fixture
async def client(db_session, config, voice_platform, twilio_fake):
    """Create a test API client bound to the test database."""

    async def override_get_db():
        yield db_session

    def override_get_teardown_service():
        return TeardownService(
            db_session,
            config,
            voice_client_factory=voice_platform.client_factory,
            telephony_client_factory=twilio_fake.client_factory,
        )

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_teardown_service] = override_get_teardown_service

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as test_client:
        yield test_client

    app.dependency_overrides.clear()


async def _headers(db_session, email: str, is_admin: bool) -> dict:
    db_session.add(User(id=uuid.uuid4(), email=email, is_admin=is_admin))
    await db_session.commit()
    token = create_access_token(email)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
async def admin_headers(db_session):
    return await _headers(db_session, "ops@platform.example.com", is_admin=True)


@pytest.mark.asyncio
async def test_delete_tenant(client, db_session, seed_tenant, admin_headers):
    seeded = await seed_tenant()

    response = await client.delete(f"/api/v1/admin/tenants/{seeded.tenant_id}", headers=admin_headers)

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["message"] == "Tenant and all resources deleted successfully"
    assert body["tenant_id"] == str(seeded.tenant_id)
    assert body["steps"][0]["step"] == "voice_agent"
    assert body["steps"][-1] == {
        "step": "tenant",
        "outcome": "ok",
        "detail": "Tenant deleted",
        "errors": [],
        "affected": 1,
    }

    result = await db_session.execute(
        select(func.count()).select_from(Tenant).where(Tenant.id == seeded.tenant_id)
    )
    assert result.scalar_one() == 0


@pytest.mark.asyncio
async def test_invalid_tenant_id(client, admin_headers):
    response = await client.delete("/api/v1/admin/tenants/not-a-uuid", headers=admin_headers)

    assert response.status_code == 400
    assert response.json()["success"] is False
    assert response.json()["error"] == "Invalid tenant ID format"


@pytest.mark.asyncio
async def test_unknown_tenant(client, admin_headers):
    response = await client.delete(f"/api/v1/admin/tenants/{uuid.uuid4()}", headers=admin_headers)

    assert response.status_code == 404
    body = response.json()
    assert body["success"] is False
    assert body["error"] == "Tenant not found"
    assert body["steps"] == []


@pytest.mark.asyncio
async def test_failed_step_is_reported(client, db_session, seed_tenant, admin_headers):
    seeded = await seed_tenant()
    other = await seed_tenant(slug="other-clinic", calls=0)
    db_session.add(
        Call(id=uuid.uuid4(), tenant_id=other.tenant_id, phone_number_id=seeded.own_number_id)
    )
    await db_session.commit()

    response = await client.delete(f"/api/v1/admin/tenants/{seeded.tenant_id}", headers=admin_headers)

    assert response.status_code == 500
    body = response.json()
    assert body["success"] is False
    assert body["failed_step"] == "phone_numbers"
    assert body["error"].startswith("Failed to delete phone_numbers:")
    assert body["steps"][-1]["outcome"] == "fatal"


@pytest.mark.asyncio
async def test_requires_super_admin(client, db_session, seed_tenant):
    seeded = await seed_tenant()
    headers = await _headers(db_session, "frontdesk@acme.example.com", is_admin=False)

    response = await client.delete(f"/api/v1/admin/tenants/{seeded.tenant_id}", headers=headers)

    assert response.status_code == 403
    assert response.json() == {"success": False, "error": "Super admin access required"}


@pytest.mark.asyncio
async def test_requires_token(client):
    response = await client.delete(f"/api/v1/admin/tenants/{uuid.uuid4()}")

    # HTTPBearer answers 403 on older FastAPI releases, 401 on newer ones
    assert response.status_code in (401, 403)


@pytest.mark.asyncio
async def test_rejects_bad_token(client):
    response = await client.delete(
        f"/api/v1/admin/tenants/{uuid.uuid4()}",
        headers={"Authorization": "Bearer not-a-jwt"},
    )

    assert response.status_code == 401
    assert response.json()["error"] == "Could not validate credentials"


@pytest.mark.asyncio
async def test_health(client):
    response = await client.get("/api/v1/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


@pytest.mark.asyncio
async def test_request_id_is_echoed(client):
    response = await client.get("/health", headers={"X-Request-ID": "req-123"})

    assert response.headers["X-Request-ID"] == "req-123"


@pytest.mark.asyncio
async def test_readiness_checks_database(client):
    response = await client.get("/api/v1/health/ready")

    assert response.status_code == 200
    assert response.json() == {"ready": True}
