"""Health check endpoints."""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.database import get_db
from app.core.logging import get_logger

logger = get_logger(__name__)

router = APIRouter()


class HealthResponse(BaseModel):
    """Service status plus which providers have credentials.

    A provider without credentials does not make the service unhealthy:
    teardown still purges the database and records the skipped cleanup.
    """

    status: str
    timestamp: str
    database: str
    voice_platform: str
    telephony: str


async def _database_reachable(db: AsyncSession) -> bool:
    try:
        await db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.warning("health_database_unreachable", error=str(e))
        return False
    return True


def _configured(flag: bool) -> str:
    return "configured" if flag else "not_configured"


@router.get("", response_model=HealthResponse)
async def health_check(db: AsyncSession = Depends(get_db)) -> HealthResponse:
    database_ok = await _database_reachable(db)
    return HealthResponse(
        status="healthy" if database_ok else "degraded",
        timestamp=datetime.now(timezone.utc).isoformat(),
        database="healthy" if database_ok else "unhealthy",
        voice_platform=_configured(settings.voice_platform_configured),
        telephony=_configured(settings.telephony_configured),
    )


@router.get("/ready")
async def readiness_check(db: AsyncSession = Depends(get_db)):
    """Ready only when the database answers; teardown is useless without it."""
    if not await _database_reachable(db):
        return JSONResponse(status_code=503, content={"ready": False})
    return {"ready": True}


@router.get("/live")
async def liveness_check() -> dict:
    """Liveness check for Kubernetes/Docker."""
    return {"alive": True}
