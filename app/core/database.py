"""Database engine and session management."""

from typing import AsyncGenerator
from urllib.parse import parse_qsl, urlencode, urlparse, urlunparse

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.core.config import settings
from app.db.base import Base

# Pooler parameters asyncpg rejects as connect() kwargs
UNSUPPORTED_PARAMS = {"connection_limit", "pool_timeout", "pgbouncer", "statement_cache_size"}


def get_async_database_url(url: str) -> str:
    """Rewrite a libpq-style URL for the asyncpg driver.

    Accepts postgres:// and postgresql:// schemes, drops pooler-only query
    parameters and maps libpq's sslmode onto asyncpg's ssl.
    """
    parsed = urlparse(url)

    scheme = parsed.scheme
    if scheme in ("postgresql", "postgres"):
        scheme = "postgresql+asyncpg"

    params = []
    for key, value in parse_qsl(parsed.query):
        if key in UNSUPPORTED_PARAMS:
            continue
        if key == "sslmode":
            key = "ssl"
        params.append((key, value))

    return urlunparse(parsed._replace(scheme=scheme, query=urlencode(params)))


engine = create_async_engine(
    get_async_database_url(settings.database_url),
    echo=settings.debug,
    pool_pre_ping=True,
    pool_size=settings.database_pool_size,
    max_overflow=settings.database_max_overflow,
)

async_session_maker = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency for getting a request-scoped async session.

    Teardown steps commit on their own; this only commits whatever the
    endpoint left pending.
    """
    async with async_session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def init_db() -> None:
    """Create missing tables outside production.

    Production schema is owned by Alembic (alembic upgrade head).
    """
    if settings.is_production:
        return

    import app.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
