"""Dependency injection for API endpoints - authentication and services."""

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.database import get_db
from app.core.security import get_token_subject
from app.models.user import User
from app.services.credentials import TeardownConfig
from app.services.teardown_service import TeardownService

security = HTTPBearer()


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Extract and validate the current user from JWT token."""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    email = get_token_subject(credentials.credentials)
    if email is None:
        raise credentials_exception

    result = await db.execute(select(User).where(User.email == email))
    user = result.scalar_one_or_none()
    if user is None or not user.is_active:
        raise credentials_exception
    return user


async def get_super_admin_user(
    current_user: User = Depends(get_current_user),
) -> User:
    """Require platform super admin access.

    Super admins are determined by:
    - Email in SUPER_ADMIN_EMAILS
    - is_admin flag on User model
    """
    if current_user.email not in settings.super_admin_emails and not current_user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Super admin access required",
        )
    return current_user


def get_teardown_config() -> TeardownConfig:
    """Teardown configuration built from application settings."""
    return TeardownConfig.from_settings(settings)


async def get_teardown_service(
    db: AsyncSession = Depends(get_db),
    config: TeardownConfig = Depends(get_teardown_config),
) -> TeardownService:
    return TeardownService(db, config)
