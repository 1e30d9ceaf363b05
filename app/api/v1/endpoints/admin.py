"""Admin endpoints for offboarding tenants."""

import uuid

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from app.api.deps import get_super_admin_user, get_teardown_service
from app.core.exceptions import TeardownError
from app.core.logging import logger
from app.models.user import User
from app.schemas.teardown import TeardownResponse
from app.services.teardown_service import TeardownService

router = APIRouter()

# Use the centralized dependency for admin access
get_admin_user = get_super_admin_user


def _error(status_code: int, response: TeardownResponse) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=response.model_dump(mode="json"))


@router.delete("/tenants/{tenant_id}", response_model=TeardownResponse)
async def delete_tenant(
    tenant_id: str,
    admin: User = Depends(get_admin_user),
    service: TeardownService = Depends(get_teardown_service),
):
    """Delete a tenant and every resource provisioned for it.

    Voice agent and Twilio cleanup are best-effort; database rows are purged
    in dependency order. The response carries the full step ledger.
    """
    try:
        tenant_uuid = uuid.UUID(tenant_id)
    except ValueError:
        return _error(
            status.HTTP_400_BAD_REQUEST,
            TeardownResponse(success=False, error="Invalid tenant ID format"),
        )

    logger.info("tenant_delete_requested", tenant_id=tenant_id, admin=admin.email)

    try:
        result = await service.teardown(tenant_uuid)
    except TeardownError as e:
        return _error(
            e.status_code,
            TeardownResponse(success=False, error=e.message, tenant_id=tenant_uuid),
        )

    if not result.success:
        return _error(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            TeardownResponse(
                success=False,
                error=result.error,
                tenant_id=tenant_uuid,
                failed_step=result.failed_step,
                steps=result.steps,
            ),
        )

    return TeardownResponse(
        success=True,
        message="Tenant and all resources deleted successfully",
        tenant_id=tenant_uuid,
        steps=result.steps,
    )
