"""Tenant router — offboarding."""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from server.models.responses import DeleteTenantResponse
from shared.dependencies.auth import verify_api_key

tenant_router = APIRouter()


@tenant_router.delete(
    "/tenants/{tenant_id}",
    dependencies=[Depends(verify_api_key)],
    tags=["Tenants"],
)
async def handle_delete_tenant(request: Request, tenant_id: str) -> JSONResponse:
    """Delete all vector collections of a tenant. Idempotent."""
    request.app.state.logging.info("Tenant deletion received — tenant_id=%s", tenant_id)
    await request.app.state.deletion_service.do_delete_tenant(tenant_id)
    return JSONResponse(content=DeleteTenantResponse(tenant_id=tenant_id).model_dump())
