from pydantic import BaseModel


class DeleteTenantResponse(BaseModel):
    tenant_id: str
    status: str = "deleted"


class HealthResponse(BaseModel):
    status: str
    version: str
