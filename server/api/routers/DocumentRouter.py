"""Document router — ingestion and deletion of a tenant's document vectors.

Called by the upload and document-delete handlers after they have stored or
removed the document record. The ingestion response carries the failed step
so the caller can mark the record accurately.
"""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from server.models.requests import IngestRequest
from shared.dependencies.auth import verify_api_key
from shared.models.document import TenantDocument

document_router = APIRouter()

# "parse" is the caller's input problem, every later step is a backend failure
_STEP_STATUS = {"parse": 400, "embed": 502, "collection": 502, "vector": 502}


@document_router.post(
    "/documents",
    dependencies=[Depends(verify_api_key)],
    tags=["Documents"],
)
async def handle_ingest(request: Request, body: IngestRequest) -> JSONResponse:
    """Ingest an extracted document into the tenant's collection.

    Returns:
        JSONResponse: IngestionResult; 200 on success, 400/502 with the failed step otherwise.
    """
    request.app.state.logging.info(
        "Ingest received — tenant_id=%s document_id=%s filename=%r",
        body.tenant_id, body.document_id, body.filename,
    )
    document_fields = {
        "id": body.document_id,
        "filename": body.filename,
        "content": body.content,
        "content_type": body.content_type,
    }
    if body.uploaded_at is not None:
        document_fields["uploaded_at"] = body.uploaded_at
    document = TenantDocument(**document_fields)

    ingestion_service = request.app.state.ingestion_service
    if body.chunks is not None:
        result = await ingestion_service.do_ingest_chunks(body.tenant_id, document, body.chunks)
    else:
        result = await ingestion_service.do_ingest(body.tenant_id, document)

    status_code = 200 if result.success else _STEP_STATUS.get(result.step, 500)
    return JSONResponse(content=result.model_dump(mode="json"), status_code=status_code)


@document_router.delete(
    "/tenants/{tenant_id}/documents/{document_id}",
    dependencies=[Depends(verify_api_key)],
    tags=["Documents"],
)
async def handle_delete_document(request: Request, tenant_id: str, document_id: str) -> JSONResponse:
    """Delete every vector of a document. Deleting an unknown document succeeds with deleted_in=null."""
    deletion_service = request.app.state.deletion_service
    result = await deletion_service.do_delete_document(tenant_id, document_id)
    return JSONResponse(content=result.model_dump(mode="json"))
