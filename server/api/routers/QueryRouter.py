"""Query router — context for chat turns and raw tenant search."""

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse

from shared.dependencies.auth import verify_api_key
from shared.models.search import ContextRequest, ContextResponse, SearchRequest, SearchResponse

query_router = APIRouter()


@query_router.post(
    "/context",
    dependencies=[Depends(verify_api_key)],
    tags=["Query"],
)
async def handle_context(request: Request, body: ContextRequest) -> JSONResponse:
    """Return prompt context for a chat message.

    Always answers 200: when retrieval fails or finds nothing, context is null
    and the chat handler generates without it.
    """
    retrieval_service = request.app.state.retrieval_service
    context, sources = await retrieval_service.do_fetch_context(
        body.tenant_id, body.query, limit=body.limit, rag_enabled=body.rag_enabled,
    )
    return JSONResponse(content=ContextResponse(context=context, sources=sources).model_dump())


@query_router.post(
    "/search",
    dependencies=[Depends(verify_api_key)],
    tags=["Query"],
)
async def handle_search(request: Request, body: SearchRequest) -> JSONResponse:
    """Search the tenant's collection and return scored chunks.

    Raises:
        HTTPException: 502 if the embedding provider or vector store fails.
    """
    request.app.state.logging.info(
        "Search received — tenant_id=%s query=%r", body.tenant_id, body.query[:80]
    )
    retrieval_service = request.app.state.retrieval_service
    try:
        hits = await retrieval_service.do_retrieve(body.tenant_id, body.query, limit=body.limit)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except Exception as exc:
        request.app.state.logging.error("Search failed for tenant %s: %s", body.tenant_id, exc)
        raise HTTPException(status_code=502, detail="Retrieval backend failed.")

    response = SearchResponse(query=body.query, results=hits, total=len(hits))
    return JSONResponse(content=response.model_dump())
