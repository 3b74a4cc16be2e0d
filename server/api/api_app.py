"""FastAPI application entry point for the tenant retrieval API."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
import os
from server.api.routers.DocumentRouter import document_router
from server.api.routers.QueryRouter import query_router
from server.api.routers.TenantRouter import tenant_router
from server.models.responses import HealthResponse
from services.tenant_rag.DeletionService import DeletionService
from services.tenant_rag.IngestionService import IngestionService
from services.tenant_rag.RetrievalService import RetrievalService
from services.tenant_rag.TenantIndexManager import TenantIndexManager
from services.tenant_rag.TenantLabelResolver import TenantLabelResolver
from shared.clients.embed.EmbedClientInterface import EmbedClientInterface
from shared.clients.embed.EmbedClientManager import EmbedClientManager
from shared.clients.tenant.TenantClientInterface import TenantClientInterface
from shared.clients.tenant.TenantClientManager import TenantClientManager
from shared.clients.vector.VectorClientInterface import VectorClientInterface
from shared.clients.vector.VectorClientManager import VectorClientManager
from shared.helper.HelperConfig import HelperConfig
from shared.logging.logging_setup import setup_logging
from shared.models.errors import VectorStoreError

app_version = os.getenv("APP_VERSION", "unknown")


def wire_services(
    app: FastAPI,
    config: HelperConfig,
    vector_client: VectorClientInterface,
    embed_client: EmbedClientInterface,
    tenant_client: TenantClientInterface | None,
) -> None:
    """Build the retrieval services around booted clients and attach them to app.state.

    Raises:
        ValueError: If APP_API_KEY is not set; lifespan then aborts startup.
    """
    app.state.api_key = config.get_string_val("APP_API_KEY")
    app.state.config = config
    app.state.logging = config.get_logger()
    label_resolver = TenantLabelResolver(helper_config=config, tenant_client=tenant_client)
    index_manager = TenantIndexManager(helper_config=config, vector_client=vector_client, label_resolver=label_resolver)
    app.state.ingestion_service = IngestionService(
        helper_config=config,
        vector_client=vector_client,
        embed_client=embed_client,
        index_manager=index_manager,
    )
    app.state.retrieval_service = RetrievalService(
        helper_config=config,
        vector_client=vector_client,
        embed_client=embed_client,
        index_manager=index_manager,
    )
    app.state.deletion_service = DeletionService(
        helper_config=config,
        vector_client=vector_client,
        index_manager=index_manager,
        label_resolver=label_resolver,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Manage application startup and shutdown."""
    logger = setup_logging()
    config = HelperConfig(logger=logger)

    # Initialise clients; configuration errors abort startup
    vector_client = VectorClientManager(helper_config=config).get_client()
    embed_client = EmbedClientManager(helper_config=config).get_client()
    tenant_client = TenantClientManager(helper_config=config).get_client()
    await vector_client.boot()
    await embed_client.boot()
    if tenant_client:
        await tenant_client.boot()

    try:
        # the vector store is required, the embedding backend may recover later
        await vector_client.do_healthcheck()
        try:
            await embed_client.do_healthcheck()
        except Exception as exc:
            logger.warning("Embed backend '%s' health check failed: %s", embed_client.get_engine_name(), exc)

        wire_services(app, config, vector_client, embed_client, tenant_client)
        logger.info(
            "Tenant RAG API ready (embed=%s/%s, vector=%s).",
            embed_client.get_engine_name(), embed_client.get_active_model(), vector_client.get_engine_name(),
            color="green",
        )
        yield
    finally:
        await vector_client.close()
        await embed_client.close()
        if tenant_client:
            await tenant_client.close()
        logger.info("Tenant RAG API shut down.")


app = FastAPI(
    title="Tenant RAG",
    description="Tenant-isolated document ingestion and retrieval for embedded chatbots.",
    version=app_version,
    lifespan=lifespan,
)

app.include_router(document_router)
app.include_router(query_router)
app.include_router(tenant_router)


@app.exception_handler(VectorStoreError)
async def handle_vector_store_error(request: Request, exc: VectorStoreError) -> JSONResponse:
    request.app.state.logging.error("Vector store error on %s: %s", request.url.path, exc)
    return JSONResponse(status_code=502, content={"detail": str(exc)})


@app.get("/healthz", tags=["Health"])
async def healthz() -> HealthResponse:
    return HealthResponse(status="ok", version=app_version)


# Server Start
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("APP_PORT", "8000")))
