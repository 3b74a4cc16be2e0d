"""Ingestion service.

Splits a tenant document into chunks, embeds them in one batch through the
configured EmbedClient, resolves the tenant collection for the embedding
dimension and upserts all points in a single acknowledged write.
"""

from shared.clients.embed.EmbedClientInterface import EmbedClientInterface
from shared.clients.vector.VectorClientInterface import VectorClientInterface
from shared.clients.vector.models.VectorPoint import VectorPoint
from shared.helper.HelperConfig import HelperConfig
from shared.models.document import IngestionResult, TenantDocument
from services.tenant_rag.TenantIndexManager import TenantIndexManager
from services.tenant_rag.chunking import DEFAULT_CHUNK_OVERLAP, DEFAULT_CHUNK_SIZE, chunk_text
from services.tenant_rag.point_ids import derive_point_id, make_chunk_id


class IngestionService:
    """Orchestrates chunk → embed → collection → upsert for one uploaded document."""

    def __init__(
        self,
        helper_config: HelperConfig,
        vector_client: VectorClientInterface,
        embed_client: EmbedClientInterface,
        index_manager: TenantIndexManager,
    ) -> None:
        self.logging = helper_config.get_logger()
        self._vector = vector_client
        self._embed = embed_client
        self._index = index_manager
        self.chunk_size = helper_config.get_positive_int_val("RAG_CHUNK_SIZE", default=DEFAULT_CHUNK_SIZE)
        self.chunk_overlap = int(helper_config.get_number_val("RAG_CHUNK_OVERLAP", default=DEFAULT_CHUNK_OVERLAP))
        # fail at startup rather than on the first upload
        if not 0 <= self.chunk_overlap < self.chunk_size:
            raise ValueError(
                f"RAG_CHUNK_OVERLAP ({self.chunk_overlap}) must be >= 0 and smaller than RAG_CHUNK_SIZE ({self.chunk_size})."
            )

    ##########################################
    ################ CORE ####################
    ##########################################

    async def do_ingest(self, tenant_id: str, document: TenantDocument) -> IngestionResult:
        """Chunk a document's extracted text and ingest the chunks.

        Args:
            tenant_id (str): Owning tenant.
            document (TenantDocument): The document with its extracted text.

        Returns:
            IngestionResult: Point IDs on success, the failed step and error otherwise.
        """
        chunks = chunk_text(document.content, self.chunk_size, self.chunk_overlap)
        return await self.do_ingest_chunks(tenant_id, document, chunks)

    async def do_ingest_chunks(self, tenant_id: str, document: TenantDocument, chunks: list[str]) -> IngestionResult:
        """Embed and upsert pre-chunked document text.

        Re-ingesting the same document overwrites its points, since point IDs are
        derived from (tenant, document, chunk index).

        Args:
            tenant_id (str): Owning tenant.
            document (TenantDocument): Document metadata for the payloads.
            chunks (list[str]): Ordered chunk texts.

        Returns:
            IngestionResult: Point IDs on success, the failed step and error otherwise.
        """
        chunks = [chunk for chunk in chunks if chunk and chunk.strip()]
        if not chunks:
            self.logging.info("Document id=%s ('%s') of tenant %s produced no chunks.", document.id, document.filename, tenant_id)
            return self._failure(document, "parse", "No content extracted from document for embedding.")

        # one call; the client splits it into provider-sized batches
        try:
            vectors = await self._embed.do_embed(chunks)
        except Exception as exc:
            self.logging.error("Embedding failed for document id=%s of tenant %s: %s", document.id, tenant_id, exc)
            return self._failure(document, "embed", str(exc), chunk_count=len(chunks))

        if not vectors:
            return self._failure(document, "embed", "Embedding call returned no vectors.", chunk_count=len(chunks))
        dimension = len(vectors[0])
        if len(vectors) != len(chunks) or any(len(vector) != dimension for vector in vectors):
            return self._failure(
                document, "embed",
                f"Embedding call returned {len(vectors)} vectors of mixed or unexpected shape for {len(chunks)} chunks.",
                chunk_count=len(chunks),
            )

        try:
            collection = await self._index.do_ensure_collection(tenant_id, dimension)
        except Exception as exc:
            self.logging.error("Collection resolution failed for tenant %s (dim=%d): %s", tenant_id, dimension, exc)
            return self._failure(document, "collection", str(exc), chunk_count=len(chunks))

        points = self._build_points(tenant_id, document, chunks, vectors)
        try:
            await self._vector.do_upsert_points(collection, points)
        except Exception as exc:
            self.logging.error("Upsert into %s failed for document id=%s: %s", collection, document.id, exc)
            return self._failure(document, "vector", str(exc), chunk_count=len(chunks))

        await self._do_prune_stale_chunks(tenant_id, document, collection, len(points))

        point_ids = [point["id"] for point in points]
        self.logging.info(
            "Ingested document id=%s ('%s') for tenant %s: %d chunks into %s.",
            document.id, document.filename, tenant_id, len(points), collection,
            color="green",
        )
        return IngestionResult(
            success=True,
            document_id=document.id,
            point_ids=point_ids,
            collection=collection,
            chunk_count=len(points),
        )

    ##########################################
    ############### HELPERS ##################
    ##########################################

    def _build_points(self, tenant_id: str, document: TenantDocument, chunks: list[str], vectors: list[list[float]]) -> list[dict]:
        uploaded_at = document.uploaded_at.isoformat()
        model = self._embed.get_active_model()
        points: list[dict] = []
        for chunk_index, (chunk, vector) in enumerate(zip(chunks, vectors)):
            payload = VectorPoint(
                content=chunk,
                tenant_id=tenant_id,
                doc_id=document.id,
                filename=document.filename,
                uploaded_at=uploaded_at,
                chunk_index=chunk_index,
                type=document.content_type,
                embedding_model=model,
                embedding_dim=len(vector),
            )
            points.append({
                "id": derive_point_id(make_chunk_id(tenant_id, document.id, chunk_index)),
                "vector": vector,
                "payload": payload.model_dump(by_alias=True),
            })
        return points

    async def _do_prune_stale_chunks(self, tenant_id: str, document: TenantDocument, collection: str, chunk_count: int) -> None:
        """Remove chunks of an earlier, longer revision of the document.

        Runs after the upsert, so a failed write never loses the previous
        revision. Pruning errors leave extra chunks behind and are only logged.
        """
        stale_filter = self._vector.build_filter(must=[
            self._vector.get_match_condition("tenantId", tenant_id),
            self._vector.get_match_condition("docId", document.id),
            self._vector.get_range_condition("chunkIndex", gte=chunk_count),
        ])
        try:
            await self._vector.do_delete_points_by_filter(collection, stale_filter)
        except Exception as exc:
            self.logging.warning("Could not prune stale chunks of document id=%s in %s: %s", document.id, collection, exc)

    def _failure(self, document: TenantDocument, step: str, error: str, chunk_count: int = 0) -> IngestionResult:
        return IngestionResult(
            success=False,
            document_id=document.id,
            chunk_count=chunk_count,
            step=step,
            error=error,
        )
