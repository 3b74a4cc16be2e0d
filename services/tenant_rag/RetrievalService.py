"""Retrieval service — embeds a chat message and searches the tenant's collection.

do_retrieve() propagates every failure; do_fetch_context() is the chat-side
entry point and turns failures into "no context", so a broken embedding
provider or vector store never takes the chat turn down with it.
"""

from shared.clients.embed.EmbedClientInterface import EmbedClientInterface
from shared.clients.vector.VectorClientInterface import VectorClientInterface
from shared.helper.HelperConfig import HelperConfig
from shared.models.search import SearchHit
from services.tenant_rag.TenantIndexManager import TenantIndexManager

CONTEXT_SEPARATOR = "\n\n---\n\n"


class RetrievalService:
    """Orchestrates query embedding, collection resolution, search and context assembly."""

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
        self.default_limit = helper_config.get_positive_int_val("RAG_SEARCH_LIMIT", default=5)
        # whether to use RAG for tenants that never set their flag; deliberately no default
        self.rag_enabled_default = helper_config.get_bool_val("RAG_ENABLED_DEFAULT")

    ##########################################
    ################ CORE ####################
    ##########################################

    async def do_retrieve(self, tenant_id: str, query: str, limit: int | None = None) -> list[SearchHit]:
        """Return the tenant's chunks most similar to the query.

        Args:
            tenant_id (str): The tenant whose collection is searched.
            query (str): Raw user message.
            limit (int | None): Maximum hits; RAG_SEARCH_LIMIT if None.

        Returns:
            list[SearchHit]: Hits in store order, highest score first. Empty if
                the tenant has nothing indexed for the current embedding dimension.

        Raises:
            ValueError: If limit is not positive.
            Exception: Any embedding or vector store failure.
        """
        limit = self.default_limit if limit is None else limit
        if limit <= 0:
            raise ValueError(f"Search limit must be positive, got {limit}.")
        if not query or not query.strip():
            return []

        vectors = await self._embed.do_embed([query])
        if not vectors or not vectors[0]:
            raise ValueError("Embedding call returned no vector for the query.")
        query_vector = vectors[0]

        collection = await self._index.do_ensure_collection(tenant_id, len(query_vector))
        tenant_filter = self._vector.build_filter(must=[self._vector.get_match_condition("tenantId", tenant_id)])
        hits = await self._vector.do_search(collection, query_vector, limit=limit, filter=tenant_filter)

        results = self._build_hits(hits)
        self.logging.debug("Retrieved %d hits for tenant %s from %s.", len(results), tenant_id, collection)
        return results

    async def do_fetch_context(
        self,
        tenant_id: str,
        query: str,
        limit: int | None = None,
        rag_enabled: bool | None = None,
    ) -> tuple[str | None, int]:
        """Assemble prompt context for a chat turn. Never raises.

        Args:
            tenant_id (str): The tenant.
            query (str): Raw user message.
            limit (int | None): Maximum chunks to include.
            rag_enabled (bool | None): The tenant's RAG flag; None applies RAG_ENABLED_DEFAULT.

        Returns:
            tuple[str | None, int]: Context text (None if disabled, empty or failed)
                and the number of chunks it holds.
        """
        enabled = self.rag_enabled_default if rag_enabled is None else rag_enabled
        if not enabled:
            return None, 0

        try:
            hits = await self.do_retrieve(tenant_id, query, limit)
        except Exception as exc:
            self.logging.warning("Retrieval failed for tenant %s, answering without context: %s", tenant_id, exc)
            return None, 0

        contents = [hit.content for hit in hits if hit.content and hit.content.strip()]
        if not contents:
            return None, 0
        return CONTEXT_SEPARATOR.join(contents), len(contents)

    ##########################################
    ############### HELPERS ##################
    ##########################################

    def _build_hits(self, raw_hits: list[dict]) -> list[SearchHit]:
        """Convert raw store hits into SearchHit models, keeping store order."""
        items: list[SearchHit] = []
        for hit in raw_hits:
            payload = hit.get("payload") or {}
            items.append(
                SearchHit(
                    content=payload.get("content") or "",
                    score=hit.get("score", 0.0),
                )
            )
        return items
