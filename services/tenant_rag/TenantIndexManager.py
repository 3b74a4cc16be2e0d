"""Tenant collection resolution and lazy creation."""

from shared.clients.vector.VectorClientInterface import VectorClientInterface
from shared.helper.HelperConfig import HelperConfig
from services.tenant_rag.TenantLabelResolver import TenantLabelResolver
from services.tenant_rag.naming import (
    DEFAULT_RESOURCE_KIND,
    candidate_collection_names,
    is_managed_collection,
    is_tenant_collection,
    normalize_resource_kind,
    validate_dimension,
)

COLLECTION_DISTANCE = "Cosine"


class TenantIndexManager:
    """Maps (tenant, dimension) to an existing or newly created collection.

    There is no "already initialised" state: every pipeline call asks for its
    collection again, which costs one existence check per candidate name.
    """

    def __init__(
        self,
        helper_config: HelperConfig,
        vector_client: VectorClientInterface,
        label_resolver: TenantLabelResolver,
    ) -> None:
        self.logging = helper_config.get_logger()
        self._vector = vector_client
        self._labels = label_resolver
        self.resource_kind = normalize_resource_kind(
            helper_config.get_string_val("RAG_RESOURCE_KIND", default=DEFAULT_RESOURCE_KIND)
        )

    ##########################################
    ################ GETTER ##################
    ##########################################

    def get_resource_kinds(self) -> list[str]:
        return list(dict.fromkeys([self.resource_kind, DEFAULT_RESOURCE_KIND]))

    async def do_get_candidate_names(self, tenant_id: str, dimension: int, resource_kind: str | None = None) -> list[str]:
        """Ordered collection names the tenant's (dimension) collection may live under."""
        label = await self._labels.do_resolve_label(tenant_id)
        return candidate_collection_names(tenant_id, label, resource_kind or self.resource_kind, dimension)

    ##########################################
    ################ CORE ####################
    ##########################################

    async def do_ensure_collection(self, tenant_id: str, dimension: int, resource_kind: str | None = None) -> str:
        """Return the tenant's collection for `dimension`, creating it if none exists.

        The first existing candidate whose vector size equals `dimension` is used.
        A candidate with another size is never reused, so vectors of a new
        embedding model can never land in an index built for an old one.

        Args:
            tenant_id (str): The tenant.
            dimension (int): Vector size of the embedding model in use.
            resource_kind (str | None): Resource kind; defaults to RAG_RESOURCE_KIND.

        Returns:
            str: The collection name.

        Raises:
            ValueError: If the dimension is invalid.
            VectorStoreError: If the store cannot be queried or the collection cannot be created.
        """
        dimension = validate_dimension(dimension)
        candidates = await self.do_get_candidate_names(tenant_id, dimension, resource_kind)

        for name in candidates:
            size = await self._vector.do_fetch_vector_size(name)
            if size is None:
                continue
            if size == dimension:
                if name != candidates[0]:
                    self.logging.debug("Using fallback collection %s for tenant %s (dim=%d).", name, tenant_id, dimension)
                return name
            self.logging.warning(
                "Collection %s has vector size %s, expected %d. Not using it for tenant %s.",
                name, size, dimension, tenant_id,
            )

        primary = candidates[0]
        await self._vector.do_create_collection(primary, vector_size=dimension, distance=COLLECTION_DISTANCE)
        return primary

    async def do_list_tenant_collections(self, tenant_id: str) -> list[str]:
        """List every existing collection of the tenant, all dimensions and naming schemes."""
        label = await self._labels.do_resolve_label(tenant_id)
        kinds = self.get_resource_kinds()
        return [
            name
            for name in await self._vector.do_list_collections()
            if is_tenant_collection(name, tenant_id, label, kinds)
        ]

    async def do_list_collections_holding(self, tenant_id: str) -> list[str]:
        """Every collection that may hold the tenant's points, for deletion sweeps.

        Besides the name matches of do_list_tenant_collections, any other
        collection of the current scheme holding points with this tenantId is
        included. A label-based collection does not match by name while the
        label lookup falls back to the tenant id.

        Raises:
            VectorStoreError: If the store cannot be listed or counted.
        """
        label = await self._labels.do_resolve_label(tenant_id)
        kinds = self.get_resource_kinds()
        owner_filter = self._vector.build_filter(must=[self._vector.get_match_condition("tenantId", tenant_id)])

        collections: list[str] = []
        for name in await self._vector.do_list_collections():
            if is_tenant_collection(name, tenant_id, label, kinds):
                collections.append(name)
            elif is_managed_collection(name, kinds) and await self._vector.do_count(name, owner_filter):
                self.logging.info("Collection %s holds points of tenant %s under another label.", name, tenant_id)
                collections.append(name)
        return collections
