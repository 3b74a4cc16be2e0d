"""Deletion service — removes a document's points or a whole tenant's collections."""

from shared.clients.vector.VectorClientInterface import VectorClientInterface
from shared.helper.HelperConfig import HelperConfig
from shared.models.document import DeletionResult
from services.tenant_rag.TenantIndexManager import TenantIndexManager
from services.tenant_rag.TenantLabelResolver import TenantLabelResolver


class DeletionService:
    """Sweeps every collection of a tenant, current and legacy naming alike."""

    def __init__(
        self,
        helper_config: HelperConfig,
        vector_client: VectorClientInterface,
        index_manager: TenantIndexManager,
        label_resolver: TenantLabelResolver,
    ) -> None:
        self.logging = helper_config.get_logger()
        self._vector = vector_client
        self._index = index_manager
        self._labels = label_resolver

    ##########################################
    ############### DOCUMENT #################
    ##########################################

    async def do_delete_document(self, tenant_id: str, document_id: str) -> DeletionResult:
        """Delete all points of a document from every collection holding the tenant's data.

        Points written before the docId payload key existed carry "documentId";
        both keys are matched.

        Returns:
            DeletionResult: First collection that held the document, or None.
                Deleting an absent document is not an error.

        Raises:
            VectorStoreError: If the store cannot be listed, counted or written.
        """
        document_filter = self._vector.build_filter(
            must=[self._vector.get_match_condition("tenantId", tenant_id)],
            should=[
                self._vector.get_match_condition("docId", document_id),
                self._vector.get_match_condition("documentId", document_id),
            ],
        )

        collections = await self._index.do_list_collections_holding(tenant_id)
        deleted_in: str | None = None
        for collection in collections:
            matches = await self._vector.do_count(collection, document_filter)
            if not matches:
                continue
            await self._vector.do_delete_points_by_filter(collection, document_filter)
            self.logging.info("Deleted %d points of document %s from %s.", matches, document_id, collection)
            if deleted_in is None:
                deleted_in = collection

        if deleted_in is None:
            self.logging.info("No points found for document %s of tenant %s.", document_id, tenant_id)
        return DeletionResult(deleted_in=deleted_in, swept=collections)

    ##########################################
    ################ TENANT ##################
    ##########################################

    async def do_delete_tenant(self, tenant_id: str) -> None:
        """Delete every collection holding the tenant's data.

        A collection that also holds points of another tenant (two tenants whose
        labels normalise to the same token) is not dropped; only this tenant's
        points are removed from it.

        Raises:
            VectorStoreError: If the store cannot be listed or written.
        """
        collections = await self._index.do_list_collections_holding(tenant_id)
        owner_condition = self._vector.get_match_condition("tenantId", tenant_id)

        for collection in collections:
            foreign = await self._vector.do_count(collection, self._vector.build_filter(must_not=[owner_condition]))
            if foreign:
                self.logging.warning(
                    "Collection %s holds %d points of other tenants; removing only tenant %s's points.",
                    collection, foreign, tenant_id,
                )
                await self._vector.do_delete_points_by_filter(collection, self._vector.build_filter(must=[owner_condition]))
                continue
            await self._vector.do_delete_collection(collection)
            self.logging.info("Deleted collection %s of tenant %s.", collection, tenant_id)

        self._labels.forget(tenant_id)
        self.logging.info("Tenant %s offboarded: %d collection(s) swept.", tenant_id, len(collections), color="green")
