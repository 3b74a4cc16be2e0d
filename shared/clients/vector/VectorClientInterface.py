from abc import abstractmethod
from typing import Any

import httpx
from shared.clients.ClientInterface import ClientInterface
from shared.helper.HelperConfig import HelperConfig
from shared.models.errors import VectorStoreError


class VectorClientInterface(ClientInterface):
    """Collection-scoped access to a vector store.

    Every request names its collection explicitly; the client holds no
    collection state of its own, so one instance serves all tenants.
    """

    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_client_type(self) -> str:
        """
        Returns the type of the client. E.g. "vector"
        """
        return "vector"

    ################ ENDPOINTS ##################
    @abstractmethod
    def _get_endpoint_collections(self) -> str:
        """Returns the endpoint path listing all collections (e.g. "/collections")."""
        pass

    @abstractmethod
    def _get_endpoint_collection(self, collection: str) -> str:
        """Returns the endpoint path of a single collection, used for info, create and delete."""
        pass

    @abstractmethod
    def _get_endpoint_points(self, collection: str) -> str:
        """Returns the endpoint path for points upsert requests."""
        pass

    @abstractmethod
    def _get_endpoint_search(self, collection: str) -> str:
        """Returns the endpoint path for nearest-neighbour search requests."""
        pass

    @abstractmethod
    def _get_endpoint_delete_points(self, collection: str) -> str:
        """Returns the endpoint path for deleting points by filter."""
        pass

    @abstractmethod
    def _get_endpoint_count(self, collection: str) -> str:
        """Returns the endpoint path for counting points matching a filter."""
        pass

    ##########################################
    ########### PAYLOAD BUILDER ##############
    ##########################################

    @abstractmethod
    def get_match_condition(self, key: str, value: Any) -> dict:
        """Builds a backend filter condition matching payload field `key` to `value`."""
        pass

    @abstractmethod
    def get_range_condition(self, key: str, gte: float | None = None, lt: float | None = None) -> dict:
        """Builds a backend filter condition on a numeric payload field."""
        pass

    @abstractmethod
    def build_filter(self, must: list[dict] | None = None, should: list[dict] | None = None, must_not: list[dict] | None = None) -> dict:
        """Combines match conditions into one backend filter.

        Args:
            must: Conditions that all have to match.
            should: Conditions of which at least one has to match.
            must_not: Conditions of which none may match.
        """
        pass

    @abstractmethod
    def get_create_collection_payload(self, vector_size: int, distance: str) -> dict:
        pass

    @abstractmethod
    def get_upsert_payload(self, points: list[dict[str, Any]]) -> dict:
        pass

    @abstractmethod
    def get_search_payload(self, vector: list[float], limit: int, filter: dict | None, with_payload: bool, with_vector: bool) -> dict:
        """
        Builds the backend-specific request payload for a nearest-neighbour search.

        Args:
            vector (list[float]): The query vector.
            limit (int): Maximum number of hits.
            filter (dict | None): Optional filter built with build_filter().
            with_payload (bool): Whether hits carry their payload.
            with_vector (bool): Whether hits carry their stored vector.
        """
        pass

    @abstractmethod
    def get_count_payload(self, filter: dict | None) -> dict:
        pass

    @abstractmethod
    def get_delete_payload(self, filter: dict) -> dict:
        pass

    ##########################################
    ########### RESPONSE PARSER ##############
    ##########################################

    @abstractmethod
    def extract_collection_names(self, raw_response: dict) -> list[str]:
        pass

    @abstractmethod
    def extract_vector_size(self, raw_response: dict) -> int | None:
        """Extracts the configured vector size from a collection info response.

        Returns:
            int | None: The size, or None if the collection uses a layout with no single size.
        """
        pass

    @abstractmethod
    def extract_search_hits(self, raw_response: dict) -> list[dict]:
        """Extracts hits from a search response, in backend order (highest score first)."""
        pass

    @abstractmethod
    def extract_count(self, raw_response: dict) -> int:
        pass

    @abstractmethod
    def is_already_exists(self, response: httpx.Response) -> bool:
        """Returns True if a failed create-collection response means the collection already exists."""
        pass

    ##########################################
    ################ HELPER ##################
    ##########################################

    def _raise_for_store_error(self, response: httpx.Response, action: str) -> None:
        """Raise VectorStoreError for a non-2xx response.

        Args:
            response (httpx.Response): The response to check.
            action (str): Human-readable description of the request for the error message.
        """
        if response.is_success:
            return
        self.logging.error(
            "Vector store request '%s' failed with status %d: %s",
            action,
            response.status_code,
            response.text[:200],
        )
        raise VectorStoreError(
            f"Vector store request '{action}' failed with status {response.status_code}.",
            status_code=response.status_code,
            detail=response.text[:200],
        )

    ##########################################
    ############### REQUESTS #################
    ##########################################

    async def do_list_collections(self) -> list[str]:
        """List the names of all collections in the store."""
        response = await self.do_request(method="GET", endpoint=self._get_endpoint_collections())
        self._raise_for_store_error(response, "list collections")
        return self.extract_collection_names(response.json())

    async def do_fetch_collection_info(self, collection: str) -> dict | None:
        """Fetch the raw info of a collection.

        Returns:
            dict | None: The raw response, or None if the collection does not exist.
        """
        response = await self.do_request(method="GET", endpoint=self._get_endpoint_collection(collection))
        if response.status_code == 404:
            return None
        self._raise_for_store_error(response, f"get collection {collection}")
        return response.json()

    async def do_existence_check(self, collection: str) -> bool:
        """Check if a collection exists in the vector store."""
        return await self.do_fetch_collection_info(collection) is not None

    async def do_fetch_vector_size(self, collection: str) -> int | None:
        """Return the configured vector size of a collection, or None if it does not exist."""
        info = await self.do_fetch_collection_info(collection)
        if info is None:
            return None
        return self.extract_vector_size(info)

    async def do_create_collection(self, collection: str, vector_size: int, distance: str = "Cosine") -> bool:
        """Create a collection.

        An "already exists" answer counts as success, so concurrent creators of the
        same collection do not fail each other.

        Args:
            collection (str): The collection name.
            vector_size (int): The size of the vectors in the collection.
            distance (str): The distance metric for the vectors.

        Returns:
            bool: True if this call created the collection, False if it already existed.

        Raises:
            VectorStoreError: If the store refuses the creation for another reason.
        """
        response = await self.do_request(
            method="PUT",
            json=self.get_create_collection_payload(vector_size, distance),
            endpoint=self._get_endpoint_collection(collection),
        )
        if not response.is_success and self.is_already_exists(response):
            self.logging.debug("Collection %s already exists, created concurrently.", collection)
            return False
        self._raise_for_store_error(response, f"create collection {collection}")
        self.logging.info("Collection %s created (size=%d, distance=%s).", collection, vector_size, distance, color="green")
        return True

    async def do_delete_collection(self, collection: str) -> bool:
        """Delete a collection.

        Returns:
            bool: True if the collection was deleted, False if it did not exist.
        """
        response = await self.do_request(method="DELETE", endpoint=self._get_endpoint_collection(collection))
        if response.status_code == 404:
            return False
        self._raise_for_store_error(response, f"delete collection {collection}")
        return True

    async def do_upsert_points(self, collection: str, points: list[dict[str, Any]]) -> None:
        """Upsert points in one batch and wait until the store has applied them.
        Points with an existing ID are replaced.

        Args:
            collection (str): Target collection.
            points (list[dict[str, Any]]): Points with "id", "vector" and "payload".
        """
        response = await self.do_request(
            method="PUT",
            json=self.get_upsert_payload(points),
            params={"wait": "true"},
            endpoint=self._get_endpoint_points(collection),
        )
        self._raise_for_store_error(response, f"upsert {len(points)} points into {collection}")

    async def do_search(self, collection: str, vector: list[float], limit: int, filter: dict | None = None) -> list[dict]:
        """Nearest-neighbour search returning payloads without vectors.

        Returns:
            list[dict]: Hits with "id", "score" and "payload", highest score first.
        """
        response = await self.do_request(
            method="POST",
            json=self.get_search_payload(vector, limit, filter, with_payload=True, with_vector=False),
            endpoint=self._get_endpoint_search(collection),
        )
        self._raise_for_store_error(response, f"search {collection}")
        return self.extract_search_hits(response.json())

    async def do_count(self, collection: str, filter: dict | None = None) -> int:
        """Count points matching the filter; 0 if the collection does not exist."""
        response = await self.do_request(
            method="POST",
            json=self.get_count_payload(filter),
            endpoint=self._get_endpoint_count(collection),
        )
        if response.status_code == 404:
            return 0
        self._raise_for_store_error(response, f"count {collection}")
        return self.extract_count(response.json())

    async def do_delete_points_by_filter(self, collection: str, filter: dict) -> None:
        """Delete all points matching the filter. A missing collection is not an error."""
        response = await self.do_request(
            method="POST",
            json=self.get_delete_payload(filter),
            params={"wait": "true"},
            endpoint=self._get_endpoint_delete_points(collection),
        )
        if response.status_code == 404:
            return
        self._raise_for_store_error(response, f"delete points from {collection}")
