from typing import Any
from urllib.parse import quote

import httpx
from shared.helper.HelperConfig import HelperConfig
from shared.clients.vector.VectorClientInterface import VectorClientInterface
from shared.models.config import EnvConfig


class VectorClientQdrant(VectorClientInterface):
    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)
        self._base_url = self.get_config_val("BASE_URL", default=None, val_type="string")
        self._api_key = self.get_config_val("API_KEY", default="", val_type="string")

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_engine_name(self) -> str:
        return "Qdrant"

    ################ CONFIG ##################
    def _get_required_config(self) -> list[EnvConfig]:
        return [
            EnvConfig(env_key="BASE_URL", val_type="string", default=None),
            EnvConfig(env_key="API_KEY", val_type="string", default=""),
        ]

    ################ AUTH ##################
    def _get_auth_header(self) -> dict:
        if self._api_key:
            return {"api-key": f"{self._api_key}"}
        else:
            return {}

    ################ ENDPOINTS ##################
    def _get_base_url(self) -> str:
        return self._base_url

    def _get_endpoint_healthcheck(self) -> str:
        return "/healthz"

    def _get_endpoint_collections(self) -> str:
        return "/collections"

    def _get_endpoint_collection(self, collection: str) -> str:
        # legacy names embed the raw tenant id
        return f"/collections/{quote(collection, safe='')}"

    def _get_endpoint_points(self, collection: str) -> str:
        return f"{self._get_endpoint_collection(collection)}/points"

    def _get_endpoint_search(self, collection: str) -> str:
        return f"{self._get_endpoint_collection(collection)}/points/search"

    def _get_endpoint_delete_points(self, collection: str) -> str:
        return f"{self._get_endpoint_collection(collection)}/points/delete"

    def _get_endpoint_count(self, collection: str) -> str:
        return f"{self._get_endpoint_collection(collection)}/points/count"

    ##########################################
    ########### PAYLOAD BUILDER ##############
    ##########################################

    def get_match_condition(self, key: str, value: Any) -> dict:
        return {"key": key, "match": {"value": value}}

    def get_range_condition(self, key: str, gte: float | None = None, lt: float | None = None) -> dict:
        bounds = {name: value for name, value in (("gte", gte), ("lt", lt)) if value is not None}
        return {"key": key, "range": bounds}

    def build_filter(self, must: list[dict] | None = None, should: list[dict] | None = None, must_not: list[dict] | None = None) -> dict:
        filter: dict = {}
        if must:
            filter["must"] = must
        if should:
            filter["should"] = should
        if must_not:
            filter["must_not"] = must_not
        return filter

    def get_create_collection_payload(self, vector_size: int, distance: str) -> dict:
        return {"vectors": {"size": vector_size, "distance": distance}}

    def get_upsert_payload(self, points: list[dict[str, Any]]) -> dict:
        return {"points": points}

    def get_search_payload(self, vector: list[float], limit: int, filter: dict | None, with_payload: bool, with_vector: bool) -> dict:
        payload = {
            "vector": vector,
            "limit": limit,
            "with_payload": with_payload,
            "with_vector": with_vector,
        }
        if filter:
            payload["filter"] = filter
        return payload

    def get_count_payload(self, filter: dict | None) -> dict:
        payload: dict = {"exact": True}
        if filter:
            payload["filter"] = filter
        return payload

    def get_delete_payload(self, filter: dict) -> dict:
        return {"filter": filter}

    ##########################################
    ########### RESPONSE PARSER ##############
    ##########################################

    def extract_collection_names(self, raw_response: dict) -> list[str]:
        collections = (raw_response.get("result") or {}).get("collections", [])
        return [collection["name"] for collection in collections if collection.get("name")]

    def extract_vector_size(self, raw_response: dict) -> int | None:
        vectors = (
            (raw_response.get("result") or {})
            .get("config", {})
            .get("params", {})
            .get("vectors", {})
        )
        # named-vector collections map names to configs and have no single size
        size = vectors.get("size") if isinstance(vectors, dict) else None
        return int(size) if size is not None else None

    def extract_search_hits(self, raw_response: dict) -> list[dict]:
        return raw_response.get("result") or []

    def extract_count(self, raw_response: dict) -> int:
        return int((raw_response.get("result") or {}).get("count", 0))

    def is_already_exists(self, response: httpx.Response) -> bool:
        # 409 on current Qdrant, 400 with "already exists" on older releases
        if response.status_code == 409:
            return True
        return response.status_code == 400 and "already exists" in response.text.lower()
