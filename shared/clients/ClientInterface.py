from abc import ABC, abstractmethod
from typing import Any

import httpx
from httpx._types import QueryParamTypes

from shared.helper.HelperConfig import HelperConfig
from shared.models.config import EnvConfig


class ClientInterface(ABC):
    """Base for every backend the retrieval core talks to over HTTP.

    A client is identified by (type, engine), e.g. ("vector", "qdrant"). Its
    settings are read from environment keys "<TYPE>_<ENGINE>_<KEY>", its timeout
    from "<TYPE>_TIMEOUT". The underlying httpx.AsyncClient exists only between
    boot() and close().
    """

    def __init__(self, helper_config: HelperConfig):
        self.logging = helper_config.get_logger()
        self._helper_config = helper_config
        self.timeout = helper_config.get_number_val(f"{self.get_client_type().upper()}_TIMEOUT", default=15.0)
        self._client: httpx.AsyncClient | None = None

        # fail on construction, not on the first request
        self.validate_full_configuration()

    ##########################################
    ############### CHECKER ##################
    ##########################################

    def validate_full_configuration(self) -> None:
        """Read every declared config key once.

        Raises:
            ValueError: If a key without default is unset or a value does not parse.
        """
        for config in self._get_required_config():
            self.get_config_val(raw_key=config.env_key, default=config.default, val_type=config.val_type)

    def is_booted(self) -> bool:
        return self._client is not None

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def get_client_type(self) -> str:
        return self._get_client_type().lower()

    @abstractmethod
    def _get_client_type(self) -> str:
        """E.g. "embed", "vector" or "tenant"."""
        pass

    def get_engine_name(self) -> str:
        return self._get_engine_name().lower()

    @abstractmethod
    def _get_engine_name(self) -> str:
        """Capitalised engine name matching the class suffix, e.g. "Qdrant"."""
        pass

    ################ CONFIG ##################
    @abstractmethod
    def _get_required_config(self) -> list[EnvConfig]:
        """Config keys the engine reads, validated at construction."""
        pass

    def _get_config_key_name(self, raw_key: str) -> str:
        return f"{self.get_client_type()}_{self.get_engine_name()}_{raw_key}".upper()

    def get_config_val(self, raw_key: str, default: Any = None, val_type: str = "string") -> Any:
        """Read an engine-scoped setting, e.g. raw_key "API_KEY" → EMBED_GEMINI_API_KEY.

        Args:
            raw_key (str): Key without the "<TYPE>_<ENGINE>_" prefix.
            default (Any): Value for an unset key; None makes the key required.
            val_type (str): "string", "number", "bool" or "list".

        Raises:
            ValueError: If the key is required but unset, or val_type is unknown.
        """
        readers = {
            "string": self._helper_config.get_string_val,
            "number": self._helper_config.get_number_val,
            "bool": self._helper_config.get_bool_val,
            "list": self._helper_config.get_list_val,
        }
        if val_type not in readers:
            raise ValueError(
                f"Unsupported config value type '{val_type}' for key '{raw_key}' of {self.get_client_type()} client '{self.get_engine_name()}'."
            )
        return readers[val_type](self._get_config_key_name(raw_key), default=default)

    ################ AUTH ##################
    @abstractmethod
    def _get_auth_header(self) -> dict:
        """Headers carrying the backend credential; empty if none is configured."""
        pass

    ################ ENDPOINTS ##################
    @abstractmethod
    def _get_base_url(self) -> str:
        """Root URL of the backend, e.g. "http://localhost:6333"."""
        pass

    @abstractmethod
    def _get_endpoint_healthcheck(self) -> str:
        pass

    ##########################################
    ############### REQUESTS #################
    ##########################################

    async def do_healthcheck(self) -> httpx.Response:
        """GET the health endpoint.

        Raises:
            Exception: If the backend answers with a non-2xx status.
        """
        return await self.do_request(method="GET", endpoint=self._get_endpoint_healthcheck(), raise_on_error=True)

    ##########################################
    ############ CORE REQUESTS ###############
    ##########################################

    async def boot(self, transport: httpx.AsyncBaseTransport | None = None) -> None:
        """Open the HTTP client. Tests pass an httpx.MockTransport as transport."""
        self._client = httpx.AsyncClient(timeout=self.timeout, transport=transport)

    async def close(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    async def do_request(
        self,
        method: str = "GET",
        json: dict | list | None = None,
        params: QueryParamTypes | None = None,
        endpoint: str = "",
        additional_headers: dict | None = None,
        raise_on_error: bool = False,
    ) -> httpx.Response:
        """Send one request to the backend and return the raw response.

        Non-2xx answers are returned to the caller, which knows which statuses
        are meaningful (404 → missing, 409 → already exists), unless
        raise_on_error is set.

        Args:
            method: HTTP method.
            json: JSON body.
            params: Query parameters.
            endpoint: Path below the base URL; the leading slash is optional.
            additional_headers: Headers merged over the auth header.
            raise_on_error: Raise on a non-2xx status.

        Raises:
            Exception: If boot() was not called, or on a non-2xx status with raise_on_error.
            httpx.TimeoutException: If the backend does not answer within self.timeout.
        """
        if not self.is_booted():
            raise Exception(f"{self.get_client_type()} client '{self.get_engine_name()}' is not booted. Call boot() first.")

        path = endpoint.strip()
        url = self._get_base_url().rstrip("/") + ("/" + path.lstrip("/") if path else "")
        headers = {**self._get_auth_header(), **(additional_headers or {})}

        response = await self._client.request(method, url, headers=headers, params=params, json=json, timeout=self.timeout)

        if raise_on_error and not response.is_success:
            self.logging.error("%s %s answered %d: %s", method, url, response.status_code, response.text[:200])
            raise Exception(f"Request to {url} failed with status {response.status_code}")
        return response
