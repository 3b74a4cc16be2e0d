from abc import abstractmethod

import httpx
from shared.clients.ClientInterface import ClientInterface
from shared.helper.HelperConfig import HelperConfig
from shared.models.errors import EmbedModelUnavailableError

# Lowercased fragments of provider error bodies that mean "this model cannot be used"
_MODEL_UNAVAILABLE_MARKERS = (
    "not found",
    "not supported",
    "unsupported",
    "does not exist",
    "unavailable",
    "not available",
    "invalid model",
    "unknown model",
)


class EmbedClientInterface(ClientInterface):
    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)

        # model and batching config
        self.embed_model: str = helper_config.get_string_val(f"{self.get_client_type().upper()}_MODEL", default=self._get_default_model())
        self.fallback_models: list[str] = self.get_config_val("FALLBACK_MODELS", default=[], val_type="list")
        self.max_batch_size = int(self.get_config_val("MAX_BATCH_SIZE", default=self._get_default_max_batch_size(), val_type="number"))
        if self.max_batch_size <= 0:
            raise ValueError(f"Max batch size for embed client '{self.get_engine_name()}' must be positive, got {self.max_batch_size}.")

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_client_type(self) -> str:
        """
        Returns the type of the client. E.g. "embed"
        """
        return "embed"

    def get_active_model(self) -> str:
        """Returns the model currently used for embedding requests.

        Starts as EMBED_MODEL and changes when a fallback model takes over.
        """
        return self.embed_model

    def normalize_model_name(self, name: str) -> str:
        """Strip provider decorations from a model name. E.g. "models/x" → "x"."""
        return name.strip()

    ################ MODELS ##################
    @abstractmethod
    def _get_default_model(self) -> str:
        """Returns the model used when EMBED_MODEL is not set."""
        pass

    @abstractmethod
    def _get_default_max_batch_size(self) -> int:
        """Returns the maximum number of texts the backend accepts per embedding request."""
        pass

    @abstractmethod
    def _get_known_good_models(self) -> list[str]:
        """Returns embedding models known to work on this backend, most preferred first."""
        pass

    ################ ENDPOINTS ##################
    def _get_endpoint_healthcheck(self) -> str:
        return self._get_endpoint_models()

    @abstractmethod
    def _get_endpoint_models(self) -> str:
        """
        Returns the endpoint path for model listing requests (e.g. "/models").
        """
        pass

    def _get_models_params(self) -> dict | None:
        """Returns query parameters for the model listing request, if any."""
        return None

    @abstractmethod
    def get_endpoint_embedding(self, model: str, batch_size: int) -> str:
        """
        Returns the endpoint path for an embedding request.

        Args:
            model (str): The model the request is sent for.
            batch_size (int): Number of texts in the request; some backends use a
                different endpoint for single texts.
        """
        pass

    ################ PAYLOAD BUILDER ##################
    @abstractmethod
    def get_embed_payload(self, texts: list[str], model: str) -> dict:
        """Build the backend-specific request body for an embedding request.

        Args:
            texts (list[str]): The texts to embed, never more than max_batch_size.
            model (str): The model to embed with.

        Returns:
            dict: JSON-serialisable request body.
        """
        pass

    ##########################################
    ########### RESPONSE PARSER ##############
    ##########################################

    @abstractmethod
    def extract_embeddings_from_response(self, response_data: dict) -> list[list[float]]:
        """Extract embedding vectors from a raw embedding API response.

        Args:
            response_data (dict): The parsed JSON response body.

        Returns:
            list[list[float]]: Embedding vectors in the same order as the input texts.

        Raises:
            ValueError: If the response format is invalid or embeddings are empty.
        """
        pass

    @abstractmethod
    def extract_model_names_from_listing(self, response_data: dict | list) -> list[str]:
        """Extract the names of embedding-capable models from a model listing response."""
        pass

    def is_model_unavailable(self, response: httpx.Response) -> bool:
        """Decide whether a failed embedding response means the model itself is unusable.

        Only such failures trigger the fallback model search; everything else is
        surfaced immediately.
        """
        if response.status_code == 404:
            return True
        if response.status_code in (400, 422):
            body = response.text.lower()
            return "model" in body and any(marker in body for marker in _MODEL_UNAVAILABLE_MARKERS)
        return False

    ##########################################
    ############### REQUESTS #################
    ##########################################

    async def do_fetch_model_names(self) -> list[str]:
        """Fetch the names of embedding-capable models offered by the backend.

        Returns:
            list[str]: Normalised model names in backend order.
        """
        response = await self.do_request(
            method="GET",
            endpoint=self._get_endpoint_models(),
            params=self._get_models_params(),
            raise_on_error=True,
        )
        return [self.normalize_model_name(name) for name in self.extract_model_names_from_listing(response.json())]

    async def do_get_fallback_candidates(self, exclude: list[str]) -> list[str]:
        """Build the ordered, de-duplicated list of models to try after a model failure.

        Order: known-good models, models discovered through the listing endpoint,
        then EMBED_<ENGINE>_FALLBACK_MODELS. A failing listing call only shortens the list.

        Args:
            exclude (list[str]): Models that already failed.
        """
        candidates = list(self._get_known_good_models())
        try:
            candidates.extend(await self.do_fetch_model_names())
        except Exception as exc:
            self.logging.warning("Could not list models on embed backend '%s': %s", self.get_engine_name(), exc)
        candidates.extend(self.fallback_models)

        seen = {self.normalize_model_name(name) for name in exclude}
        ordered: list[str] = []
        for name in candidates:
            name = self.normalize_model_name(name)
            if name and name not in seen:
                seen.add(name)
                ordered.append(name)
        return ordered

    async def _do_embed_with_model(self, texts: list[str], model: str) -> list[list[float]]:
        """Send one embedding request for the given model.

        Raises:
            EmbedModelUnavailableError: If the backend rejects the model.
            ValueError: If the response holds a different number of vectors than texts.
            Exception: On any other non-2xx status.
        """
        response = await self.do_request(
            method="POST",
            endpoint=self.get_endpoint_embedding(model, len(texts)),
            json=self.get_embed_payload(texts, model),
        )
        if response.is_success:
            vectors = self.extract_embeddings_from_response(response.json())
            if len(vectors) != len(texts):
                raise ValueError(
                    f"Embed backend '{self.get_engine_name()}' returned {len(vectors)} vectors for {len(texts)} texts."
                )
            return vectors
        if self.is_model_unavailable(response):
            raise EmbedModelUnavailableError(
                f"Model '{model}' is not available on '{self.get_engine_name()}': status {response.status_code} {response.text[:200]}",
                model=model,
            )
        self.logging.error(
            "Embedding request failed: status %d, body: %s",
            response.status_code,
            response.text[:200],
        )
        raise Exception("Embedding request failed with status %d." % response.status_code)

    async def _do_embed_batch(self, texts: list[str]) -> tuple[list[list[float]], str]:
        """Embed one batch with the active model, walking the fallback candidates on a model failure.

        Returns:
            tuple[list[list[float]], str]: The vectors and the model that produced them.

        Raises:
            EmbedModelUnavailableError: If every candidate model was rejected.
        """
        primary = self.embed_model
        try:
            return await self._do_embed_with_model(texts, primary), primary
        except EmbedModelUnavailableError as exc:
            last_error: Exception = exc
            self.logging.warning("%s Searching fallback models.", exc)

        tried = [primary]
        for candidate in await self.do_get_fallback_candidates(exclude=tried):
            tried.append(candidate)
            try:
                vectors = await self._do_embed_with_model(texts, candidate)
            except EmbedModelUnavailableError as exc:
                last_error = exc
                self.logging.debug("Fallback model '%s' rejected: %s", candidate, exc)
                continue
            self.logging.warning(
                "Embedding model switched from '%s' to '%s' on '%s'.",
                primary, candidate, self.get_engine_name(),
                color="yellow",
            )
            self.embed_model = candidate
            return vectors, candidate

        raise EmbedModelUnavailableError(
            f"No usable embedding model on '{self.get_engine_name()}' after trying {tried}. Last error: {last_error}",
            tried=tried,
        )

    async def do_embed(self, texts: list[str] | str) -> list[list[float]]:
        """Embed texts, splitting them into backend-sized batches.

        Args:
            texts (list[str] | str): One or more texts to embed.

        Returns:
            list[list[float]]: Embedding vectors in the same order as the inputs.

        Raises:
            EmbedModelUnavailableError: If no candidate model could embed the texts.
            ValueError: If a response does not contain valid embeddings.
            Exception: If an HTTP request fails for another reason.
        """
        texts = [texts] if isinstance(texts, str) else list(texts)
        if not texts:
            return []
        return await self._do_embed_all(texts, allow_restart=True)

    async def _do_embed_all(self, texts: list[str], allow_restart: bool) -> list[list[float]]:
        vectors: list[list[float]] = []
        first_model: str | None = None
        for start in range(0, len(texts), self.max_batch_size):
            batch_vectors, model = await self._do_embed_batch(texts[start:start + self.max_batch_size])
            if first_model is None:
                first_model = model
            elif model != first_model:
                # earlier batches came from a model that has since been replaced
                if not allow_restart:
                    raise ValueError(f"Embedding model changed from '{first_model}' to '{model}' during one request.")
                return await self._do_embed_all(texts, allow_restart=False)
            vectors.extend(batch_vectors)
        return vectors
