from shared.clients.embed.EmbedClientInterface import EmbedClientInterface
from shared.helper.HelperConfig import HelperConfig
from shared.models.config import EnvConfig


class EmbedClientGemini(EmbedClientInterface):
    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)
        self._base_url = self.get_config_val("BASE_URL", default="https://generativelanguage.googleapis.com", val_type="string")
        self._api_key = self.get_config_val("API_KEY", default=None, val_type="string")

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_engine_name(self) -> str:
        return "Gemini"

    def normalize_model_name(self, name: str) -> str:
        # the listing endpoint returns "models/<name>"
        name = name.strip()
        return name[len("models/"):] if name.startswith("models/") else name

    ################ MODELS ##################
    def _get_default_model(self) -> str:
        return "text-embedding-004"

    def _get_default_max_batch_size(self) -> int:
        # batchEmbedContents accepts at most 100 requests
        return 100

    def _get_known_good_models(self) -> list[str]:
        return ["text-embedding-004", "gemini-embedding-001", "embedding-001"]

    ################ CONFIG ##################
    def _get_required_config(self) -> list[EnvConfig]:
        return [
            EnvConfig(env_key="BASE_URL", val_type="string", default="https://generativelanguage.googleapis.com"),
            EnvConfig(env_key="API_KEY", val_type="string", default=None),
            EnvConfig(env_key="FALLBACK_MODELS", val_type="list", default=[]),
            EnvConfig(env_key="MAX_BATCH_SIZE", val_type="number", default=100),
        ]

    ################ AUTH ##################
    def _get_auth_header(self) -> dict:
        return {"x-goog-api-key": self._api_key}

    ################ ENDPOINTS ##################
    def _get_base_url(self) -> str:
        return self._base_url

    def _get_endpoint_models(self) -> str:
        return "/v1beta/models"

    def _get_models_params(self) -> dict | None:
        return {"pageSize": 1000}

    def get_endpoint_embedding(self, model: str, batch_size: int) -> str:
        # single texts go through embedContent, everything else through batchEmbedContents
        method = "embedContent" if batch_size == 1 else "batchEmbedContents"
        return f"/v1beta/models/{model}:{method}"

    ################ PAYLOAD BUILDER ##################
    def _get_content_request(self, text: str, model: str) -> dict:
        return {"model": f"models/{model}", "content": {"parts": [{"text": text}]}}

    def get_embed_payload(self, texts: list[str], model: str) -> dict:
        """Build the Gemini embedding request body.

        Returns:
            dict: An embedContent request for one text, a batchEmbedContents request otherwise.
        """
        if len(texts) == 1:
            return self._get_content_request(texts[0], model)
        return {"requests": [self._get_content_request(text, model) for text in texts]}

    ##########################################
    ########### RESPONSE PARSER ##############
    ##########################################

    def extract_embeddings_from_response(self, response_data: dict) -> list[list[float]]:
        """Extract embedding vectors from an embedContent or batchEmbedContents response.

        Raises:
            ValueError: If the response does not contain valid embeddings.
        """
        if "embedding" in response_data:
            embeddings = [response_data.get("embedding") or {}]
        else:
            embeddings = response_data.get("embeddings") or []
        vectors = [embedding.get("values") for embedding in embeddings]
        if not vectors or not all(vectors):
            raise ValueError(
                "Gemini response does not contain valid embeddings. "
                f"Response keys: {list(response_data.keys())}"
            )
        return vectors

    def extract_model_names_from_listing(self, response_data: dict | list) -> list[str]:
        models = response_data.get("models", []) if isinstance(response_data, dict) else []
        return [
            model["name"]
            for model in models
            if model.get("name") and "embedContent" in (model.get("supportedGenerationMethods") or [])
        ]
