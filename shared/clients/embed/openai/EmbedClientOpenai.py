from shared.clients.embed.EmbedClientInterface import EmbedClientInterface
from shared.helper.HelperConfig import HelperConfig
from shared.models.config import EnvConfig


class EmbedClientOpenai(EmbedClientInterface):
    """Embed client for the OpenAI /embeddings API and compatible backends."""

    DEFAULT_BASE_URL = "https://api.openai.com/v1"
    DEFAULT_MODEL = "text-embedding-3-small"
    DEFAULT_MAX_BATCH_SIZE = 2048
    KNOWN_GOOD_MODELS = ["text-embedding-3-small", "text-embedding-3-large", "text-embedding-ada-002"]

    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)
        self._base_url = self.get_config_val("BASE_URL", default=self.DEFAULT_BASE_URL, val_type="string")
        self._api_key = self.get_config_val("API_KEY", default=None, val_type="string")

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_engine_name(self) -> str:
        return "Openai"

    ################ MODELS ##################
    def _get_default_model(self) -> str:
        return self.DEFAULT_MODEL

    def _get_default_max_batch_size(self) -> int:
        return self.DEFAULT_MAX_BATCH_SIZE

    def _get_known_good_models(self) -> list[str]:
        return list(self.KNOWN_GOOD_MODELS)

    ################ CONFIG ##################
    def _get_required_config(self) -> list[EnvConfig]:
        return [
            EnvConfig(env_key="BASE_URL", val_type="string", default=self.DEFAULT_BASE_URL),
            EnvConfig(env_key="API_KEY", val_type="string", default=None),
            EnvConfig(env_key="FALLBACK_MODELS", val_type="list", default=[]),
            EnvConfig(env_key="MAX_BATCH_SIZE", val_type="number", default=self.DEFAULT_MAX_BATCH_SIZE),
        ]

    ################ AUTH ##################
    def _get_auth_header(self) -> dict:
        return {"Authorization": f"Bearer {self._api_key}"}

    ################ ENDPOINTS ##################
    def _get_base_url(self) -> str:
        return self._base_url

    def _get_endpoint_models(self) -> str:
        return "/models"

    def get_endpoint_embedding(self, model: str, batch_size: int) -> str:
        # model travels in the body
        return "/embeddings"

    ################ PAYLOAD BUILDER ##################
    def get_embed_payload(self, texts: list[str], model: str) -> dict:
        return {"model": model, "input": texts}

    ##########################################
    ########### RESPONSE PARSER ##############
    ##########################################

    def extract_embeddings_from_response(self, response_data: dict) -> list[list[float]]:
        """Extract embedding vectors from an OpenAI-compatible response.

        The "data" items carry an "index" field and are sorted by it, since the
        API does not promise input order.

        Raises:
            ValueError: If the response does not contain valid embeddings.
        """
        data = response_data.get("data") or []
        items = sorted(data, key=lambda item: item.get("index", 0))
        vectors = [item.get("embedding") for item in items]
        if not vectors or not all(vectors):
            raise ValueError(
                f"{self._get_engine_name()} response does not contain valid embeddings. "
                f"Response keys: {list(response_data.keys())}"
            )
        return vectors

    def extract_model_names_from_listing(self, response_data: dict | list) -> list[str]:
        models = response_data.get("data", []) if isinstance(response_data, dict) else []
        return [model["id"] for model in models if "embedding" in model.get("id", "")]
