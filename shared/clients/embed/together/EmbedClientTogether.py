from shared.clients.embed.openai.EmbedClientOpenai import EmbedClientOpenai


class EmbedClientTogether(EmbedClientOpenai):
    """Embed client for Together AI, which speaks the OpenAI embeddings protocol."""

    DEFAULT_BASE_URL = "https://api.together.xyz/v1"
    DEFAULT_MODEL = "nomic-ai/nomic-embed-text-v1.5"
    DEFAULT_MAX_BATCH_SIZE = 128
    KNOWN_GOOD_MODELS = [
        "nomic-ai/nomic-embed-text-v1.5",
        "BAAI/bge-base-en-v1.5",
        "togethercomputer/m2-bert-80M-8k-retrieval",
    ]

    def _get_engine_name(self) -> str:
        return "Together"

    def extract_model_names_from_listing(self, response_data: dict | list) -> list[str]:
        # Together returns a bare list of model objects tagged with a "type"
        models = response_data if isinstance(response_data, list) else response_data.get("data", [])
        return [model["id"] for model in models if model.get("type") == "embedding" and model.get("id")]
