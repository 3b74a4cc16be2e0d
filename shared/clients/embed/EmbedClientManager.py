import importlib

from shared.helper.HelperConfig import HelperConfig
from shared.clients.embed.EmbedClientInterface import EmbedClientInterface


class EmbedClientManager:
    """Builds the embedding client named by EMBED_ENGINE ("gemini", "openai", "together").

    The engine class is looked up as shared.clients.embed.<engine>.EmbedClient<Engine>.
    """

    def __init__(self, helper_config: HelperConfig):
        self.helper_config = helper_config
        self.logging = helper_config.get_logger()
        self.client = self._initialize_client()

    def _initialize_client(self) -> EmbedClientInterface:
        """
        Raises:
            ValueError: If EMBED_ENGINE is unset or unknown, or the engine's own settings are incomplete.
        """
        engine = self.helper_config.get_string_val("EMBED_ENGINE").lower().capitalize()
        module_path = f"shared.clients.embed.{engine.lower()}.EmbedClient{engine}"
        try:
            client_class = getattr(importlib.import_module(module_path), f"EmbedClient{engine}")
        except (ImportError, AttributeError) as e:
            raise ValueError(f"Unsupported Embed engine specified: '{engine}'. Error: {e}")

        client = client_class(helper_config=self.helper_config)
        self.logging.debug("Embedding engine %s ready, primary model %s", engine, client.get_active_model())
        return client

    def get_client(self) -> EmbedClientInterface:
        return self.client
