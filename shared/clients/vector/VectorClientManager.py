import importlib

from shared.helper.HelperConfig import HelperConfig
from shared.clients.vector.VectorClientInterface import VectorClientInterface


class VectorClientManager:
    """Resolves VECTOR_ENGINE to its VectorClient<Engine> class and constructs it once."""

    def __init__(self, helper_config: HelperConfig):
        self.helper_config = helper_config
        self.logging = helper_config.get_logger()
        self.client = self._initialize_client()

    def _load_client_class(self, engine: str) -> type[VectorClientInterface]:
        class_name = f"VectorClient{engine}"
        try:
            module = importlib.import_module(f"shared.clients.vector.{engine.lower()}.{class_name}")
            return getattr(module, class_name)
        except (ImportError, AttributeError) as e:
            raise ValueError(f"Unsupported vector engine specified: '{engine}'. Error: {e}")

    def _initialize_client(self) -> VectorClientInterface:
        engine = self.helper_config.get_string_val("VECTOR_ENGINE").lower().capitalize()
        client = self._load_client_class(engine)(helper_config=self.helper_config)
        self.logging.debug("Vector store client: %s", engine)
        return client

    def get_client(self) -> VectorClientInterface:
        return self.client
