import importlib

from shared.helper.HelperConfig import HelperConfig
from shared.clients.tenant.TenantClientInterface import TenantClientInterface


class TenantClientManager:
    """
    Manager class to instantiate the tenant store client, if one is configured.

    TENANT_ENGINE is optional: without it no client is built and collection
    labels fall back to raw tenant ids.
    """

    def __init__(self, helper_config: HelperConfig):
        self.helper_config = helper_config
        self.logging = helper_config.get_logger()
        self.client = self._initialize_client()

    def _initialize_client(self) -> TenantClientInterface | None:
        """
        Raises:
            ValueError: If TENANT_ENGINE names an unsupported engine or its configuration is incomplete.
        """
        if not self.helper_config.has_val("TENANT_ENGINE"):
            self.logging.info("No TENANT_ENGINE configured, collection labels use tenant ids.")
            return None

        engine = self.helper_config.get_string_val("TENANT_ENGINE").strip().lower().capitalize()
        class_name = f"TenantClient{engine}"
        try:
            module = importlib.import_module(f"shared.clients.tenant.{engine.lower()}.{class_name}")
            client_class = getattr(module, class_name)
        except (ImportError, AttributeError) as e:
            raise ValueError(f"Unsupported tenant engine specified: '{engine}'. Error: {e}")

        client = client_class(helper_config=self.helper_config)
        self.logging.debug("Instantiated tenant client for engine: %s", engine)
        return client

    def get_client(self) -> TenantClientInterface | None:
        return self.client
