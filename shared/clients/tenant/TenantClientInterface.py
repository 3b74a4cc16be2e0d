from abc import abstractmethod

from shared.clients.ClientInterface import ClientInterface
from shared.helper.HelperConfig import HelperConfig


class TenantClientInterface(ClientInterface):
    """Read-only access to the external tenant store.

    Only the tenant's display name is needed here; tenant records are never
    written by this service.
    """

    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)

    ################ GENERAL ##################
    def _get_client_type(self) -> str:
        return "tenant"

    ################ ENDPOINTS ##################
    @abstractmethod
    def _get_endpoint_tenant(self, tenant_id: str) -> str:
        """Returns the endpoint path of a single tenant record (e.g. "/tenants/<id>")."""
        pass

    ########### RESPONSE PARSER ##############
    @abstractmethod
    def extract_tenant_name(self, raw_response: dict) -> str | None:
        """Extracts the display name from a tenant record, None if it has none."""
        pass

    ############### REQUESTS #################
    async def do_fetch_tenant_name(self, tenant_id: str) -> str | None:
        """Fetch the display name of a tenant.

        Returns:
            str | None: The name, or None if the tenant is unknown or unnamed.

        Raises:
            Exception: If the tenant store fails for any other reason.
        """
        response = await self.do_request(method="GET", endpoint=self._get_endpoint_tenant(tenant_id))
        if response.status_code == 404:
            return None
        if not response.is_success:
            raise Exception(f"Tenant lookup for '{tenant_id}' failed with status {response.status_code}.")
        return self.extract_tenant_name(response.json())
