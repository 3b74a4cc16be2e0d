"""Resolves the human-readable label used in a tenant's collection names."""

from shared.clients.tenant.TenantClientInterface import TenantClientInterface
from shared.helper.HelperConfig import HelperConfig
from services.tenant_rag.naming import normalize_token


class TenantLabelResolver:
    """Looks up tenant display names, falling back to the raw tenant id.

    Successful lookups are kept for the lifetime of the process so a tenant's
    collection name does not flip when the tenant store becomes unreachable
    later on.
    """

    def __init__(self, helper_config: HelperConfig, tenant_client: TenantClientInterface | None = None) -> None:
        self.logging = helper_config.get_logger()
        self._tenant_client = tenant_client
        self._labels: dict[str, str] = {}

    async def do_resolve_label(self, tenant_id: str) -> str:
        """Return the tenant's display name, or tenant_id if none can be used.

        Never raises for lookup failures.
        """
        if tenant_id in self._labels:
            return self._labels[tenant_id]
        if self._tenant_client is None:
            return tenant_id

        try:
            name = await self._tenant_client.do_fetch_tenant_name(tenant_id)
        except Exception as exc:
            self.logging.warning("Tenant name lookup failed for tenant_id=%s (%s), using tenant id as label.", tenant_id, exc)
            return tenant_id

        if not name or not normalize_token(name):
            self.logging.debug("Tenant %s has no usable display name, using tenant id as label.", tenant_id)
            return tenant_id

        self._labels[tenant_id] = name
        return name

    def forget(self, tenant_id: str) -> None:
        """Drop the remembered label of a tenant, e.g. after offboarding."""
        self._labels.pop(tenant_id, None)
