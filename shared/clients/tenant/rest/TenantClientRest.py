from urllib.parse import quote

from shared.clients.tenant.TenantClientInterface import TenantClientInterface
from shared.helper.HelperConfig import HelperConfig
from shared.models.config import EnvConfig


class TenantClientRest(TenantClientInterface):
    """Tenant store reached over a JSON REST API: GET /tenants/<id> → {"name": ...}."""

    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)
        self._base_url = self.get_config_val("BASE_URL", default=None, val_type="string")
        self._api_key = self.get_config_val("API_KEY", default="", val_type="string")
        self._name_field = self.get_config_val("NAME_FIELD", default="name", val_type="string")

    def _get_engine_name(self) -> str:
        return "Rest"

    def _get_required_config(self) -> list[EnvConfig]:
        return [
            EnvConfig(env_key="BASE_URL", val_type="string", default=None),
            EnvConfig(env_key="API_KEY", val_type="string", default=""),
            EnvConfig(env_key="NAME_FIELD", val_type="string", default="name"),
        ]

    def _get_auth_header(self) -> dict:
        if self._api_key:
            return {"Authorization": f"Bearer {self._api_key}"}
        return {}

    def _get_base_url(self) -> str:
        return self._base_url

    def _get_endpoint_healthcheck(self) -> str:
        return "/healthz"

    def _get_endpoint_tenant(self, tenant_id: str) -> str:
        return f"/tenants/{quote(tenant_id, safe='')}"

    def extract_tenant_name(self, raw_response: dict) -> str | None:
        # some stores wrap the record in {"tenant": {...}}
        record = raw_response.get("tenant", raw_response)
        name = record.get(self._name_field) if isinstance(record, dict) else None
        return name.strip() if isinstance(name, str) and name.strip() else None
