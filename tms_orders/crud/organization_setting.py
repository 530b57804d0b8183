from typing import Any, Dict, Optional
from tms_orders.crud.base import CRUDBase
from tms_orders.schemas.organization_setting import OrderCodeSetting
from tms_orders.services.content_api import ContentApiClient


class CRUDOrganizationSetting(CRUDBase):
    """Read access to per-organization settings."""

    async def _get(self, client: ContentApiClient, organization_id: int, fields) -> Optional[Dict[str, Any]]:
        settings = await self.find(
            client,
            filters="organizationId: { eq: $organizationId }",
            variables={"organizationId": organization_id},
            fields=fields,
            variable_types={"organizationId": "Int!"}
        )
        return settings[0] if settings else None

    async def get_order_code_setting(self, client: ContentApiClient, organization_id: int) -> OrderCodeSetting:
        """Order code settings; an organization without settings gets random codes."""
        record = await self._get(client, organization_id, (
            "orderCodeGenerationType",
            "orderCodeMaxLength",
            "customerCodePrefixMaxLength",
            "routeCodePrefixMaxLength",
        ))
        return OrderCodeSetting.model_validate(record or {})

    async def get_auto_dispatch_setting(
        self,
        client: ContentApiClient,
        organization_id: int
    ) -> Optional[Dict[str, Any]]:
        """
        Raw auto-dispatch priority configuration.

        Returns:
            The ``autoDispatch`` JSON bag, or None when auto-dispatch is not configured
        """
        record = await self._get(client, organization_id, ("autoDispatch",))
        if not record:
            return None
        return record.get("autoDispatch") or None


organization_setting = CRUDOrganizationSetting("organizationSetting")
