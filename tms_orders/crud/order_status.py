from typing import Any, Dict
from tms_orders.crud.base import CRUDBase
from tms_orders.models.enums import OrderStatusType
from tms_orders.services.content_api import ContentApiClient


class CRUDOrderStatus(CRUDBase):
    """Order status history. Statuses are only ever appended."""

    async def append_status(
        self,
        client: ContentApiClient,
        *,
        organization_id: int,
        order_id: int,
        type: OrderStatusType,
        actor_id: int
    ) -> Dict[str, Any]:
        return await self.create(client, data={
            "organization_id": organization_id,
            "type": type,
            "order": order_id,
            "created_by_user": actor_id,
            "updated_by_user": actor_id,
        })


order_status = CRUDOrderStatus("orderStatus", collection="orderStatuses")
