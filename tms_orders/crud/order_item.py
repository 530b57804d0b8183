from typing import Any, Dict
from tms_orders.crud.base import CRUDBase
from tms_orders.schemas.order import OrderItemInput
from tms_orders.services.content_api import ContentApiClient


class CRUDOrderItem(CRUDBase):

    async def upsert_item(
        self,
        client: ContentApiClient,
        *,
        item: OrderItemInput,
        organization_id: int,
        order_id: int
    ) -> Dict[str, Any]:
        return await self.upsert(client, data={
            "id": item.id,
            "organization_id": organization_id,
            "order": order_id,
            "name": item.name,
            "quantity": item.quantity,
            "unit": item.unit_id,
            "notes": item.notes,
        })


order_item = CRUDOrderItem("orderItem")
