from typing import Any, Dict, List, Optional
from tms_orders.crud.base import CRUDBase
from tms_orders.services.content_api import ContentApiClient


class CRUDOrderRouteStatus(CRUDBase):
    """CRUD operations for per-order route point statuses."""

    async def upsert_status(
        self,
        client: ContentApiClient,
        *,
        status_id: Optional[int],
        route_point_id: int,
        meta: Optional[Dict[str, Any]],
        organization_id: int,
        actor_id: int
    ) -> Dict[str, Any]:
        """
        Create or update a route status bound to a persisted route point.

        Args:
            status_id: Existing status id, or None to create
            route_point_id: Persisted route point id
            meta: Custom field values for this route point
            organization_id: Organization scope
            actor_id: User recorded as creator/updater
        """
        data = {
            "id": status_id,
            "organization_id": organization_id,
            "route_point": route_point_id,
            "meta": meta,
            "updated_by_user": actor_id,
        }
        if not status_id:
            data["created_by_user"] = actor_id
        return await self.upsert(client, data=data)

    async def get_by_order_id(self, client: ContentApiClient, order_id: int) -> List[Dict[str, Any]]:
        """Current route statuses of an order, each with its route point id."""
        return await self.find(
            client,
            filters="order: { id: { eq: $orderId } }",
            variables={"orderId": order_id},
            fields=("routePoint { data { id } }",),
            variable_types={"orderId": "ID!"}
        )


order_route_status = CRUDOrderRouteStatus("orderRouteStatus", collection="orderRouteStatuses")
