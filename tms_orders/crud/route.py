from typing import Any, Dict, List, Optional
from tms_orders.crud.base import CRUDBase
from tms_orders.schemas.route import RouteInput
from tms_orders.services.content_api import ContentApiClient


class CRUDRoute(CRUDBase):
    """CRUD operations for routes."""

    def _route_data(
        self,
        route: RouteInput,
        *,
        pickup_point_ids: List[int],
        delivery_point_ids: List[int],
        organization_id: int,
        customer_id: Optional[int],
        actor_id: int
    ) -> Dict[str, Any]:
        return {
            "organization_id": organization_id,
            "customer_id": customer_id,
            "type": route.type,
            "code": route.code.strip() if route.code else route.code,
            "name": route.name.strip() if route.name else route.name,
            "description": route.description,
            "is_active": route.is_active,
            "pickup_points": pickup_point_ids,
            "delivery_points": delivery_point_ids,
            "distance": route.distance,
            "price": route.price,
            "subcontractor_cost": route.subcontractor_cost,
            "driver_cost": route.driver_cost,
            "bridge_toll": route.bridge_toll,
            "other_cost": route.other_cost,
            "updated_by_user": actor_id,
        }

    async def create_route(self, client: ContentApiClient, *, route: RouteInput, **kwargs) -> Dict[str, Any]:
        """Create a route from already persisted pickup/delivery point ids."""
        data = self._route_data(route, **kwargs)
        data["created_by_user"] = kwargs["actor_id"]
        return await self.create(client, data=data)

    async def update_route(self, client: ContentApiClient, *, route: RouteInput, **kwargs) -> Dict[str, Any]:
        """Update a route, replacing its point lists in the given order."""
        return await self.update(client, id=route.id, data=self._route_data(route, **kwargs))


route = CRUDRoute("route")
