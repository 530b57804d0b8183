from typing import Any, Dict, Optional
from tms_orders.crud.base import CRUDBase
from tms_orders.schemas.route import RoutePointInput
from tms_orders.services.content_api import ContentApiClient


class CRUDRoutePoint(CRUDBase):
    """CRUD operations for route points."""

    async def upsert_route_point(
        self,
        client: ContentApiClient,
        *,
        point: RoutePointInput,
        organization_id: int,
        address_id: Optional[int],
        display_order: int,
        actor_id: int
    ) -> Dict[str, Any]:
        """
        Create or update a route point with its resolved address reference.

        Pending points (temp id only) are always created; the temp id never
        reaches the API.
        """
        data = {
            "id": point.id,
            "organization_id": organization_id,
            "code": point.code.strip() if point.code else point.code,
            "name": point.name.strip() if point.name else point.name,
            "address": address_id,
            "contact_name": point.contact_name,
            "contact_email": point.contact_email,
            "contact_phone_number": point.contact_phone_number,
            "notes": point.notes,
            "display_order": display_order,
            "updated_by_user": actor_id,
        }
        if not point.id:
            data["created_by_user"] = actor_id
        return await self.upsert(client, data=data)


route_point = CRUDRoutePoint("routePoint")
