from typing import Any, Dict, List, Optional
from tms_orders.crud.base import CRUDBase
from tms_orders.schemas.order import OrderParticipantInput
from tms_orders.services.content_api import ContentApiClient


class CRUDOrderParticipant(CRUDBase):
    """CRUD operations for order participants."""

    async def upsert_participant(
        self,
        client: ContentApiClient,
        *,
        participant: OrderParticipantInput,
        participant_id: Optional[int],
        organization_id: int,
        order_id: int,
        actor_id: int
    ) -> Dict[str, Any]:
        """
        Create or update a participant of an order.

        Args:
            participant: Requested user and role
            participant_id: Id of the existing participant record for this user, if any
        """
        data = {
            "id": participant_id,
            "organization_id": organization_id,
            "order": order_id,
            "user": participant.user_id,
            "role": participant.role,
            "updated_by_user": actor_id,
        }
        if not participant_id:
            data["created_by_user"] = actor_id
        return await self.upsert(client, data=data)

    async def get_by_order_id(
        self,
        client: ContentApiClient,
        organization_id: int,
        order_id: int
    ) -> List[Dict[str, Any]]:
        return await self.find(
            client,
            filters="organizationId: { eq: $organizationId }, order: { id: { eq: $orderId } }",
            variables={"organizationId": organization_id, "orderId": order_id},
            fields=("role", "user { data { id } }"),
            variable_types={"organizationId": "Int!", "orderId": "ID!"}
        )


order_participant = CRUDOrderParticipant("orderParticipant")
