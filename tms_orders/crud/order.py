from typing import Any, Dict, Optional
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from tms_orders.crud.base import CRUDBase
from tms_orders.models.order import Order
from tms_orders.services.content_api import ContentApiClient

DISPATCH_POINT_SELECTION = "data { attributes { address { data { attributes { latitude longitude } } } } }"


class CRUDOrder(CRUDBase):
    """CRUD operations for orders."""

    async def code_exists(
        self,
        db: AsyncSession,
        organization_id: int,
        code: str,
        exclude_id: Optional[int] = None
    ) -> bool:
        """
        Check whether an order code is already taken within an organization.

        Reads the relational store directly; drafts and unpublished orders
        still hold their code.
        """
        stmt = select(Order.id).where(
            Order.organization_id == organization_id,
            Order.code == code
        )
        if exclude_id:
            stmt = stmt.where(Order.id != exclude_id)
        result = await db.execute(stmt.limit(1))
        return result.scalar_one_or_none() is not None

    async def update_partial(
        self,
        client: ContentApiClient,
        *,
        id: int,
        data: Dict[str, Any]
    ) -> Dict[str, Any]:
        """Update only the given fields, leaving the rest untouched."""
        return await self.update(client, id=id, data={k: v for k, v in data.items() if v is not None})

    async def get_dispatch_data(
        self,
        client: ContentApiClient,
        organization_id: int,
        code: str
    ) -> Optional[Dict[str, Any]]:
        """
        Load the fields the auto-dispatch pass needs for one order.

        Returns:
            Normalized order record, or None if no published order has this code
        """
        fields = (
            "orderDate",
            "deliveryDate",
            "weight",
            "route { data { id attributes { "
            f"pickupPoints {{ {DISPATCH_POINT_SELECTION} }} "
            f"deliveryPoints {{ {DISPATCH_POINT_SELECTION} }} }} }}",
            "unit { data { id attributes { type code name } } }",
            "customer { data { id } }",
        )
        orders = await self.find(
            client,
            filters="organizationId: { eq: $organizationId }, code: { eq: $code }",
            variables={"organizationId": organization_id, "code": code},
            fields=fields,
            variable_types={"organizationId": "Int!", "code": "String"}
        )
        return orders[0] if orders else None


order = CRUDOrder("order", returning=("code",))
