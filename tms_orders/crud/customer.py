from typing import Any, Dict, Optional
from tms_orders.crud.base import CRUDBase
from tms_orders.schemas.customer import CustomerInput
from tms_orders.services.content_api import ContentApiClient


class CRUDCustomer(CRUDBase):
    """CRUD operations for customers."""

    def _customer_data(self, customer: CustomerInput, organization_id: int, actor_id: int) -> Dict[str, Any]:
        data = customer.model_dump(exclude={"id", "bank_account"})
        data["organization_id"] = organization_id
        data["updated_by_user"] = actor_id
        return data

    async def create_customer(
        self,
        client: ContentApiClient,
        *,
        customer: CustomerInput,
        organization_id: int,
        bank_account_id: Optional[int],
        actor_id: int
    ) -> Dict[str, Any]:
        data = self._customer_data(customer, organization_id, actor_id)
        data["bank_account"] = bank_account_id
        data["created_by_user"] = actor_id
        return await self.create(client, data=data)

    async def update_customer(
        self,
        client: ContentApiClient,
        *,
        customer: CustomerInput,
        organization_id: int,
        actor_id: int
    ) -> Dict[str, Any]:
        data = self._customer_data(customer, organization_id, actor_id)
        return await self.update(client, id=customer.id, data=data)


customer = CRUDCustomer("customer", returning=("code",))
