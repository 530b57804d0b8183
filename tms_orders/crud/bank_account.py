from typing import Any, Dict, Optional
from tms_orders.crud.base import CRUDBase
from tms_orders.schemas.customer import BankAccountInput
from tms_orders.services.content_api import ContentApiClient


class CRUDBankAccount(CRUDBase):

    async def create_bank_account(
        self,
        client: ContentApiClient,
        *,
        bank_account: Optional[BankAccountInput],
        actor_id: int
    ) -> Dict[str, Any]:
        data = bank_account.model_dump(exclude={"id"}) if bank_account else {}
        data["created_by_user"] = actor_id
        data["updated_by_user"] = actor_id
        return await self.create(client, data=data)


bank_account = CRUDBankAccount("bankAccount")
