from typing import Any, Dict
from tms_orders.crud.base import CRUDBase
from tms_orders.schemas.common import AddressInput
from tms_orders.services.content_api import ContentApiClient


class CRUDAddressInformation(CRUDBase):
    """CRUD operations for address information records."""

    async def upsert_address(
        self,
        client: ContentApiClient,
        *,
        address: AddressInput,
        actor_id: int
    ) -> Dict[str, Any]:
        """
        Create or update an address, keyed by its id.

        Returns:
            Normalized address record
        """
        data = {
            "id": address.id,
            "country": address.country_id,
            "city": address.city_id,
            "district": address.district_id,
            "ward": address.ward_id,
            "postal_code": address.postal_code,
            "address_line1": address.address_line1,
            "address_line2": address.address_line2,
            "latitude": address.latitude,
            "longitude": address.longitude,
            "updated_by_user": actor_id,
        }
        if not address.id:
            data["created_by_user"] = actor_id
        return await self.upsert(client, data=data)


address_information = CRUDAddressInformation("addressInformation")
