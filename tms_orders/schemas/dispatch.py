from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from typing import Optional, Any, Dict, List
from datetime import datetime
from tms_orders.schemas.common import Location

class DispatchResult(BaseModel):
    """Caller-facing outcome of an auto-dispatch pass."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    number_of_dispatched_vehicle: int = 0
    message: str = ""
    color: str = "warning"

class DispatchWindow(BaseModel):
    """Pickup/delivery window of the order being dispatched, inclusive on both ends."""
    start: datetime
    end: datetime

class CandidateVehicle(BaseModel):
    """One row of the availability query."""
    model_config = ConfigDict(from_attributes=True)

    vehicle_id: int
    vehicle_number: str
    ton_payload_capacity: Optional[float] = None
    cubic_meter_capacity: Optional[float] = None
    pallet_capacity: Optional[float] = None
    latitude: float = 0
    longitude: float = 0
    total_cost: float = 0
    total_trip: int = 0

    @property
    def has_location(self) -> bool:
        return bool(self.latitude and self.longitude)


class DispatchUnit(BaseModel):
    id: Optional[int] = None
    type: Optional[str] = None
    code: Optional[str] = None
    name: Optional[str] = None

class DispatchOrder(BaseModel):
    """Order snapshot used to build the commodity descriptor."""
    id: int
    code: str
    order_date: Optional[datetime] = None
    delivery_date: Optional[datetime] = None
    weight: Optional[float] = None
    unit: Optional[DispatchUnit] = None
    customer_id: Optional[int] = None
    route_id: Optional[int] = None
    pickup_location: Optional[Location] = None
    delivery_location: Optional[Location] = None

    @classmethod
    def from_content(cls, code: str, data: Dict[str, Any]) -> "DispatchOrder":
        """Build from the normalized content API order record."""
        route = data.get("route") or {}
        unit = data.get("unit")
        customer = data.get("customer") or {}
        return cls(
            id=int(data["id"]),
            code=code,
            order_date=data.get("orderDate"),
            delivery_date=data.get("deliveryDate"),
            weight=data.get("weight"),
            unit=DispatchUnit(**unit) if unit else None,
            customer_id=customer.get("id"),
            route_id=route.get("id"),
            pickup_location=_first_point_location(route.get("pickupPoints")),
            delivery_location=_first_point_location(route.get("deliveryPoints")),
        )


def _first_point_location(points: Optional[List[Dict[str, Any]]]) -> Optional[Location]:
    if not points:
        return None
    address = points[0].get("address") or {}
    latitude = address.get("latitude")
    longitude = address.get("longitude")
    if latitude is None or longitude is None:
        return None
    return Location(lat=latitude, lng=longitude)
