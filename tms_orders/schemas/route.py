from pydantic import BaseModel, model_validator
from typing import Optional, List
from tms_orders.models.enums import RouteType
from tms_orders.schemas.common import AddressInput

class RoutePointRef(BaseModel):
    """Reference to a route point by persisted id or by a client-issued temp id."""
    id: Optional[int] = None
    temp_id: Optional[str] = None

class RoutePointInput(BaseModel):
    id: Optional[int] = None
    temp_id: Optional[str] = None
    code: Optional[str] = None
    name: Optional[str] = None
    contact_name: Optional[str] = None
    contact_email: Optional[str] = None
    contact_phone_number: Optional[str] = None
    notes: Optional[str] = None
    display_order: Optional[int] = None
    address: Optional[AddressInput] = None

    @model_validator(mode="after")
    def check_reference(self):
        if self.id is None and not self.temp_id:
            raise ValueError("A route point needs either an id or a temp_id")
        return self

class RouteInput(BaseModel):
    id: Optional[int] = None
    type: RouteType = RouteType.NON_FIXED
    code: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None
    is_active: bool = True
    pickup_points: List[RoutePointInput] = []
    delivery_points: List[RoutePointInput] = []
    distance: Optional[float] = None
    price: Optional[float] = None
    subcontractor_cost: Optional[float] = None
    driver_cost: Optional[float] = None
    bridge_toll: Optional[float] = None
    other_cost: Optional[float] = None
