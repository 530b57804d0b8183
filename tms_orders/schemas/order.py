from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Any
from datetime import date, datetime
from tms_orders.models.enums import OrderParticipantRole, OrderStatusType
from tms_orders.schemas.common import EntityRef
from tms_orders.schemas.customer import CustomerInput
from tms_orders.schemas.dispatch import DispatchResult
from tms_orders.schemas.route import RouteInput, RoutePointRef

class OrderRouteStatusInput(BaseModel):
    id: Optional[int] = None
    route_point: RoutePointRef
    meta: Optional[Dict[str, Any]] = None

class OrderItemInput(BaseModel):
    id: Optional[int] = None
    name: str
    quantity: Optional[float] = None
    unit_id: Optional[int] = None
    notes: Optional[str] = None

class OrderParticipantInput(BaseModel):
    id: Optional[int] = None
    user_id: int
    role: OrderParticipantRole = OrderParticipantRole.VIEWER

class OrderBase(BaseModel):
    order_date: Optional[datetime] = None
    delivery_date: Optional[datetime] = None
    payment_due_date: Optional[date] = None
    payment_date: Optional[date] = None
    is_draft: bool = False
    total_amount: Optional[float] = None
    weight: Optional[float] = Field(None, ge=0)
    cbm: Optional[float] = Field(None, ge=0)
    unit_id: Optional[int] = None
    notes: Optional[str] = None
    merchandise_type_ids: List[int] = []
    merchandise_note: Optional[str] = None
    meta: Optional[Dict[str, Any]] = None
    customer: Optional[CustomerInput] = None
    route: Optional[RouteInput] = None
    route_statuses: List[OrderRouteStatusInput] = []
    items: List[OrderItemInput] = []
    participants: List[OrderParticipantInput] = []

class OrderCreate(OrderBase):
    pass

class OrderUpdate(OrderBase):
    code: str
    last_status_type: Optional[OrderStatusType] = None
    # Snapshot of the references the order had when the caller loaded it
    last_customer: EntityRef = EntityRef()
    last_route: EntityRef = EntityRef()

class OrderResponse(BaseModel):
    id: int
    code: str
    dispatch: Optional[DispatchResult] = None
