from tms_orders.crud.base import CRUDBase
from .address import address_information
from .bank_account import bank_account
from .customer import customer
from .route_point import route_point
from .route import route
from .order import order
from .order_route_status import order_route_status
from .order_status import order_status
from .order_item import order_item
from .order_participant import order_participant
from .organization_setting import organization_setting

__all__ = [
    "CRUDBase",
    "address_information",
    "bank_account",
    "customer",
    "route_point",
    "route",
    "order",
    "order_route_status",
    "order_status",
    "order_item",
    "order_participant",
    "organization_setting",
]
