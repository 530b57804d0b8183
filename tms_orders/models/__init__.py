from .order import Order, OrderTrip, OrderTripMessage, OrderTripStatus
from .route import AddressInformation, Route, RouteDeliveryPoint, RoutePoint
from .vehicle import Vehicle
