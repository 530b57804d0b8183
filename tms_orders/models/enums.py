import enum


class CustomerType(str, enum.Enum):
    FIXED = "FIXED"
    CASUAL = "CASUAL"


class RouteType(str, enum.Enum):
    FIXED = "FIXED"
    NON_FIXED = "NON_FIXED"


class OrderStatusType(str, enum.Enum):
    NEW = "NEW"
    RECEIVED = "RECEIVED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELED = "CANCELED"


class OrderTripStatusType(str, enum.Enum):
    NEW = "NEW"
    PENDING_CONFIRMATION = "PENDING_CONFIRMATION"
    CONFIRMED = "CONFIRMED"
    WAREHOUSE_GOING_TO_PICKUP = "WAREHOUSE_GOING_TO_PICKUP"
    WAREHOUSE_PICKED_UP = "WAREHOUSE_PICKED_UP"
    WAREHOUSE_GOING_TO_DELIVER = "WAREHOUSE_GOING_TO_DELIVER"
    DELIVERED = "DELIVERED"
    COMPLETED = "COMPLETED"


class OrderParticipantRole(str, enum.Enum):
    OWNER = "OWNER"
    EDITOR = "EDITOR"
    VIEWER = "VIEWER"


class OrderCodeGenerationType(str, enum.Enum):
    CUSTOMER_SPECIFIC = "CUSTOMER_SPECIFIC"
    ROUTE_SPECIFIC = "ROUTE_SPECIFIC"
    RANDOM = "RANDOM"


class UnitOfMeasureType(str, enum.Enum):
    TON = "TON"
    KILOGRAM = "KILOGRAM"
    CUBIC_METER = "CUBIC_METER"
    PALLET = "PALLET"
    CONTAINER = "CONTAINER"
    PACKAGE = "PACKAGE"
    PIECE = "PIECE"
