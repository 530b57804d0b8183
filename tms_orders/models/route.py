from sqlalchemy import Column, Integer, String, Float, ForeignKey, DateTime, Enum
from sqlalchemy.orm import relationship
from tms_orders.database import Base, TimestampMixin
from tms_orders.models.enums import RouteType

class AddressInformation(Base, TimestampMixin):
    __tablename__ = "address_informations"

    id = Column(Integer, primary_key=True, index=True)
    address_line1 = Column(String, nullable=True)
    address_line2 = Column(String, nullable=True)
    postal_code = Column(String, nullable=True)
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)

class RoutePoint(Base, TimestampMixin):
    __tablename__ = "route_points"

    id = Column(Integer, primary_key=True, index=True)
    organization_id = Column(Integer, nullable=False)
    address_id = Column(Integer, ForeignKey("address_informations.id"), nullable=True)
    code = Column(String, nullable=True)
    name = Column(String, nullable=True)
    display_order = Column(Integer, nullable=True)

    address = relationship("AddressInformation")

class Route(Base, TimestampMixin):
    __tablename__ = "routes"

    id = Column(Integer, primary_key=True, index=True)
    organization_id = Column(Integer, nullable=False)
    customer_id = Column(Integer, nullable=True)
    type = Column(Enum(RouteType, native_enum=False), nullable=False)
    code = Column(String, nullable=True)
    name = Column(String, nullable=True)
    published_at = Column(DateTime, nullable=True)

class RouteDeliveryPoint(Base):
    __tablename__ = "routes_delivery_points_links"

    id = Column(Integer, primary_key=True)
    route_id = Column(Integer, ForeignKey("routes.id", ondelete="CASCADE"), nullable=False, index=True)
    route_point_id = Column(Integer, ForeignKey("route_points.id", ondelete="CASCADE"), nullable=False)
    route_point_order = Column(Integer, nullable=True)
