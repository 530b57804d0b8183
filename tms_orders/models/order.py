from sqlalchemy import Column, Integer, String, Float, ForeignKey, DateTime, Boolean
from sqlalchemy.orm import relationship
from tms_orders.database import Base, TimestampMixin

class Order(Base, TimestampMixin):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    organization_id = Column(Integer, nullable=False, index=True)
    code = Column(String, nullable=False, index=True)
    customer_id = Column(Integer, nullable=True)
    route_id = Column(Integer, ForeignKey("routes.id"), nullable=True)
    order_date = Column(DateTime, nullable=True)
    delivery_date = Column(DateTime, nullable=True)
    weight = Column(Float, nullable=True)
    is_draft = Column(Boolean, nullable=False, default=False)
    last_status_type = Column(String, nullable=True)
    published_at = Column(DateTime, nullable=True)

    trips = relationship("OrderTrip", back_populates="order")

class OrderTrip(Base, TimestampMixin):
    __tablename__ = "order_trips"

    id = Column(Integer, primary_key=True, index=True)
    organization_id = Column(Integer, nullable=False, index=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False)
    vehicle_id = Column(Integer, ForeignKey("vehicles.id"), nullable=True, index=True)
    driver_id = Column(Integer, nullable=True)
    code = Column(String, nullable=True)
    pickup_date = Column(DateTime, nullable=True)
    delivery_date = Column(DateTime, nullable=True)
    driver_cost = Column(Float, nullable=True)
    last_status_type = Column(String, nullable=True)
    published_at = Column(DateTime, nullable=True)

    order = relationship("Order", back_populates="trips")
    statuses = relationship("OrderTripStatus", back_populates="trip")

class OrderTripStatus(Base, TimestampMixin):
    """Append-only status history of a trip; the current status is the latest by created_at."""
    __tablename__ = "order_trip_statuses"

    id = Column(Integer, primary_key=True, index=True)
    trip_id = Column(Integer, ForeignKey("order_trips.id", ondelete="CASCADE"), nullable=False, index=True)
    type = Column(String, nullable=False)

    trip = relationship("OrderTrip", back_populates="statuses")

class OrderTripMessage(Base, TimestampMixin):
    __tablename__ = "order_trip_messages"

    id = Column(Integer, primary_key=True, index=True)
    trip_id = Column(Integer, ForeignKey("order_trips.id", ondelete="CASCADE"), nullable=False, index=True)
    type = Column(String, nullable=False)
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)
