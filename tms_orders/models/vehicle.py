from sqlalchemy import Column, Integer, String, Float, Boolean, DateTime
from tms_orders.database import Base, TimestampMixin

class Vehicle(Base, TimestampMixin):
    __tablename__ = "vehicles"

    id = Column(Integer, primary_key=True, index=True)
    organization_id = Column(Integer, nullable=False, index=True)
    driver_id = Column(Integer, nullable=True)
    vehicle_number = Column(String, nullable=False)
    ton_payload_capacity = Column(Float, nullable=True)
    cubic_meter_capacity = Column(Float, nullable=True)
    pallet_capacity = Column(Float, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    published_at = Column(DateTime, nullable=True)
