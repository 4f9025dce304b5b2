from sqlalchemy import Column, Integer, String, Float, ForeignKey, Boolean, DateTime, CheckConstraint, func
from sqlalchemy.orm import relationship
from app.database import Base

class Vehicle(Base):
    __tablename__ = "vehicle"
    __table_args__ = (
        CheckConstraint("battery_level >= 0 AND battery_level <= 100", name="ck_vehicle_battery_level"),
    )

    id = Column(Integer, primary_key=True, index=True)
    external_id = Column(String(50), nullable=False)
    registration_number = Column(String(20), nullable=False)
    vehicle_type = Column(String(50), nullable=False)  # e-scooter, e-bike
    zone_id = Column(Integer, ForeignKey("zone.id"), nullable=True, index=True)
    current_parking_zone_id = Column(Integer, ForeignKey("parking_zone.id"), nullable=True)
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)
    battery_level = Column(Integer, nullable=False)
    needs_battery_replacement = Column(Boolean, nullable=False, default=False)
    is_available = Column(Boolean, nullable=False, default=True)
    last_updated = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    zone = relationship("Zone")
