from sqlalchemy import Column, Integer, String, Float, ForeignKey, Boolean
from sqlalchemy.orm import relationship
from app.database import Base, TimestampMixin

class ParkingZone(Base, TimestampMixin):
    __tablename__ = "parking_zone"

    id = Column(Integer, primary_key=True, index=True)
    zone_id = Column(Integer, ForeignKey("zone.id"), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)
    radius_meters = Column(Float, nullable=False, default=50)
    max_capacity = Column(Integer, nullable=False, default=10)
    current_vehicle_count = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)

    zone = relationship("Zone", back_populates="parking_zones")

    @property
    def free_capacity(self) -> int:
        return max(0, (self.max_capacity or 0) - (self.current_vehicle_count or 0))
