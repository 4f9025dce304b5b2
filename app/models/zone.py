from sqlalchemy import Column, Integer, String
from sqlalchemy.orm import relationship
from app.database import Base, TimestampMixin

class Zone(Base, TimestampMixin):
    __tablename__ = "zone"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    country_code = Column(String(3), nullable=False)

    parking_zones = relationship("ParkingZone", back_populates="zone")
