from pydantic import BaseModel
from typing import Optional
from datetime import datetime

class VehicleSummary(BaseModel):
    """Vehicle snapshot carried by each route stop."""
    id: int
    external_id: str
    zone_id: Optional[int] = None
    latitude: float
    longitude: float
    battery_level: int

    class Config:
        from_attributes = True

class VehicleResponse(VehicleSummary):
    registration_number: str
    vehicle_type: str
    current_parking_zone_id: Optional[int] = None
    needs_battery_replacement: bool
    is_available: bool
    last_updated: datetime

    class Config:
        from_attributes = True
