from pydantic import BaseModel, Field
from typing import Optional, List

class ParkingZoneOptimizationRequest(BaseModel):
    zone_id: int
    target_duration_minutes: int = Field(..., ge=60, le=1440)
    vehicle_ids: Optional[List[int]] = None
    battery_threshold: int = Field(25, ge=0, le=100)

class PlannedVisitResponse(BaseModel):
    stop_index: int
    vehicle_id: int
    visit_type: str
    parking_zone_id: Optional[int] = None
    latitude: float
    longitude: float

class ParkingZoneOptimizationResponse(BaseModel):
    success: bool
    error_message: Optional[str] = None
    optimal_order: List[int] = []
    total_duration_minutes: int = 0
    total_distance_km: float = 0.0
    visits: List[PlannedVisitResponse] = []
