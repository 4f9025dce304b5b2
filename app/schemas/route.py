from pydantic import BaseModel, Field
from typing import Optional, List
import datetime as dt
from app.models.route import RouteStatus, RouteStopStatus
from app.schemas.vehicle import VehicleSummary

# RouteStop Schemas
class RouteStopResponse(BaseModel):
    id: int
    route_id: int
    vehicle_id: int
    sequence_order: int
    status: RouteStopStatus
    estimated_arrival_offset: dt.timedelta
    estimated_duration_at_stop: dt.timedelta
    actual_arrival_time: Optional[dt.datetime] = None
    actual_departure_time: Optional[dt.datetime] = None
    vehicle: Optional[VehicleSummary] = None

    class Config:
        from_attributes = True

# Route Schemas
class RouteCreate(BaseModel):
    swapper_id: int
    zone_id: int
    date: dt.date
    target_duration_minutes: int = Field(..., ge=60, le=1440)
    vehicle_ids: List[int] = Field(..., min_length=1)

class RouteResponse(BaseModel):
    id: int
    assigned_swapper_id: int
    assigned_swapper_name: Optional[str] = None
    created_by_user_id: Optional[int] = None
    zone_id: int
    zone_name: Optional[str] = None
    date: dt.date
    target_duration_minutes: int
    status: RouteStatus
    estimated_duration_minutes: Optional[int] = None
    estimated_distance_km: Optional[float] = None
    total_vehicle_count: int
    created_at: dt.datetime
    confirmed_at: Optional[dt.datetime] = None
    started_at: Optional[dt.datetime] = None
    completed_at: Optional[dt.datetime] = None
    stops: List[RouteStopResponse] = []

    class Config:
        from_attributes = True

# Route suggestion (synchronous generation) Schemas
class RouteSuggestRequest(BaseModel):
    swapper_id: int
    zone_id: int
    target_duration_minutes: int = Field(..., ge=60, le=1440)
    battery_threshold: Optional[int] = Field(None, ge=0, le=100)
    date: Optional[dt.date] = None

class RouteSuggestResponse(BaseModel):
    success: bool
    message: str
    route: Optional[RouteResponse] = None
    total_vehicles: int = 0
    estimated_duration_minutes: int = 0
    total_distance_km: float = 0.0

class RouteStopActionResponse(BaseModel):
    message: str
