from pydantic import BaseModel, Field
from typing import Optional, List
import datetime as dt
from app.models.route_generation_request import GenerationStatus

class RouteGenerationRequestCreate(BaseModel):
    swapper_id: int
    zone_id: int
    date: dt.date
    target_duration_minutes: int = Field(..., ge=60, le=1440)
    battery_threshold: int = Field(25, ge=0, le=100)
    vehicle_ids: Optional[List[int]] = None

class RouteGenerationRequestResponse(BaseModel):
    id: int
    requested_by_user_id: Optional[int] = None
    swapper_id: int
    zone_id: int
    date: dt.date
    target_duration_minutes: int
    battery_threshold: int
    vehicle_ids: Optional[List[int]] = None
    status: GenerationStatus
    started_at: Optional[dt.datetime] = None
    completed_at: Optional[dt.datetime] = None
    error_message: Optional[str] = None
    route_id: Optional[int] = None
    created_at: dt.datetime

    class Config:
        from_attributes = True
