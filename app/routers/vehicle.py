from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List
from app.database import get_db
from app.core.config import settings
from app.core.permissions import Permission
from app.dependencies import require_permission
from app.models.user import User
from app.schemas.vehicle import VehicleResponse
from app.services.vehicle import vehicle_service

router = APIRouter()


@router.get("", response_model=List[VehicleResponse])
def get_vehicles_in_zone(
    zone_id: int,
    db: Session = Depends(get_db),
    _user: User = Depends(require_permission(Permission.VIEW_VEHICLES))
):
    """
    Retrieve all vehicles in a zone.

    Args:
        zone_id: Zone to list
        db: Database session

    Returns:
        List of vehicles ordered by ID
    """
    return vehicle_service.get_vehicles_in_zone(db=db, zone_id=zone_id)


@router.get("/low-battery", response_model=List[VehicleResponse])
def get_low_battery_vehicles(
    zone_id: int,
    battery_threshold: int = Query(settings.DEFAULT_BATTERY_THRESHOLD, ge=0, le=100),
    db: Session = Depends(get_db),
    _user: User = Depends(require_permission(Permission.VIEW_VEHICLES))
):
    """
    Retrieve available vehicles in a zone at or below the battery threshold.

    Returns:
        List of vehicles, most depleted first
    """
    return vehicle_service.get_low_battery_vehicles(
        db=db,
        zone_id=zone_id,
        battery_threshold=battery_threshold
    )


@router.get("/{vehicle_id}", response_model=VehicleResponse)
def get_vehicle(
    vehicle_id: int,
    db: Session = Depends(get_db),
    _user: User = Depends(require_permission(Permission.VIEW_VEHICLES))
):
    return vehicle_service.get_vehicle(db=db, vehicle_id=vehicle_id)
