from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.database import get_db
from app.core.logging_config import logger
from app.core.permissions import Permission
from app.crud import parking_zone as parking_zone_crud
from app.dependencies import require_permission
from app.models.user import User
from app.schemas.optimization import (
    ParkingZoneOptimizationRequest,
    ParkingZoneOptimizationResponse,
    PlannedVisitResponse,
)
from app.services.optimization_engine.data_loader import OptimizationDataLoader, Stop
from app.services.route_optimization import tour_optimizer

router = APIRouter()


@router.post("/parking-zones", response_model=ParkingZoneOptimizationResponse)
def preview_parking_zone_tour(
    request_data: ParkingZoneOptimizationRequest,
    db: Session = Depends(get_db),
    _user: User = Depends(require_permission(Permission.PLAN_ROUTES))
):
    """
    Preview a pickup/dropoff tour that moves vehicles to parking zones.

    Uses the given vehicles, or the zone's low battery vehicles when none are
    given. Nothing is stored.

    Example:
        ```json
        {
            "zone_id": 7,
            "target_duration_minutes": 180,
            "vehicle_ids": [10, 11]
        }
        ```
    """
    loader = OptimizationDataLoader(db)
    if request_data.vehicle_ids:
        vehicles = loader.load_zone_vehicles(request_data.zone_id, request_data.vehicle_ids)
    else:
        vehicles = loader.load_low_battery_vehicles(request_data.zone_id, request_data.battery_threshold)

    parking_zones = parking_zone_crud.get_active_by_zone(db=db, zone_id=request_data.zone_id)
    logger.info(
        f"Parking zone preview: zone_id={request_data.zone_id}, "
        f"vehicles={len(vehicles)}, parking_zones={len(parking_zones)}"
    )

    result = tour_optimizer.optimize_with_parking_zones(
        [Stop.from_vehicle(v) for v in vehicles],
        parking_zones,
        request_data.target_duration_minutes
    )

    return ParkingZoneOptimizationResponse(
        success=result.success,
        error_message=result.error_message or None,
        optimal_order=result.optimal_order,
        total_duration_minutes=result.total_duration_minutes,
        total_distance_km=result.total_distance_km,
        visits=[
            PlannedVisitResponse(
                stop_index=visit.stop_index,
                vehicle_id=visit.stop_id,
                visit_type=visit.visit_type,
                parking_zone_id=visit.parking_zone_id,
                latitude=visit.latitude,
                longitude=visit.longitude
            )
            for visit in result.visits
        ]
    )
