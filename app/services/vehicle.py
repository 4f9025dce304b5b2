from typing import List
from fastapi import HTTPException, status
from sqlalchemy.orm import Session
from app.core.config import settings
from app.crud import vehicle as vehicle_crud
from app.models.vehicle import Vehicle
from app.services.optimization_engine.data_loader import OptimizationDataLoader


class VehicleService:
    """
    Service layer for vehicle queries.

    Vehicles come from the fleet data feed; planners only read them to
    decide which ones need a battery swap.
    """

    def __init__(self):
        self.crud = vehicle_crud

    def get_vehicle(
        self,
        db: Session,
        vehicle_id: int
    ) -> Vehicle:
        """
        Get a vehicle by ID.

        Args:
            db: Database session
            vehicle_id: Vehicle ID

        Returns:
            Vehicle instance

        Raises:
            HTTPException 404: If vehicle not found
        """
        vehicle = self.crud.get(db=db, id=vehicle_id)

        if not vehicle:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Vehicle not found"
            )

        return vehicle

    def get_vehicles_in_zone(
        self,
        db: Session,
        zone_id: int
    ) -> List[Vehicle]:
        return self.crud.get_by_zone(db=db, zone_id=zone_id)

    def get_low_battery_vehicles(
        self,
        db: Session,
        zone_id: int,
        battery_threshold: int = settings.DEFAULT_BATTERY_THRESHOLD
    ) -> List[Vehicle]:
        """
        Get available vehicles in a zone that need a battery swap.

        Args:
            db: Database session
            zone_id: Zone ID
            battery_threshold: Battery level cut-off in percent (inclusive)

        Returns:
            List of Vehicle instances, most depleted first
        """
        return self.crud.get_low_battery(
            db=db,
            zone_id=zone_id,
            battery_threshold=battery_threshold
        )

    def get_vehicles_in_zone_by_ids(
        self,
        db: Session,
        vehicle_ids: List[int],
        zone_id: int
    ) -> List[Vehicle]:
        """
        Get the requested vehicles that are in the zone, in request order.

        Unknown IDs, duplicates and vehicles in other zones are left out.
        """
        return OptimizationDataLoader(db).load_zone_vehicles(zone_id, vehicle_ids)


# Create a singleton instance
vehicle_service = VehicleService()
