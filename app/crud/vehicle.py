from typing import List
from sqlalchemy.orm import Session
from sqlalchemy import select
from app.crud.base import CRUDBase
from app.models.vehicle import Vehicle


class CRUDVehicle(CRUDBase[Vehicle, dict, dict]):
    """
    CRUD operations for Vehicle model.
    
    Vehicles are owned by the fleet data feed, so only read queries live here.
    """
    
    def get_by_zone(self, db: Session, *, zone_id: int) -> List[Vehicle]:
        """
        Fetch all vehicles currently in a zone.
        
        Args:
            db: Database session
            zone_id: Zone ID
            
        Returns:
            List of Vehicle instances ordered by ID
        """
        stmt = select(Vehicle).where(Vehicle.zone_id == zone_id).order_by(Vehicle.id)
        result = db.execute(stmt)
        return list(result.scalars().all())
    
    def get_low_battery(
        self,
        db: Session,
        *,
        zone_id: int,
        battery_threshold: int
    ) -> List[Vehicle]:
        """
        Fetch available vehicles in a zone at or below a battery threshold.
        
        Args:
            db: Database session
            zone_id: Zone ID
            battery_threshold: Battery level cut-off in percent (inclusive)
            
        Returns:
            List of Vehicle instances, most depleted first
        """
        stmt = select(Vehicle).where(
            Vehicle.zone_id == zone_id,
            Vehicle.battery_level <= battery_threshold,
            Vehicle.is_available.is_(True)
        ).order_by(Vehicle.battery_level, Vehicle.id)
        result = db.execute(stmt)
        return list(result.scalars().all())
    
    def get_multi_by_ids_in_zone(
        self,
        db: Session,
        *,
        ids: List[int],
        zone_id: int
    ) -> List[Vehicle]:
        """
        Bulk fetch vehicles by IDs, restricted to one zone.
        
        Args:
            db: Database session
            ids: List of vehicle IDs to fetch
            zone_id: Zone the vehicles must belong to
            
        Returns:
            List of Vehicle instances (unordered)
        """
        if not ids:
            return []
        stmt = select(Vehicle).where(
            Vehicle.id.in_(ids),
            Vehicle.zone_id == zone_id
        )
        result = db.execute(stmt)
        return list(result.scalars().all())


# Create a singleton instance
vehicle = CRUDVehicle(Vehicle)
