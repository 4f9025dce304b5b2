from typing import List
from sqlalchemy.orm import Session
from sqlalchemy import select
from app.crud.base import CRUDBase
from app.models.parking_zone import ParkingZone


class CRUDParkingZone(CRUDBase[ParkingZone, dict, dict]):
    """Read access to parking zones used as dropoff points."""

    def get_active_by_zone(self, db: Session, *, zone_id: int) -> List[ParkingZone]:
        stmt = select(ParkingZone).where(
            ParkingZone.zone_id == zone_id,
            ParkingZone.is_active.is_(True)
        ).order_by(ParkingZone.id)
        return list(db.execute(stmt).scalars().all())


parking_zone = CRUDParkingZone(ParkingZone)
