from datetime import datetime, timedelta, timezone
from typing import List
from sqlalchemy.orm import Session
from app.core.logging_config import logger
from app.crud import route_stop as route_stop_crud
from app.models.route import RouteStop, RouteStopStatus
from app.services.optimization_engine.geo import SWAP_SERVICE_MINUTES


class RouteStopService:
    """
    Service layer for swapper actions on individual stops.

    A stop starts pending and ends either completed or skipped.
    """

    def __init__(self, service_minutes: int = SWAP_SERVICE_MINUTES):
        self.crud = route_stop_crud
        self.service_time = timedelta(minutes=service_minutes)

    def complete_route_stop(self, db: Session, route_stop_id: int) -> bool:
        """
        Mark a pending stop as completed.

        Arrival is recorded as now and departure one service time later.

        Returns:
            True if the stop was completed, False if missing or not pending
        """
        stop = self._get_pending(db, route_stop_id)
        if stop is None:
            return False

        now = datetime.now(timezone.utc)
        stop.status = RouteStopStatus.completed
        stop.actual_arrival_time = now
        stop.actual_departure_time = now + self.service_time
        db.commit()

        logger.info(f"Route stop {route_stop_id} completed")
        return True

    def skip_route_stop(self, db: Session, route_stop_id: int) -> bool:
        """
        Mark a pending stop as skipped.

        Returns:
            True if the stop was skipped, False if missing or not pending
        """
        stop = self._get_pending(db, route_stop_id)
        if stop is None:
            return False

        stop.status = RouteStopStatus.skipped
        db.commit()

        logger.info(f"Route stop {route_stop_id} skipped")
        return True

    def get_route_stops(self, db: Session, route_id: int) -> List[RouteStop]:
        return self.crud.get_by_route(db=db, route_id=route_id)

    def _get_pending(self, db: Session, stop_id: int):
        stop = self.crud.get(db=db, id=stop_id)
        if stop is None:
            logger.warning(f"Route stop {stop_id} not found")
            return None
        if stop.status != RouteStopStatus.pending:
            logger.warning(f"Route stop {stop_id} is already {stop.status.value}")
            return None
        return stop


# Create a singleton instance
route_stop_service = RouteStopService()
