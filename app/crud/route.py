from typing import Optional, List
from datetime import date
from sqlalchemy.orm import Session, selectinload
from sqlalchemy import select, desc
from app.crud.base import CRUDBase
from app.models.route import Route, RouteStop, RouteStatus


class CRUDRoute(CRUDBase[Route, dict, dict]):
    """
    CRUD operations for Route model.
    
    Read methods eagerly load stops with their vehicles, plus the assigned
    swapper and zone, so responses can be serialized without N+1 queries.
    """
    
    def _with_details(self):
        return select(Route).options(
            selectinload(Route.stops).selectinload(RouteStop.vehicle),
            selectinload(Route.assigned_swapper),
            selectinload(Route.zone),
        )
    
    def get_with_stops(self, db: Session, *, route_id: int) -> Optional[Route]:
        """
        Fetch a route with stops, vehicles, swapper and zone loaded.
        
        Args:
            db: Database session
            route_id: Route ID
            
        Returns:
            Route instance or None if not found
        """
        stmt = self._with_details().where(Route.id == route_id)
        return db.execute(stmt).scalar_one_or_none()
    
    def get_by_zone(
        self,
        db: Session,
        *,
        zone_id: int,
        status: Optional[RouteStatus] = None
    ) -> List[Route]:
        """
        Fetch routes of a zone, optionally filtered by status.
        
        Args:
            db: Database session
            zone_id: Zone ID
            status: Optional status filter
            
        Returns:
            List of routes, newest first
        """
        stmt = self._with_details().where(Route.zone_id == zone_id)
        if status is not None:
            stmt = stmt.where(Route.status == status)
        stmt = stmt.order_by(desc(Route.date), desc(Route.id))
        return list(db.execute(stmt).scalars().all())
    
    def get_by_status(self, db: Session, *, status: RouteStatus) -> List[Route]:
        """
        Fetch all routes in a given status.
        
        Args:
            db: Database session
            status: Route status
            
        Returns:
            List of routes, newest first
        """
        stmt = self._with_details().where(Route.status == status).order_by(desc(Route.date), desc(Route.id))
        return list(db.execute(stmt).scalars().all())
    
    def get_for_swapper_on_date(
        self,
        db: Session,
        *,
        swapper_id: int,
        route_date: date
    ) -> Optional[Route]:
        """
        Fetch the most recently created route of a swapper for a date.
        
        Args:
            db: Database session
            swapper_id: Assigned swapper (user) ID
            route_date: Calendar date of the route
            
        Returns:
            Route instance or None
        """
        stmt = self._with_details().where(
            Route.assigned_swapper_id == swapper_id,
            Route.date == route_date
        ).order_by(desc(Route.id)).limit(1)
        return db.execute(stmt).scalar_one_or_none()


class CRUDRouteStop(CRUDBase[RouteStop, dict, dict]):
    """CRUD operations for RouteStop model."""
    
    def get_by_route(self, db: Session, *, route_id: int) -> List[RouteStop]:
        """
        Fetch the stops of a route in visiting order.
        
        Args:
            db: Database session
            route_id: Route ID
            
        Returns:
            List of RouteStop instances ordered by sequence_order
        """
        stmt = select(RouteStop).options(
            selectinload(RouteStop.vehicle)
        ).where(RouteStop.route_id == route_id).order_by(RouteStop.sequence_order)
        return list(db.execute(stmt).scalars().all())


# Create singleton instances
route = CRUDRoute(Route)
route_stop = CRUDRouteStop(RouteStop)
