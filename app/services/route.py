import threading
from datetime import date, datetime, timedelta, timezone
from typing import Dict, FrozenSet, List, Optional, Sequence
from fastapi import HTTPException, status
from sqlalchemy.orm import Session
from app.core.config import settings
from app.core.logging_config import logger
from app.crud import route as route_crud
from app.models.route import Route, RouteStop, RouteStatus, RouteStopStatus
from app.services.optimization_engine.data_loader import OptimizationDataLoader, Stop
from app.services.optimization_engine.geo import SWAP_SERVICE_MINUTES
from app.services.optimization_engine.route_storage import RouteStorage
from app.services.route_optimization import TourOptimizer, tour_optimizer
from app.services.vehicle import vehicle_service


# Allowed route status transitions; anything else is rejected
ROUTE_TRANSITIONS: Dict[RouteStatus, FrozenSet[RouteStatus]] = {
    RouteStatus.suggested: frozenset({RouteStatus.confirmed}),
    RouteStatus.confirmed: frozenset({RouteStatus.in_progress, RouteStatus.completed}),
    RouteStatus.in_progress: frozenset({RouteStatus.completed}),
    RouteStatus.completed: frozenset(),
}

NO_VEHICLES_IN_ZONE_MESSAGE = "No vehicles found in the specified zone"
NO_LOW_BATTERY_VEHICLES_MESSAGE = "No vehicles found with low battery in the specified zone"


class RouteGenerationError(Exception):
    """Route could not be generated; the message is safe to show to users."""


class RouteGenerationCancelled(RouteGenerationError):
    """Route generation was aborted by the caller."""


class RouteGenerationResult:
    """Outcome of generating a route from the low battery vehicles of a zone."""

    def __init__(
        self,
        success: bool,
        message: str,
        route: Optional[Route] = None,
        total_vehicles: int = 0
    ):
        self.success = success
        self.message = message
        self.route = route
        self.total_vehicles = total_vehicles

    @property
    def estimated_duration_minutes(self) -> int:
        return (self.route.estimated_duration_minutes or 0) if self.route else 0

    @property
    def total_distance_km(self) -> float:
        return (self.route.estimated_distance_km or 0.0) if self.route else 0.0


class RouteService:
    """
    Service layer for the route lifecycle.

    Creates optimized routes and moves them through
    suggested -> confirmed -> in_progress -> completed.
    """

    def __init__(
        self,
        optimizer: TourOptimizer = tour_optimizer,
        stop_planning_slot_minutes: int = settings.STOP_PLANNING_SLOT_MINUTES,
        default_battery_threshold: int = settings.DEFAULT_BATTERY_THRESHOLD
    ):
        self.crud = route_crud
        self.optimizer = optimizer
        self.stop_planning_slot = timedelta(minutes=stop_planning_slot_minutes)
        self.default_battery_threshold = default_battery_threshold

    def create_optimized_route(
        self,
        db: Session,
        swapper_id: int,
        zone_id: int,
        route_date: date,
        target_duration_minutes: int,
        vehicle_ids: Sequence[int],
        created_by_user_id: Optional[int] = None,
        cancel_event: Optional[threading.Event] = None
    ) -> Route:
        """
        Create a suggested route visiting the given vehicles in optimized order.

        Vehicles outside the zone are left out. The route and all of its
        stops are committed together or not at all.

        Args:
            db: Database session
            swapper_id: Swapper the route is assigned to
            zone_id: Zone the route is planned in
            route_date: Calendar date of the route
            target_duration_minutes: Tour budget (60..1440)
            vehicle_ids: Vehicles to visit
            created_by_user_id: Planner creating the route
            cancel_event: Optional event that aborts generation when set

        Returns:
            Created Route with stops loaded

        Raises:
            RouteGenerationError: No vehicles in the zone or no feasible tour
            RouteGenerationCancelled: cancel_event was set before commit
        """
        logger.info(
            f"Creating optimized route: swapper={swapper_id}, zone={zone_id}, "
            f"date={route_date}, target={target_duration_minutes}min, vehicles={len(vehicle_ids)}"
        )

        vehicles = vehicle_service.get_vehicles_in_zone_by_ids(db, vehicle_ids, zone_id)
        if not vehicles:
            raise RouteGenerationError(NO_VEHICLES_IN_ZONE_MESSAGE)

        # Provisional stops in request order
        stops = [
            RouteStop(
                vehicle_id=vehicle.id,
                sequence_order=i + 1,
                estimated_arrival_offset=i * self.stop_planning_slot,
                estimated_duration_at_stop=timedelta(minutes=SWAP_SERVICE_MINUTES),
                status=RouteStopStatus.pending
            )
            for i, vehicle in enumerate(vehicles)
        ]

        result = self.optimizer.optimize(
            [Stop.from_vehicle(v) for v in vehicles],
            target_duration_minutes,
            cancel_event=cancel_event
        )
        if not result.success:
            logger.warning(f"Route optimization failed for zone {zone_id}: {result.error_message}")
            if cancel_event is not None and cancel_event.is_set():
                raise RouteGenerationCancelled(result.error_message)
            raise RouteGenerationError(result.error_message)

        for position, stop_index in enumerate(result.optimal_order):
            stop = stops[stop_index]
            stop.sequence_order = position + 1
            stop.estimated_arrival_offset = position * self.stop_planning_slot

        route = Route(
            assigned_swapper_id=swapper_id,
            created_by_user_id=created_by_user_id,
            zone_id=zone_id,
            date=route_date,
            target_duration_minutes=target_duration_minutes,
            status=RouteStatus.suggested,
            estimated_duration_minutes=result.total_duration_minutes,
            estimated_distance_km=result.total_distance_km,
            total_vehicle_count=len(stops)
        )

        try:
            RouteStorage(db).store_route(route, stops)
            if cancel_event is not None and cancel_event.is_set():
                raise RouteGenerationCancelled("Route generation cancelled")
            db.commit()
        except Exception as e:
            db.rollback()
            logger.error(f"Route creation rolled back: {type(e).__name__}: {str(e)}")
            raise

        logger.info(
            f"Route {route.id} created with {len(stops)} stops, "
            f"estimated {result.total_duration_minutes}min / {result.total_distance_km:.2f}km"
        )
        return self.crud.get_with_stops(db=db, route_id=route.id)

    def generate_route(
        self,
        db: Session,
        swapper_id: int,
        zone_id: int,
        target_duration_minutes: int,
        battery_threshold: Optional[int] = None,
        route_date: Optional[date] = None,
        created_by_user_id: Optional[int] = None,
        cancel_event: Optional[threading.Event] = None
    ) -> RouteGenerationResult:
        """
        Generate a route for all low battery vehicles in a zone.

        Args:
            db: Database session
            swapper_id: Swapper the route is assigned to
            zone_id: Zone to plan in
            target_duration_minutes: Tour budget (60..1440)
            battery_threshold: Battery cut-off in percent (defaults to settings)
            route_date: Route date (defaults to today)
            created_by_user_id: Planner creating the route
            cancel_event: Optional event that aborts generation when set

        Returns:
            RouteGenerationResult with a user-facing message
        """
        threshold = self.default_battery_threshold if battery_threshold is None else battery_threshold
        vehicles = OptimizationDataLoader(db).load_low_battery_vehicles(zone_id, threshold)

        if not vehicles:
            return RouteGenerationResult(success=False, message=NO_LOW_BATTERY_VEHICLES_MESSAGE)

        try:
            route = self.create_optimized_route(
                db=db,
                swapper_id=swapper_id,
                zone_id=zone_id,
                route_date=route_date or date.today(),
                target_duration_minutes=target_duration_minutes,
                vehicle_ids=[v.id for v in vehicles],
                created_by_user_id=created_by_user_id,
                cancel_event=cancel_event
            )
        except RouteGenerationCancelled:
            raise
        except RouteGenerationError as e:
            return RouteGenerationResult(
                success=False,
                message=str(e),
                total_vehicles=len(vehicles)
            )

        return RouteGenerationResult(
            success=True,
            message="Route generated successfully",
            route=route,
            total_vehicles=len(vehicles)
        )

    def get_route(self, db: Session, route_id: int) -> Route:
        """
        Get a route with its stops.

        Raises:
            HTTPException 404: If route not found
        """
        route = self.crud.get_with_stops(db=db, route_id=route_id)

        if not route:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Route not found"
            )

        return route

    def get_routes_by_zone(
        self,
        db: Session,
        zone_id: int,
        status: Optional[RouteStatus] = None
    ) -> List[Route]:
        return self.crud.get_by_zone(db=db, zone_id=zone_id, status=status)

    def get_route_suggestions(self, db: Session, zone_id: int) -> List[Route]:
        """Suggested routes of a zone awaiting confirmation."""
        return self.crud.get_by_zone(db=db, zone_id=zone_id, status=RouteStatus.suggested)

    def get_routes_by_status(self, db: Session, status: RouteStatus) -> List[Route]:
        return self.crud.get_by_status(db=db, status=status)

    def get_todays_route_for_swapper(
        self,
        db: Session,
        swapper_id: int,
        today: Optional[date] = None
    ) -> Optional[Route]:
        return self.crud.get_for_swapper_on_date(
            db=db,
            swapper_id=swapper_id,
            route_date=today or date.today()
        )

    def confirm_route(self, db: Session, route_id: int) -> Optional[Route]:
        """
        Confirm a suggested route.

        Returns:
            Updated route, or None if it does not exist or is not suggested
        """
        return self._transition(db, route_id, RouteStatus.confirmed, "confirmed_at")

    def start_route(self, db: Session, route_id: int) -> Optional[Route]:
        """
        Start a confirmed route.

        Returns:
            Updated route, or None if it does not exist or is not confirmed
        """
        return self._transition(db, route_id, RouteStatus.in_progress, "started_at")

    def complete_route(self, db: Session, route_id: int) -> Optional[Route]:
        """
        Complete a confirmed or in-progress route.

        Returns:
            Updated route, or None if it does not exist or cannot complete
        """
        return self._transition(db, route_id, RouteStatus.completed, "completed_at")

    def _transition(
        self,
        db: Session,
        route_id: int,
        target: RouteStatus,
        timestamp_field: str
    ) -> Optional[Route]:
        route = self.crud.get_with_stops(db=db, route_id=route_id)
        if route is None:
            logger.warning(f"Route {route_id} not found for transition to {target.value}")
            return None

        if target not in ROUTE_TRANSITIONS[route.status]:
            logger.warning(
                f"Route {route_id} cannot move from {route.status.value} to {target.value}"
            )
            return None

        route.status = target
        setattr(route, timestamp_field, datetime.now(timezone.utc))
        db.commit()

        logger.info(f"Route {route_id} is now {target.value}")
        return self.crud.get_with_stops(db=db, route_id=route_id)


# Create a singleton instance
route_service = RouteService()
