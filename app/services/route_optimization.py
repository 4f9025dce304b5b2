"""
Tour optimization service.

Public entry point for ordering stops. Failures of any kind come back as an
unsuccessful result; nothing raised inside the engine crosses this boundary.
"""

import threading
from typing import List, Optional, Sequence
from app.core.config import settings
from app.core.logging_config import logger
from app.models.parking_zone import ParkingZone
from app.services.optimization_engine.data_loader import (
    OptimizationData,
    Stop,
    assign_dropoff_zones,
    centroid,
)
from app.services.optimization_engine.solver import TourSolver

NO_STOPS_MESSAGE = "No stops provided for optimization"
NO_SOLUTION_MESSAGE = "No solution found within time limit"
CANCELLED_MESSAGE = "Optimization cancelled"


class OptimizationResult:
    """
    Outcome of a tour optimization.

    On success `optimal_order` is a permutation of the input stop indices and
    `error_message` is empty. On failure the order is empty and the message
    says why.
    """

    def __init__(
        self,
        optimal_order: Optional[List[int]] = None,
        total_duration_minutes: int = 0,
        total_distance_km: float = 0.0,
        success: bool = False,
        error_message: str = ""
    ):
        self.optimal_order = optimal_order or []
        self.total_duration_minutes = total_duration_minutes
        self.total_distance_km = total_distance_km
        self.success = success
        self.error_message = error_message

    @classmethod
    def failure(cls, message: str) -> "OptimizationResult":
        return cls(success=False, error_message=message)

    def __repr__(self) -> str:
        if self.success:
            return (
                f"OptimizationResult(order={self.optimal_order}, "
                f"minutes={self.total_duration_minutes}, km={self.total_distance_km:.2f})"
            )
        return f"OptimizationResult(failure={self.error_message!r})"


class PlannedVisit:
    """One pickup or dropoff in a parking-zone aware tour."""

    PICKUP = "pickup"
    DROPOFF = "dropoff"

    def __init__(
        self,
        stop_index: int,
        stop_id: int,
        visit_type: str,
        latitude: float,
        longitude: float,
        parking_zone_id: Optional[int] = None
    ):
        self.stop_index = stop_index
        self.stop_id = stop_id
        self.visit_type = visit_type
        self.latitude = latitude
        self.longitude = longitude
        self.parking_zone_id = parking_zone_id


class ParkingZoneOptimizationResult(OptimizationResult):
    """Optimization result with the ordered pickup/dropoff visits."""

    def __init__(self, visits: Optional[List[PlannedVisit]] = None, **kwargs):
        super().__init__(**kwargs)
        self.visits = visits or []

    @classmethod
    def failure(cls, message: str) -> "ParkingZoneOptimizationResult":
        return cls(success=False, error_message=message)


class TourOptimizer:
    """
    Orders stops around a centroid depot with OR-Tools.

    The solver runs synchronously for up to `time_limit_seconds`; callers on
    a request path should run it in a worker thread and pass a cancel event.
    """

    def __init__(self, time_limit_seconds: int = settings.SOLVER_TIME_LIMIT_SECONDS):
        self.time_limit_seconds = time_limit_seconds

    def optimize(
        self,
        stops: Sequence[Stop],
        target_duration_minutes: int,
        cancel_event: Optional[threading.Event] = None
    ) -> OptimizationResult:
        """
        Find a visiting order for the stops within the duration budget.

        Args:
            stops: Stops to visit; indices in the result refer to this sequence
            target_duration_minutes: Tour budget (validated upstream, 60..1440)
            cancel_event: Optional event that aborts the search when set

        Returns:
            OptimizationResult
        """
        if not stops:
            return OptimizationResult.failure(NO_STOPS_MESSAGE)

        try:
            data = OptimizationData.for_stops(stops)
            cost_matrix = data.build_cost_matrix()

            solver = TourSolver(
                data=data,
                cost_matrix=cost_matrix,
                target_duration_minutes=target_duration_minutes,
                cancel_event=cancel_event
            )
            solution = solver.solve(time_limit_seconds=self.time_limit_seconds)

            if solver.cancelled:
                return OptimizationResult.failure(CANCELLED_MESSAGE)
            if solution is None:
                return OptimizationResult.failure(NO_SOLUTION_MESSAGE)

            return OptimizationResult(
                optimal_order=[node - 1 for node in solution.nodes],
                total_duration_minutes=solution.total_seconds // 60,
                total_distance_km=solution.total_distance_km,
                success=True
            )
        except Exception as e:
            logger.error(f"Tour optimization failed: {type(e).__name__}: {str(e)}")
            return OptimizationResult.failure(f"Optimization failed: {str(e)}")

    def optimize_with_parking_zones(
        self,
        stops: Sequence[Stop],
        parking_zones: Sequence[ParkingZone],
        target_duration_minutes: int,
        cancel_event: Optional[threading.Event] = None
    ) -> ParkingZoneOptimizationResult:
        """
        Plan a tour that picks up every vehicle and drops it at a parking zone.

        Every stop becomes two linked visits: a pickup at the vehicle and a
        dropoff at the nearest parking zone with free capacity. The pickup
        always comes before its dropoff.

        Args:
            stops: Vehicles to pick up
            parking_zones: Candidate dropoff zones
            target_duration_minutes: Tour budget in minutes
            cancel_event: Optional event that aborts the search when set

        Returns:
            ParkingZoneOptimizationResult; `optimal_order` lists stop indices
            in pickup order and `visits` holds the full visiting sequence
        """
        active_zones = [pz for pz in parking_zones if pz.is_active]
        if not stops or not active_zones:
            return ParkingZoneOptimizationResult.failure(
                "No vehicles or parking zones provided for optimization"
            )

        try:
            try:
                dropoff_zones = assign_dropoff_zones(stops, active_zones)
            except ValueError as e:
                return ParkingZoneOptimizationResult.failure(str(e))

            # Node 2i+1 = pickup of stop i, node 2i+2 = its dropoff
            locations = []
            pairs = []
            for i, (stop, zone) in enumerate(zip(stops, dropoff_zones)):
                locations.append(stop.coords)
                locations.append((zone.latitude, zone.longitude))
                pairs.append((2 * i + 1, 2 * i + 2))

            data = OptimizationData(depot=centroid(stops), locations=locations)
            cost_matrix = data.build_cost_matrix()

            solver = TourSolver(
                data=data,
                cost_matrix=cost_matrix,
                target_duration_minutes=target_duration_minutes,
                pickup_dropoff_pairs=pairs,
                cancel_event=cancel_event
            )
            solution = solver.solve(time_limit_seconds=self.time_limit_seconds)

            if solver.cancelled:
                return ParkingZoneOptimizationResult.failure(CANCELLED_MESSAGE)
            if solution is None:
                return ParkingZoneOptimizationResult.failure(NO_SOLUTION_MESSAGE)

            visits = []
            for node in solution.nodes:
                stop_index = (node - 1) // 2
                stop = stops[stop_index]
                if node % 2 == 1:
                    visits.append(PlannedVisit(
                        stop_index=stop_index,
                        stop_id=stop.stop_id,
                        visit_type=PlannedVisit.PICKUP,
                        latitude=stop.latitude,
                        longitude=stop.longitude
                    ))
                else:
                    zone = dropoff_zones[stop_index]
                    visits.append(PlannedVisit(
                        stop_index=stop_index,
                        stop_id=stop.stop_id,
                        visit_type=PlannedVisit.DROPOFF,
                        latitude=zone.latitude,
                        longitude=zone.longitude,
                        parking_zone_id=zone.id
                    ))

            return ParkingZoneOptimizationResult(
                visits=visits,
                optimal_order=[v.stop_index for v in visits if v.visit_type == PlannedVisit.PICKUP],
                total_duration_minutes=solution.total_seconds // 60,
                total_distance_km=solution.total_distance_km,
                success=True
            )
        except Exception as e:
            logger.error(f"Parking zone optimization failed: {type(e).__name__}: {str(e)}")
            return ParkingZoneOptimizationResult.failure(
                f"Error optimizing route with parking zones: {str(e)}"
            )


# Create singleton instance
tour_optimizer = TourOptimizer()
