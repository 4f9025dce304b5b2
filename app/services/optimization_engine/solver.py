"""
Tour solver using Google OR-Tools.

Wraps the OR-Tools routing solver for a single swapper starting and ending at
the depot, visiting every node exactly once within a total time budget.
"""

import threading
from typing import List, Optional, Sequence, Tuple
from ortools.constraint_solver import routing_enums_pb2, pywrapcp
from app.core.logging_config import logger
from app.services.optimization_engine.data_loader import OptimizationData
from app.services.optimization_engine.constraint_builder import ConstraintBuilder


class TourSolution:
    """Container for a solved tour."""

    def __init__(
        self,
        nodes: List[int],
        total_seconds: int,
        total_distance_km: float
    ):
        self.nodes = nodes  # visiting order, depot excluded
        self.total_seconds = total_seconds
        self.total_distance_km = total_distance_km


class TourSolver:
    """OR-Tools single-vehicle tour solver wrapper."""

    def __init__(
        self,
        data: OptimizationData,
        cost_matrix: List[List[int]],
        target_duration_minutes: int,
        pickup_dropoff_pairs: Optional[Sequence[Tuple[int, int]]] = None,
        cancel_event: Optional[threading.Event] = None
    ):
        """
        Initialize tour solver.

        Args:
            data: Optimization data (node coordinates)
            cost_matrix: Travel time matrix in seconds
            target_duration_minutes: Upper bound on the tour duration
            pickup_dropoff_pairs: Optional (pickup node, dropoff node) pairs
            cancel_event: Optional event that stops the search when set
        """
        self.data = data
        self.cost_matrix = cost_matrix
        self.max_duration_seconds = target_duration_minutes * 60
        self.pickup_dropoff_pairs = list(pickup_dropoff_pairs or [])
        self.cancel_event = cancel_event
        self.constraint_builder = ConstraintBuilder(data)
        self.cancelled = False

        # Number of locations = depot + stops
        self.num_locations = data.num_locations

        logger.info(
            f"Tour solver initialized: {self.num_locations} locations, "
            f"budget={self.max_duration_seconds}s, pairs={len(self.pickup_dropoff_pairs)}"
        )

    def solve(self, time_limit_seconds: int = 30) -> Optional[TourSolution]:
        """
        Solve the tour problem.

        Args:
            time_limit_seconds: Wall-clock limit for the search

        Returns:
            TourSolution if a feasible tour was found, None otherwise
            (check `cancelled` to tell cancellation apart from infeasibility)
        """
        if self.cancel_event is not None and self.cancel_event.is_set():
            logger.info("Tour solve cancelled before start")
            self.cancelled = True
            return None

        logger.info(f"Starting tour solver (time limit: {time_limit_seconds}s)")

        # One vehicle, depot at node 0
        manager = pywrapcp.RoutingIndexManager(self.num_locations, 1, 0)
        routing = pywrapcp.RoutingModel(manager)

        time_dimension = self._add_time_dimension(routing, manager)

        if self.pickup_dropoff_pairs:
            self.constraint_builder.add_pickup_and_dropoff(
                routing, manager, time_dimension, self.pickup_dropoff_pairs
            )

        if self.cancel_event is not None:
            self._add_cancel_monitor(routing)

        search_parameters = self._get_search_parameters(time_limit_seconds)

        solution = routing.SolveWithParameters(search_parameters)

        if self.cancelled:
            logger.info("Tour solve cancelled")
            return None

        if solution:
            logger.info("Tour found")
            return self._extract_solution(routing, manager, solution)

        logger.warning(f"No tour found (solver status {routing.status()})")
        return None

    def _add_time_dimension(
        self,
        routing: pywrapcp.RoutingModel,
        manager: pywrapcp.RoutingIndexManager
    ) -> pywrapcp.RoutingDimension:
        """Use travel time as arc cost and cap its cumulative sum."""

        def time_callback(from_index: int, to_index: int) -> int:
            """Return travel time (destination service included)."""
            from_node = manager.IndexToNode(from_index)
            to_node = manager.IndexToNode(to_index)
            return self.cost_matrix[from_node][to_node]

        transit_callback_index = routing.RegisterTransitCallback(time_callback)
        routing.SetArcCostEvaluatorOfAllVehicles(transit_callback_index)

        routing.AddDimension(
            transit_callback_index,
            0,  # No slack
            self.max_duration_seconds,  # Tour time budget
            True,  # Start cumul to zero
            "Time"
        )

        logger.debug("Time dimension added")
        return routing.GetDimensionOrDie("Time")

    def _add_cancel_monitor(self, routing: pywrapcp.RoutingModel) -> None:
        """Stop the search at the next solution once the cancel event is set."""

        def on_solution():
            if self.cancel_event.is_set() and not self.cancelled:
                self.cancelled = True
                routing.solver().FinishCurrentSearch()

        routing.AddAtSolutionCallback(on_solution)

    def _get_search_parameters(
        self,
        time_limit_seconds: int
    ) -> pywrapcp.DefaultRoutingSearchParameters:
        """Get search parameters for solver."""
        search_parameters = pywrapcp.DefaultRoutingSearchParameters()
        if self.pickup_dropoff_pairs:
            # Cheapest arc does not respect pickup/dropoff pairs well
            search_parameters.first_solution_strategy = (
                routing_enums_pb2.FirstSolutionStrategy.PARALLEL_CHEAPEST_INSERTION
            )
        else:
            search_parameters.first_solution_strategy = (
                routing_enums_pb2.FirstSolutionStrategy.PATH_CHEAPEST_ARC
            )
        search_parameters.local_search_metaheuristic = (
            routing_enums_pb2.LocalSearchMetaheuristic.GUIDED_LOCAL_SEARCH
        )
        search_parameters.time_limit.seconds = time_limit_seconds
        search_parameters.log_search = False

        return search_parameters

    def _extract_solution(
        self,
        routing: pywrapcp.RoutingModel,
        manager: pywrapcp.RoutingIndexManager,
        solution: pywrapcp.Assignment
    ) -> TourSolution:
        """
        Walk the tour from the depot.

        Totals cover depot -> first stop and every following pair of stops;
        the return leg to the depot is not counted.
        """
        path = []
        index = routing.Start(0)
        while not routing.IsEnd(index):
            path.append(manager.IndexToNode(index))
            index = solution.Value(routing.NextVar(index))

        total_seconds = 0
        total_distance_km = 0.0
        for from_node, to_node in zip(path, path[1:]):
            total_seconds += self.cost_matrix[from_node][to_node]
            total_distance_km += self.data.distance_km(from_node, to_node)

        nodes = [node for node in path if node != 0]

        logger.info(
            f"Tour extracted: {len(nodes)} stops, "
            f"total distance={total_distance_km:.2f}km, total time={total_seconds}s"
        )

        return TourSolution(
            nodes=nodes,
            total_seconds=total_seconds,
            total_distance_km=total_distance_km
        )
