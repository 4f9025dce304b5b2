"""
Constraint builder for the OR-Tools tour solver.

Adds constraints on top of the base time-budgeted tour.
"""

from typing import Sequence, Tuple
from ortools.constraint_solver import pywrapcp
from app.core.logging_config import logger
from app.services.optimization_engine.data_loader import OptimizationData


class ConstraintBuilder:
    """Builds OR-Tools constraints from optimization data."""

    def __init__(self, data: OptimizationData):
        """
        Initialize constraint builder.

        Args:
            data: Optimization data containing node coordinates
        """
        self.data = data

    def add_pickup_and_dropoff(
        self,
        routing: pywrapcp.RoutingModel,
        manager: pywrapcp.RoutingIndexManager,
        time_dimension: pywrapcp.RoutingDimension,
        pairs: Sequence[Tuple[int, int]]
    ) -> None:
        """
        Link pickup and dropoff nodes.

        For each pair the vehicle is picked up before it is dropped off, by
        the same swapper.

        Args:
            routing: OR-Tools routing model
            manager: Routing index manager
            time_dimension: Time dimension from routing model
            pairs: (pickup node, dropoff node) pairs
        """
        logger.info(f"Adding {len(pairs)} pickup/dropoff constraints")

        solver = routing.solver()
        for pickup_node, dropoff_node in pairs:
            pickup_index = manager.NodeToIndex(pickup_node)
            dropoff_index = manager.NodeToIndex(dropoff_node)

            routing.AddPickupAndDelivery(pickup_index, dropoff_index)
            solver.Add(routing.VehicleVar(pickup_index) == routing.VehicleVar(dropoff_index))
            solver.Add(time_dimension.CumulVar(pickup_index) <= time_dimension.CumulVar(dropoff_index))

            logger.debug(f"Pickup node {pickup_node} -> dropoff node {dropoff_node}")
