"""
Optimization package for battery swap tour planning with Google OR-Tools.

This package provides modular components for:
- Great-circle distance and travel time estimates
- Tour solving via Google OR-Tools
- Pickup/dropoff constraint building
- Route storage
"""

from .data_loader import OptimizationDataLoader, OptimizationData, Stop
from .constraint_builder import ConstraintBuilder
from .solver import TourSolver, TourSolution
from .route_storage import RouteStorage

__all__ = [
    "OptimizationDataLoader",
    "OptimizationData",
    "Stop",
    "ConstraintBuilder",
    "TourSolver",
    "TourSolution",
    "RouteStorage",
]
