"""
Data loader for route optimization.

Turns vehicles into solver stops, places the synthetic depot and builds the
travel-time cost matrix. Location index 0 is always the depot.
"""

from typing import Dict, List, Optional, Sequence, Tuple
from sqlalchemy.orm import Session
from app.core.logging_config import logger
from app.crud.vehicle import vehicle as vehicle_crud
from app.models.parking_zone import ParkingZone
from app.models.vehicle import Vehicle
from app.services.optimization_engine.geo import haversine_km, travel_time_minutes

Coordinates = Tuple[float, float]  # (lat, lon)


class Stop:
    """One vehicle visit handed to the optimizer."""

    def __init__(self, stop_id: int, latitude: float, longitude: float):
        self.stop_id = stop_id
        self.latitude = latitude
        self.longitude = longitude

    @classmethod
    def from_vehicle(cls, vehicle: Vehicle) -> "Stop":
        return cls(stop_id=vehicle.id, latitude=vehicle.latitude, longitude=vehicle.longitude)

    @property
    def coords(self) -> Coordinates:
        return (self.latitude, self.longitude)

    def __repr__(self) -> str:
        return f"Stop(stop_id={self.stop_id}, lat={self.latitude}, lon={self.longitude})"


def centroid(stops: Sequence[Stop]) -> Coordinates:
    """Arithmetic mean of the stop coordinates."""
    lat = sum(s.latitude for s in stops) / len(stops)
    lon = sum(s.longitude for s in stops) / len(stops)
    return (lat, lon)


class OptimizationData:
    """Container for optimization data."""

    def __init__(self, depot: Coordinates, locations: List[Coordinates]):
        """
        Args:
            depot: (lat, lon) of the start/end point
            locations: (lat, lon) of every non-depot node, in node order 1..N
        """
        self.depot = depot
        self.locations = locations

        # Build location index: 0 = depot, 1..N = locations
        self.location_index: Dict[int, Coordinates] = {0: depot}
        for idx, coords in enumerate(locations, start=1):
            self.location_index[idx] = coords

    @classmethod
    def for_stops(cls, stops: Sequence[Stop], depot: Optional[Coordinates] = None) -> "OptimizationData":
        """Nodes 1..N are the stops in input order; depot defaults to their centroid."""
        return cls(depot=depot or centroid(stops), locations=[s.coords for s in stops])

    @property
    def num_locations(self) -> int:
        return len(self.locations) + 1

    def distance_km(self, from_node: int, to_node: int) -> float:
        lat1, lon1 = self.location_index[from_node]
        lat2, lon2 = self.location_index[to_node]
        return haversine_km(lat1, lon1, lat2, lon2)

    def build_cost_matrix(self) -> List[List[int]]:
        """
        Travel time in seconds between every pair of nodes.

        Returns:
            Square matrix of size num_locations with a zero diagonal
        """
        n = self.num_locations
        matrix = [[0] * n for _ in range(n)]

        for i in range(n):
            lat1, lon1 = self.location_index[i]
            for j in range(n):
                if i == j:
                    continue
                lat2, lon2 = self.location_index[j]
                matrix[i][j] = travel_time_minutes(lat1, lon1, lat2, lon2) * 60

        logger.debug(f"Cost matrix built: {n}x{n}")
        return matrix


def assign_dropoff_zones(
    stops: Sequence[Stop],
    parking_zones: Sequence[ParkingZone]
) -> List[ParkingZone]:
    """
    Pick a dropoff parking zone for every stop.

    Each stop gets the nearest active zone that still has free capacity after
    the assignments made for earlier stops.

    Returns:
        Parking zone per stop, aligned with `stops`

    Raises:
        ValueError: If a stop has no zone with free capacity left
    """
    remaining = {pz.id: pz.free_capacity for pz in parking_zones if pz.is_active}
    candidates = [pz for pz in parking_zones if pz.is_active]
    assignments = []

    for stop in stops:
        ranked = sorted(
            (pz for pz in candidates if remaining[pz.id] > 0),
            key=lambda pz: (haversine_km(stop.latitude, stop.longitude, pz.latitude, pz.longitude), pz.id)
        )
        if not ranked:
            raise ValueError(f"No parking zone capacity for stop {stop.stop_id}")

        chosen = ranked[0]
        remaining[chosen.id] -= 1
        assignments.append(chosen)
        logger.debug(f"Stop {stop.stop_id} drops off at parking zone {chosen.id}")

    return assignments


class OptimizationDataLoader:
    """Loads vehicles from the database and turns them into stops."""

    def __init__(self, db: Session):
        self.db = db

    def load_zone_vehicles(self, zone_id: int, vehicle_ids: Sequence[int]) -> List[Vehicle]:
        """
        Load the requested vehicles that are in the given zone.

        Vehicles that are unknown or belong to another zone are dropped
        silently. Input order is preserved and duplicate IDs collapse to one.

        Args:
            zone_id: Zone the route is planned for
            vehicle_ids: Requested vehicle IDs

        Returns:
            List of Vehicle instances in request order
        """
        unique_ids = list(dict.fromkeys(vehicle_ids))
        found = vehicle_crud.get_multi_by_ids_in_zone(db=self.db, ids=unique_ids, zone_id=zone_id)
        by_id = {v.id: v for v in found}

        dropped = [vid for vid in unique_ids if vid not in by_id]
        if dropped:
            logger.info(f"Dropping vehicles outside zone {zone_id}: {dropped}")

        return [by_id[vid] for vid in unique_ids if vid in by_id]

    def load_low_battery_vehicles(self, zone_id: int, battery_threshold: int) -> List[Vehicle]:
        """Load available vehicles in a zone at or below the battery threshold."""
        vehicles = vehicle_crud.get_low_battery(
            db=self.db,
            zone_id=zone_id,
            battery_threshold=battery_threshold
        )
        logger.debug(f"Loaded {len(vehicles)} low battery vehicles for zone {zone_id}")
        return vehicles
