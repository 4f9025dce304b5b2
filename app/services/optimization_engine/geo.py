"""
Geo-distance estimation.

Straight-line (great-circle) distances and flat-speed travel time estimates
used to build the solver's cost matrix.
"""

import math

EARTH_RADIUS_KM = 6371.0

# Average urban speed of a swapper van
AVERAGE_SPEED_KMH = 30.0

# Time spent at a stop to swap one battery
SWAP_SERVICE_MINUTES = 5


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """
    Great-circle distance between two WGS84 points in kilometers.

    Args:
        lat1: Latitude of the first point in degrees
        lon1: Longitude of the first point in degrees
        lat2: Latitude of the second point in degrees
        lon2: Longitude of the second point in degrees

    Returns:
        Distance in kilometers (0 for identical points)
    """
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)

    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lon / 2) ** 2
    )
    # Rounding can push a a hair above 1 for antipodal points
    a = min(1.0, max(0.0, a))
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def travel_time_minutes(lat1: float, lon1: float, lat2: float, lon2: float) -> int:
    """
    Estimated minutes to drive to a stop and swap its battery.

    Travel at AVERAGE_SPEED_KMH plus SWAP_SERVICE_MINUTES at the destination,
    rounded up to a whole minute. The service time of the destination is part
    of every edge.
    """
    distance = haversine_km(lat1, lon1, lat2, lon2)
    driving_minutes = distance / AVERAGE_SPEED_KMH * 60
    return math.ceil(driving_minutes + SWAP_SERVICE_MINUTES)
