import math

import pytest

from app.services.optimization_engine.geo import (
    SWAP_SERVICE_MINUTES,
    haversine_km,
    travel_time_minutes,
)

AMSTERDAM = (52.3676, 4.9041)
ROTTERDAM = (51.9244, 4.4777)
BERLIN = (52.5200, 13.4050)


def test_distance_to_self_is_zero():
    assert haversine_km(*AMSTERDAM, *AMSTERDAM) == 0.0


def test_distance_is_symmetric():
    assert haversine_km(*AMSTERDAM, *BERLIN) == pytest.approx(haversine_km(*BERLIN, *AMSTERDAM))


def test_known_city_distances():
    assert haversine_km(*AMSTERDAM, *ROTTERDAM) == pytest.approx(57.4, abs=1.0)
    assert haversine_km(*AMSTERDAM, *BERLIN) == pytest.approx(577, abs=5)


def test_one_degree_of_latitude():
    assert haversine_km(0.0, 0.0, 1.0, 0.0) == pytest.approx(111.19, abs=0.1)


def test_antipodal_points_stay_finite():
    assert haversine_km(0.0, 0.0, 0.0, 180.0) == pytest.approx(math.pi * 6371.0, rel=1e-9)


def test_distance_grows_with_separation():
    distances = [haversine_km(52.0, 4.0, 52.0 + step * 0.01, 4.0) for step in range(1, 6)]
    assert distances == sorted(distances)


def test_travel_time_includes_service_time():
    assert travel_time_minutes(*AMSTERDAM, *AMSTERDAM) == SWAP_SERVICE_MINUTES


def test_travel_time_rounds_up_to_whole_minutes():
    # 1 km at 30 km/h is exactly 2 minutes; slightly more rounds up
    one_km_lat = 1 / 111.19
    assert travel_time_minutes(0.0, 0.0, one_km_lat * 1.01, 0.0) == 2 + SWAP_SERVICE_MINUTES + 1


def test_travel_time_is_monotonic_in_distance():
    times = [travel_time_minutes(52.0, 4.0, 52.0 + step * 0.05, 4.0) for step in range(1, 6)]
    assert times == sorted(times)
    assert all(isinstance(t, int) for t in times)
