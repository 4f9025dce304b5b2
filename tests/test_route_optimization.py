import threading

import pytest

from app.models.parking_zone import ParkingZone
from app.services.optimization_engine.data_loader import (
    OptimizationData,
    Stop,
    assign_dropoff_zones,
    centroid,
)
from app.services.route_optimization import (
    CANCELLED_MESSAGE,
    NO_SOLUTION_MESSAGE,
    NO_STOPS_MESSAGE,
    PlannedVisit,
    TourOptimizer,
)
from conftest import AMSTERDAM_POINTS


@pytest.fixture
def optimizer():
    return TourOptimizer(time_limit_seconds=1)


@pytest.fixture
def stops():
    return [Stop(stop_id=100 + i, latitude=lat, longitude=lon) for i, (lat, lon) in enumerate(AMSTERDAM_POINTS)]


def parking_zone(zone_id, latitude, longitude, max_capacity=10, current_vehicle_count=0, is_active=True):
    return ParkingZone(
        id=zone_id,
        zone_id=7,
        name=f"P{zone_id}",
        latitude=latitude,
        longitude=longitude,
        radius_meters=50,
        max_capacity=max_capacity,
        current_vehicle_count=current_vehicle_count,
        is_active=is_active,
    )


def test_cost_matrix_has_zero_diagonal_and_whole_minutes(stops):
    matrix = OptimizationData.for_stops(stops).build_cost_matrix()

    assert len(matrix) == len(stops) + 1
    for i, row in enumerate(matrix):
        assert row[i] == 0
        assert all(value % 60 == 0 for value in row)


def test_centroid_is_mean_of_coordinates():
    lat, lon = centroid([Stop(1, 52.0, 4.0), Stop(2, 53.0, 5.0)])
    assert lat == pytest.approx(52.5)
    assert lon == pytest.approx(4.5)


def test_optimal_order_is_permutation(optimizer, stops):
    result = optimizer.optimize(stops, target_duration_minutes=120)

    assert result.success
    assert result.error_message == ""
    assert sorted(result.optimal_order) == list(range(len(stops)))
    assert 0 < result.total_duration_minutes <= 120
    assert result.total_distance_km > 0


def test_single_stop(optimizer):
    result = optimizer.optimize([Stop(1, 52.37, 4.89)], target_duration_minutes=60)

    assert result.success
    assert result.optimal_order == [0]
    # Depot is the stop itself: zero distance, service time only
    assert result.total_distance_km == pytest.approx(0.0)
    assert result.total_duration_minutes == 5


def test_empty_input_fails(optimizer):
    result = optimizer.optimize([], target_duration_minutes=120)

    assert not result.success
    assert result.optimal_order == []
    assert result.error_message == NO_STOPS_MESSAGE


def test_infeasible_budget_fails(optimizer):
    far_apart = [Stop(1, 52.3676, 4.9041), Stop(2, 52.5200, 13.4050)]

    result = optimizer.optimize(far_apart, target_duration_minutes=60)

    assert not result.success
    assert result.optimal_order == []
    assert result.error_message == NO_SOLUTION_MESSAGE


def test_cancelled_before_start(optimizer, stops):
    cancel_event = threading.Event()
    cancel_event.set()

    result = optimizer.optimize(stops, target_duration_minutes=120, cancel_event=cancel_event)

    assert not result.success
    assert result.error_message == CANCELLED_MESSAGE


def test_assign_dropoff_zones_respects_capacity():
    stops = [Stop(1, 52.3700, 4.8900), Stop(2, 52.3701, 4.8901)]
    near = parking_zone(1, 52.3702, 4.8902, max_capacity=1)
    far = parking_zone(2, 52.3800, 4.9000, max_capacity=5)

    assigned = assign_dropoff_zones(stops, [far, near])

    assert [pz.id for pz in assigned] == [1, 2]


def test_assign_dropoff_zones_skips_full_and_inactive():
    stops = [Stop(1, 52.3700, 4.8900)]
    full = parking_zone(1, 52.3700, 4.8900, max_capacity=3, current_vehicle_count=3)
    inactive = parking_zone(2, 52.3700, 4.8901, is_active=False)
    open_zone = parking_zone(3, 52.3900, 4.9100)

    assert [pz.id for pz in assign_dropoff_zones(stops, [full, inactive, open_zone])] == [3]


def test_assign_dropoff_zones_out_of_capacity():
    stops = [Stop(1, 52.37, 4.89), Stop(2, 52.38, 4.90)]

    with pytest.raises(ValueError, match="No parking zone capacity for stop 2"):
        assign_dropoff_zones(stops, [parking_zone(1, 52.37, 4.89, max_capacity=1)])


def test_parking_zone_tour_picks_up_before_dropoff(optimizer, stops):
    zones = [parking_zone(1, 52.3690, 4.8970, max_capacity=2), parking_zone(2, 52.3720, 4.8900, max_capacity=2)]

    result = optimizer.optimize_with_parking_zones(stops, zones, target_duration_minutes=240)

    assert result.success
    assert len(result.visits) == 2 * len(stops)
    assert sorted(result.optimal_order) == list(range(len(stops)))

    positions = {}
    for position, visit in enumerate(result.visits):
        positions[(visit.stop_index, visit.visit_type)] = position
    for i in range(len(stops)):
        assert positions[(i, PlannedVisit.PICKUP)] < positions[(i, PlannedVisit.DROPOFF)]

    dropoffs = [v.parking_zone_id for v in result.visits if v.visit_type == PlannedVisit.DROPOFF]
    assert dropoffs.count(1) <= 2
    assert dropoffs.count(2) <= 2


def test_parking_zone_tour_without_zones_fails(optimizer, stops):
    result = optimizer.optimize_with_parking_zones(stops, [], target_duration_minutes=120)

    assert not result.success
    assert result.error_message == "No vehicles or parking zones provided for optimization"


def test_parking_zone_tour_without_capacity_fails(optimizer, stops):
    zones = [parking_zone(1, 52.37, 4.89, max_capacity=1)]

    result = optimizer.optimize_with_parking_zones(stops, zones, target_duration_minutes=120)

    assert not result.success
    assert result.error_message.startswith("No parking zone capacity")
