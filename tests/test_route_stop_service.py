import datetime

import pytest

from app.models.route import RouteStopStatus
from app.services.route import RouteService
from app.services.route_optimization import TourOptimizer
from app.services.route_stop import RouteStopService


@pytest.fixture
def route(db, zone, swapper, zone_vehicles):
    service = RouteService(optimizer=TourOptimizer(time_limit_seconds=1))
    return service.create_optimized_route(
        db=db,
        swapper_id=swapper.id,
        zone_id=zone.id,
        route_date=datetime.date(2025, 6, 1),
        target_duration_minutes=120,
        vehicle_ids=[v.id for v in zone_vehicles],
    )


@pytest.fixture
def stop_service():
    return RouteStopService()


def test_get_route_stops_in_visiting_order(db, route, stop_service):
    stops = stop_service.get_route_stops(db, route.id)

    assert [s.sequence_order for s in stops] == [1, 2, 3]
    assert all(s.vehicle is not None for s in stops)


def test_complete_stop_records_times(db, route, stop_service):
    stop = stop_service.get_route_stops(db, route.id)[0]

    assert stop_service.complete_route_stop(db, stop.id) is True

    db.refresh(stop)
    assert stop.status == RouteStopStatus.completed
    assert stop.actual_departure_time - stop.actual_arrival_time == datetime.timedelta(minutes=5)


def test_skip_stop(db, route, stop_service):
    stop = stop_service.get_route_stops(db, route.id)[1]

    assert stop_service.skip_route_stop(db, stop.id) is True

    db.refresh(stop)
    assert stop.status == RouteStopStatus.skipped
    assert stop.actual_arrival_time is None


def test_only_pending_stops_change(db, route, stop_service):
    completed, skipped = stop_service.get_route_stops(db, route.id)[:2]
    stop_service.complete_route_stop(db, completed.id)
    stop_service.skip_route_stop(db, skipped.id)
    db.refresh(completed)
    arrived_at = completed.actual_arrival_time
    departed_at = completed.actual_departure_time

    assert stop_service.skip_route_stop(db, completed.id) is False
    assert stop_service.complete_route_stop(db, completed.id) is False
    assert stop_service.complete_route_stop(db, skipped.id) is False

    db.refresh(completed)
    db.refresh(skipped)
    assert completed.status == RouteStopStatus.completed
    assert completed.actual_arrival_time == arrived_at
    assert completed.actual_departure_time == departed_at
    assert skipped.status == RouteStopStatus.skipped
    assert skipped.actual_arrival_time is None
    assert skipped.actual_departure_time is None


def test_missing_stop(db, stop_service):
    assert stop_service.complete_route_stop(db, 404) is False
    assert stop_service.skip_route_stop(db, 404) is False
