import datetime

import pytest
from sqlalchemy.exc import IntegrityError

from app.models.route import Route, RouteStatus, RouteStop, RouteStopStatus
from app.models.zone import Zone
from conftest import make_parking_zone, make_vehicle


def make_route(db, zone, swapper, **overrides):
    data = dict(
        assigned_swapper_id=swapper.id,
        zone_id=zone.id,
        date=datetime.date(2025, 6, 1),
        target_duration_minutes=120,
    )
    data.update(overrides)
    route = Route(**data)
    db.add(route)
    db.commit()
    return route


def test_route_defaults_and_names(db, zone, swapper):
    route = make_route(db, zone, swapper)
    db.refresh(route)

    assert route.status == RouteStatus.suggested
    assert route.total_vehicle_count == 0
    assert route.zone_name == "Amsterdam Centrum"
    assert route.assigned_swapper_name == "Swapper Tester"
    assert route.created_at is not None


def test_route_target_duration_is_checked(db, zone, swapper):
    with pytest.raises(IntegrityError):
        make_route(db, zone, swapper, target_duration_minutes=30)
    db.rollback()


def test_vehicle_battery_level_is_checked(db, zone):
    with pytest.raises(IntegrityError):
        make_vehicle(db, zone.id, 52.37, 4.89, battery_level=120)
    db.rollback()


def test_sequence_order_is_unique_per_route(db, zone, swapper, zone_vehicles):
    route = make_route(db, zone, swapper)
    for vehicle in zone_vehicles[:2]:
        db.add(RouteStop(
            route_id=route.id,
            vehicle_id=vehicle.id,
            sequence_order=1,
            estimated_arrival_offset=datetime.timedelta(0),
            estimated_duration_at_stop=datetime.timedelta(minutes=5),
        ))

    with pytest.raises(IntegrityError):
        db.commit()
    db.rollback()


def test_stops_are_ordered_and_deleted_with_route(db, zone, swapper, zone_vehicles):
    route = make_route(db, zone, swapper)
    for order, vehicle in zip([3, 1, 2], zone_vehicles):
        db.add(RouteStop(
            route_id=route.id,
            vehicle_id=vehicle.id,
            sequence_order=order,
            estimated_arrival_offset=datetime.timedelta(minutes=15 * (order - 1)),
            estimated_duration_at_stop=datetime.timedelta(minutes=5),
        ))
    db.commit()
    db.refresh(route)

    assert [s.sequence_order for s in route.stops] == [1, 2, 3]
    assert all(s.status == RouteStopStatus.pending for s in route.stops)

    db.delete(route)
    db.commit()
    assert db.query(RouteStop).count() == 0


def test_parking_zone_free_capacity(db, zone):
    parking_zone = make_parking_zone(db, zone.id, 52.37, 4.89, max_capacity=4, current_vehicle_count=3)
    assert parking_zone.free_capacity == 1

    parking_zone.current_vehicle_count = 6
    assert parking_zone.free_capacity == 0
    assert db.get(Zone, zone.id).parking_zones == [parking_zone]
