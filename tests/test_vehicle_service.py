import pytest
from fastapi import HTTPException

from app.services.vehicle import vehicle_service
from conftest import make_vehicle


def test_vehicles_in_zone_by_ids_keeps_request_order(db, zone, other_zone, zone_vehicles):
    make_vehicle(db, other_zone.id, 52.3650, 4.8890, vehicle_id=20)

    vehicles = vehicle_service.get_vehicles_in_zone_by_ids(db, [12, 20, 10, 999, 12], zone.id)

    assert [v.id for v in vehicles] == [12, 10]


def test_vehicles_in_zone_by_ids_without_match(db, zone, other_zone, zone_vehicles):
    assert vehicle_service.get_vehicles_in_zone_by_ids(db, [10, 11], other_zone.id) == []


def test_low_battery_vehicles_most_depleted_first(db, zone, zone_vehicles):
    make_vehicle(db, zone.id, 52.3650, 4.8890, battery_level=3, vehicle_id=30)
    make_vehicle(db, zone.id, 52.3660, 4.8930, battery_level=60, vehicle_id=31)

    vehicles = vehicle_service.get_low_battery_vehicles(db, zone.id)

    assert [v.id for v in vehicles] == [30, 10, 11, 12]


def test_get_missing_vehicle(db):
    with pytest.raises(HTTPException) as exc_info:
        vehicle_service.get_vehicle(db, 404)
    assert exc_info.value.status_code == 404
