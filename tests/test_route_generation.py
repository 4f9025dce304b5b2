import datetime

import pytest
import redis
from fastapi import HTTPException

from app.models.route import Route
from app.models.route_generation_request import GenerationStatus
from app.schemas.route_generation import RouteGenerationRequestCreate
from app.services.route import RouteService
from app.services.route_generation import (
    RouteGenerationService,
    process_generation_request,
    run_route_generation_worker,
)
from app.services.route_optimization import NO_SOLUTION_MESSAGE, TourOptimizer
from conftest import make_vehicle


class FakeJob:
    id = "job-1"


class FakeQueue:
    def __init__(self, error=None):
        self.error = error
        self.calls = []

    def enqueue(self, func, **kwargs):
        if self.error is not None:
            raise self.error
        self.calls.append((func, kwargs))
        return FakeJob()


@pytest.fixture
def route_service():
    return RouteService(optimizer=TourOptimizer(time_limit_seconds=1))


def request_data(zone, swapper, **overrides):
    data = {
        "swapper_id": swapper.id,
        "zone_id": zone.id,
        "date": datetime.date(2025, 6, 1),
        "target_duration_minutes": 120,
    }
    data.update(overrides)
    return RouteGenerationRequestCreate(**data)


def test_create_request_is_queued(db, zone, planner, swapper):
    queue = FakeQueue()
    service = RouteGenerationService(queue=queue)

    generation_request = service.create_generation_request(
        db, request_data(zone, swapper), requested_by_user_id=planner.id
    )

    assert generation_request.status == GenerationStatus.QUEUED
    assert generation_request.requested_by_user_id == planner.id
    assert generation_request.battery_threshold == 25

    func, kwargs = queue.calls[0]
    assert func is run_route_generation_worker
    assert kwargs["request_id"] == generation_request.id
    assert kwargs["job_timeout"] == "5m"


def test_create_request_without_redis(db, zone, planner, swapper, monkeypatch):
    failing_queue = FakeQueue(error=redis.exceptions.ConnectionError("refused"))
    monkeypatch.setattr(RouteGenerationService, "_connect", staticmethod(lambda: failing_queue))
    service = RouteGenerationService(queue=failing_queue)

    with pytest.raises(HTTPException) as exc_info:
        service.create_generation_request(db, request_data(zone, swapper), requested_by_user_id=planner.id)

    assert exc_info.value.status_code == 503
    stored = service.get_generation_request(db, 1)
    assert stored.status == GenerationStatus.FAILED


def test_get_missing_request(db):
    service = RouteGenerationService(queue=FakeQueue())

    with pytest.raises(HTTPException) as exc_info:
        service.get_generation_request(db, 404)
    assert exc_info.value.status_code == 404


def test_process_low_battery_request(db, zone, planner, swapper, zone_vehicles, route_service):
    service = RouteGenerationService(queue=FakeQueue())
    generation_request = service.create_generation_request(db, request_data(zone, swapper), planner.id)

    processed = process_generation_request(db, generation_request.id, route_service)

    assert processed.status == GenerationStatus.COMPLETED
    assert processed.started_at is not None
    assert processed.completed_at is not None
    assert processed.error_message is None

    route = db.get(Route, processed.route_id)
    assert route.total_vehicle_count == 3
    assert route.created_by_user_id == planner.id
    assert route.date == datetime.date(2025, 6, 1)


def test_process_explicit_vehicle_selection(db, zone, planner, swapper, zone_vehicles, route_service):
    service = RouteGenerationService(queue=FakeQueue())
    generation_request = service.create_generation_request(
        db, request_data(zone, swapper, vehicle_ids=[10, 12]), planner.id
    )

    processed = process_generation_request(db, generation_request.id, route_service)

    assert processed.status == GenerationStatus.COMPLETED
    route = db.get(Route, processed.route_id)
    assert {stop.vehicle_id for stop in route.stops} == {10, 12}


def test_process_infeasible_request_fails(db, zone, planner, swapper, route_service):
    make_vehicle(db, zone.id, 52.3676, 4.9041, battery_level=5, vehicle_id=1)
    make_vehicle(db, zone.id, 52.5200, 13.4050, battery_level=5, vehicle_id=2)
    service = RouteGenerationService(queue=FakeQueue())
    generation_request = service.create_generation_request(
        db, request_data(zone, swapper, target_duration_minutes=60), planner.id
    )

    processed = process_generation_request(db, generation_request.id, route_service)

    assert processed.status == GenerationStatus.FAILED
    assert processed.error_message == NO_SOLUTION_MESSAGE
    assert processed.route_id is None


def test_process_missing_request(db, route_service):
    with pytest.raises(ValueError):
        process_generation_request(db, 404, route_service)
