import os

# Must be set before anything from app is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["SOLVER_TIME_LIMIT_SECONDS"] = "1"
os.environ["ROUTE_GENERATION_TIMEOUT_SECONDS"] = "20"
os.environ["REDIS_URL"] = "redis://localhost:6399/0"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.security import create_access_token, get_password_hash
from app.database import Base, get_db, get_session_factory
from app.models import ParkingZone, User, UserRole, Vehicle, Zone
from main import app

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# A tight cluster of vehicles in central Amsterdam
AMSTERDAM_POINTS = [
    (52.3702, 4.8952),
    (52.3731, 4.8922),
    (52.3676, 4.9041),
    (52.3650, 4.8890),
]


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: TestingSessionLocal
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def make_user(db, email, role, password="secret123", is_active=True):
    user = User(
        email=email,
        hashed_password=get_password_hash(password),
        first_name=email.split("@")[0].capitalize(),
        last_name="Tester",
        role=role,
        is_active=is_active,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def make_vehicle(db, zone_id, latitude, longitude, battery_level=10, vehicle_id=None, is_available=True):
    vehicle = Vehicle(
        id=vehicle_id,
        external_id=f"SCOOT-{vehicle_id or latitude}",
        registration_number=f"R{vehicle_id or 0}",
        vehicle_type="e-scooter",
        zone_id=zone_id,
        latitude=latitude,
        longitude=longitude,
        battery_level=battery_level,
        needs_battery_replacement=battery_level <= 25,
        is_available=is_available,
    )
    db.add(vehicle)
    db.commit()
    db.refresh(vehicle)
    return vehicle


def make_parking_zone(db, zone_id, latitude, longitude, max_capacity=10, current_vehicle_count=0, is_active=True):
    parking_zone = ParkingZone(
        zone_id=zone_id,
        name=f"Parking {latitude:.4f},{longitude:.4f}",
        latitude=latitude,
        longitude=longitude,
        radius_meters=50,
        max_capacity=max_capacity,
        current_vehicle_count=current_vehicle_count,
        is_active=is_active,
    )
    db.add(parking_zone)
    db.commit()
    db.refresh(parking_zone)
    return parking_zone


def auth_headers(user):
    token = create_access_token(data={"id": str(user.id), "email": user.email, "role": user.role.value})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def zone(db):
    zone = Zone(id=7, name="Amsterdam Centrum", country_code="NL")
    db.add(zone)
    db.commit()
    return zone


@pytest.fixture
def other_zone(db):
    zone = Zone(id=8, name="Amsterdam Noord", country_code="NL")
    db.add(zone)
    db.commit()
    return zone


@pytest.fixture
def planner(db):
    return make_user(db, "planner@example.com", UserRole.fleet_manager)


@pytest.fixture
def swapper(db):
    return make_user(db, "swapper@example.com", UserRole.battery_swapper)


@pytest.fixture
def zone_vehicles(db, zone):
    """Three low battery vehicles in zone 7."""
    return [
        make_vehicle(db, zone.id, lat, lon, battery_level=10 + i, vehicle_id=10 + i)
        for i, (lat, lon) in enumerate(AMSTERDAM_POINTS[:3])
    ]
