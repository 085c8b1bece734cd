import itertools
import os
from datetime import datetime, timezone
from zoneinfo import ZoneInfo

# Must be set before app.core.config is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET_KEY"] = "test-secret"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.api import deps
from app.core.clock import Clock, to_ms
from app.core.security import hash_password
from app.db.init_db import init_db
from app.db.session import get_db
from app.main import app
from app.models import AccountType, Driver, Passenger, Role, User
from app.schemas.ride import Coordinates, RideLocation, RideRequestCreate

# Wednesday, so the current week has days on both sides
NOW = to_ms(datetime(2024, 6, 12, 12, 0, tzinfo=timezone.utc))
PASSWORD = "secret123"

_phones = itertools.count(1)


class FixedClock(Clock):
    """Clock that only moves when told to."""

    def __init__(self, now_ms: int = NOW, tz=None):
        super().__init__(tz or ZoneInfo("UTC"))
        self.current = now_ms

    def now_ms(self) -> int:
        return self.current

    def advance(self, ms: int) -> None:
        self.current += ms


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(bind=engine, autocommit=False, autoflush=False)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def client(db, clock):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[deps.get_clock] = lambda: clock
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    def _make(account_type=AccountType.PASSENGER, active_role=None, name=None, is_active=True):
        number = next(_phones)
        if active_role is None:
            active_role = Role.PASSENGER if account_type == AccountType.BOTH else account_type
        user = User(
            name=name or f"User {number}",
            phone_number=f"+2771000{number:04d}",
            password=hash_password(PASSWORD),
            account_type=account_type,
            current_active_role=active_role,
            is_active=is_active,
        )
        db.add(user)
        db.flush()
        if account_type in (AccountType.PASSENGER, AccountType.BOTH):
            db.add(Passenger(user_id=user.id))
        if account_type in (AccountType.DRIVER, AccountType.BOTH):
            db.add(Driver(user_id=user.id))
        db.commit()
        return user

    return _make


@pytest.fixture
def passenger(make_user):
    return make_user(AccountType.PASSENGER, name="Thandi")


@pytest.fixture
def driver(make_user):
    return make_user(AccountType.DRIVER, name="Sipho")


@pytest.fixture
def settlement(db, clock):
    return deps.get_trip_settlement(db=db, clock=clock)


@pytest.fixture
def ledger(db, clock, settlement):
    notifier = deps.get_notifier(db=db, clock=clock)
    return deps.get_ride_ledger(db=db, clock=clock, settlement=settlement, notifier=notifier)


def build_ride_request(passenger_id, driver_id=None, fare=25.0, distance=7.5):
    return RideRequestCreate(
        passengerId=passenger_id,
        driverId=driver_id,
        startLocation=RideLocation(
            coordinates=Coordinates(latitude=-26.2041, longitude=28.0473),
            address="Bree Street Taxi Rank",
        ),
        endLocation=RideLocation(
            coordinates=Coordinates(latitude=-26.1076, longitude=28.0567),
            address="Sandton City",
        ),
        estimatedFare=fare,
        estimatedDistance=distance,
    )


@pytest.fixture
def ride_request():
    return build_ride_request

