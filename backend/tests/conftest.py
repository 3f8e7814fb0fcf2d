"""Shared fixtures: in-memory database, fake identity provider, API client."""

from datetime import date, datetime
from unittest.mock import MagicMock, patch

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from carwash.core.errors import AccountExists, AuthError, NotFound
from carwash.database import configure_sqlite, get_db
from carwash.models import Base, Bookings, Locations, Services
from carwash.services.identity import Identity, get_identity_provider
from carwash.services.slots import BookingConfig, SlotGrid, get_booking_config

LOCATION_ID = "rosebank"
FUTURE_DAY = date(2030, 6, 3)


class FakeIdentityProvider:
    """In-memory stand-in for the external identity provider."""

    def __init__(self):
        self.tokens: dict[str, Identity] = {}
        self.users: dict[str, Identity] = {}
        self.get_user_calls = 0

    def add_user(self, token: str, uid: str, role: str = "customer", name: str | None = None):
        identity = Identity(uid=uid, role=role, email=f"{uid}@example.com", name=name or uid.title())
        self.tokens[token] = identity
        self.users[uid] = identity
        return identity

    def verify_token(self, token: str) -> Identity:
        if token not in self.tokens:
            raise AuthError("Unauthorized: Invalid token.")
        return self.tokens[token]

    def get_user(self, uid: str) -> Identity:
        self.get_user_calls += 1
        if uid not in self.users:
            raise NotFound(f"User {uid} not found")
        return self.users[uid]

    def create_user(self, email: str, password: str, name: str) -> Identity:
        if any(u.email == email for u in self.users.values()):
            raise AccountExists("Email already in use")
        uid = f"uid-{len(self.users) + 1}"
        identity = Identity(uid=uid, email=email, name=name)
        self.users[uid] = identity
        return identity

    def set_role(self, uid: str, role: str) -> None:
        if uid not in self.users:
            raise NotFound(f"User {uid} not found")
        current = self.users[uid]
        self.users[uid] = Identity(uid=uid, role=role, email=current.email, name=current.name)


@pytest.fixture
def config():
    return BookingConfig(
        open_time="08:00",
        close_time="17:00",
        slot_interval_minutes=15,
        utc_offset_minutes=120,
        default_active_bays=1,
        points_per_free_wash=10,
    )


@pytest.fixture
def grid(config):
    return SlotGrid(config)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    configure_sqlite(engine)
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    """A single session for service-level tests (no API calls)."""
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(autouse=True)
def redis_mock():
    """Events go to a mock instead of a live Redis."""
    mock = MagicMock()
    with patch("carwash.services.events.redis_client", mock):
        yield mock


@pytest.fixture
def identity():
    provider = FakeIdentityProvider()
    provider.add_user("customer-token", "alice", role="customer", name="Alice")
    provider.add_user("bob-token", "bob", role="customer", name="Bob")
    provider.add_user("manager-token", "mgr", role="manager", name="Manager")
    return provider


def seed_location(session, bays: int | None = None, location_id: str = LOCATION_ID) -> dict[str, int]:
    """Location with a 30-minute and a 60-minute service; returns name -> id."""
    from carwash.services.slots import SettingsResolver

    session.add(Locations(id=location_id, name="Rosebank"))
    wash = Services(location_id=location_id, name="Basic Wash", duration_in_minutes=30, display_order=0, price=120)
    valet = Services(location_id=location_id, name="Full Valet", duration_in_minutes=60, display_order=1, price=350)
    session.add_all([wash, valet])
    session.commit()

    if bays is not None:
        SettingsResolver(session).set_global(location_id, bays)

    return {"wash": wash.id, "valet": valet.id}


def add_booking(
    session,
    grid: SlotGrid,
    service_id: int,
    target_date: date,
    label: str,
    bay_id: int = 1,
    user_id: str = "someone",
    status: str = "paid",
    duration: int | None = None,
    location_id: str = LOCATION_ID,
) -> Bookings:
    booking = Bookings(
        location_id=location_id,
        user_id=user_id,
        service_id=service_id,
        start_time=grid.to_utc(target_date, label),
        status=status,
        bay_id=bay_id,
        duration_in_minutes=duration,
    )
    session.add(booking)
    session.commit()
    return booking


def local_dt(target_date: date, label: str) -> datetime:
    hour, minute = label.split(":")
    return datetime(target_date.year, target_date.month, target_date.day, int(hour), int(minute))


@pytest.fixture
def client(session_factory, identity, config):
    from carwash.main import app

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_identity_provider] = lambda: identity
    app.dependency_overrides[get_booking_config] = lambda: config
    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        app.dependency_overrides.clear()


def auth(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}
