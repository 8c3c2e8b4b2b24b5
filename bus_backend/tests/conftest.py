"""
Centralized Test Configuration.
"""

from datetime import date

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy import event
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import Pool, StaticPool

from bus_backend.app.main import app
from bus_backend.app.db.session import get_db, Base
from bus_backend.app.core.jwt import create_access_token
from bus_backend.app.core.security import get_password_hash
from bus_backend.app.models.admin import Admin
from bus_backend.app.models.driver import Driver
from bus_backend.app.models.bus import Bus
from bus_backend.app.models.stop import Stop
from bus_backend.app.models.route import Route, RouteStop
from bus_backend.app.models.schedule import Schedule
from bus_backend.app.models.trip import Trip
from bus_backend.app.services.realtime import TripChannelHub, get_hub
import bus_backend.app.core.redis_client as redis_client_module

# Setup In-Memory Test Database
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@event.listens_for(Pool, "connect")
def set_sqlite_pragma(dbapi_conn, connection_record):
    """Enable foreign key constraints for SQLite."""
    if 'sqlite' in str(type(dbapi_conn)):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


engine = create_async_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = async_sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False
)


# Mock Redis for reliability in CI/CD
class MockRedis:
    def __init__(self):
        self.store = {}
        self._closed = False

    async def ping(self):
        return not self._closed

    async def get(self, key):
        if self._closed:
            return None
        return self.store.get(key)

    async def set(self, key, value, ex=None):
        if self._closed:
            return False
        self.store[key] = value
        return True

    async def delete(self, key):
        if self._closed:
            return 0
        return 1 if self.store.pop(key, None) is not None else 0

    async def exists(self, key):
        if self._closed:
            return 0
        return 1 if key in self.store else 0

    async def flushdb(self):
        if not self._closed:
            self.store = {}

    async def aclose(self):
        self._closed = True
        self.store = {}


@pytest.fixture(scope="session")
def redis_client_session():
    return MockRedis()


@pytest.fixture(scope="session", autouse=True)
def apply_overrides(redis_client_session):
    """Apply overrides once for the session."""
    # Patch the global redis client used by token revocation
    original_client = redis_client_module.redis_client
    redis_client_module.redis_client = redis_client_session

    async def override_get_db():
        async with TestingSessionLocal() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    yield

    # Restore and clear
    app.dependency_overrides = {}
    redis_client_module.redis_client = original_client


@pytest.fixture(autouse=True)
async def setup_database(redis_client_session):
    """Create tables before each test function and drop after."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    await redis_client_session.flushdb()

    yield

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture(autouse=True)
def hub():
    """A fresh channel hub per test, shared by REST handlers and /ws."""
    test_hub = TripChannelHub()
    app.dependency_overrides[get_hub] = lambda: test_hub
    yield test_hub
    app.dependency_overrides.pop(get_hub, None)


@pytest.fixture
async def client():
    """Async client for testing."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


# Shared session for fixture data creation
@pytest.fixture
async def db_session():
    async with TestingSessionLocal() as session:
        yield session


def auth_headers(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
async def admin_account(db_session):
    admin = Admin(
        email="admin@mysurubus.com",
        name="Admin User",
        password_hash=get_password_hash("admin123"),
    )
    db_session.add(admin)
    await db_session.commit()
    return admin


@pytest.fixture
async def driver_account(db_session):
    driver = Driver(
        name="John Driver",
        phone_number="+91-9876543210",
        email="john@mysurubus.com",
        password_hash=get_password_hash("driver123"),
    )
    db_session.add(driver)
    await db_session.commit()
    return driver


@pytest.fixture
def admin_token(admin_account):
    return create_access_token(data={
        "sub": f"admin:{admin_account.admin_id}",
        "role": "admin",
        "admin_id": admin_account.admin_id,
    })


@pytest.fixture
def driver_token(driver_account):
    return create_access_token(data={
        "sub": f"driver:{driver_account.driver_id}",
        "role": "driver",
        "driver_id": driver_account.driver_id,
    })


@pytest.fixture
def admin_headers(admin_token):
    return auth_headers(admin_token)


@pytest.fixture
def driver_headers(driver_token):
    return auth_headers(driver_token)


@pytest.fixture
async def fleet(db_session, driver_account):
    """
    One route (City Center -> Main Street -> Airport) with a schedule, a bus
    and today's trip driven by driver_account.
    """
    stops = [
        Stop(stop_name="City Center", latitude=12.2958, longitude=76.6394),
        Stop(stop_name="Main Street", latitude=12.3000, longitude=76.6450),
        Stop(stop_name="Airport", latitude=12.3200, longitude=76.6800),
    ]
    route = Route(route_name="City Center to Airport", route_no="150A")
    bus = Bus(bus_no="150A-01")
    db_session.add_all(stops + [route, bus])
    await db_session.flush()

    for position, (stop, offset) in enumerate(zip(stops, [0, 15, 45]), start=1):
        db_session.add(RouteStop(
            route_id=route.route_id,
            stop_id=stop.stop_id,
            stop_sequence=position,
            time_offset_from_start=offset,
        ))

    schedule = Schedule(route_id=route.route_id, start_time="08:00")
    db_session.add(schedule)
    await db_session.flush()

    trip = Trip(
        schedule_id=schedule.schedule_id,
        bus_id=bus.bus_id,
        driver_id=driver_account.driver_id,
        trip_date=date.today(),
        status="Scheduled",
    )
    db_session.add(trip)
    await db_session.commit()

    return {
        "stop_ids": [stop.stop_id for stop in stops],
        "route_id": route.route_id,
        "bus_id": bus.bus_id,
        "driver_id": driver_account.driver_id,
        "schedule_id": schedule.schedule_id,
        "trip_id": trip.trip_id,
    }
