"""
Centralized Test Configuration.

Every test gets a fresh SQLite database (file based, so the app and the
test fixtures can use separate sessions) and an in-memory Redis stand-in
for token revocation.
"""

from datetime import datetime, timedelta

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy import event, select
from sqlalchemy.pool import Pool

from backend.app.main import app
from backend.app.db.session import Database
from backend.app.core.jwt import create_access_token
from backend.app.core.security import get_password_hash
from backend.app.models.driver import Driver
from backend.app.models.enums import DriverStatus, UserRole, VehicleStatus
from backend.app.models.user import User
from backend.app.models.vehicle import Vehicle
import backend.app.core.redis_client as redis_client_module

TEST_PASSWORD = "password123"
_PASSWORD_HASH = get_password_hash(TEST_PASSWORD)


@event.listens_for(Pool, "connect")
def set_sqlite_pragma(dbapi_conn, connection_record):
    """Enable foreign key constraints for SQLite."""
    if 'sqlite' in str(type(dbapi_conn)):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


# Mock Redis for reliability in CI/CD
class MockRedis:
    def __init__(self):
        self.store = {}
        self.ttl = {}

    async def setex(self, key, seconds, value):
        self.store[key] = value
        self.ttl[key] = seconds
        return True

    async def exists(self, key):
        return 1 if key in self.store else 0

    async def aclose(self):
        self.store = {}


@pytest.fixture(autouse=True)
def mock_redis(monkeypatch):
    """Patch the global redis client used by token revocation."""
    client = MockRedis()
    monkeypatch.setattr(redis_client_module, "redis_client", client)
    return client


@pytest.fixture(autouse=True)
async def database(tmp_path):
    """Create a database for one test and hand it to the app."""
    db = Database(f"sqlite+aiosqlite:///{tmp_path / 'aivodrive-test.db'}")
    await db.connect()
    await db.create_all()
    app.state.database = db
    yield db
    await db.dispose()


@pytest.fixture
async def client():
    """Async client for testing."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


# Shared session for fixture data creation
@pytest.fixture
async def db_session(database):
    async with database.session() as session:
        yield session


@pytest.fixture
def reload(db_session):
    """Re-read a row, bypassing whatever the fixture session has cached."""
    async def _reload(model, object_id):
        result = await db_session.execute(
            select(model).where(model.id == object_id).execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()
    return _reload


def auth_headers(user: User, **token_options) -> dict:
    token = create_access_token(
        data={"sub": user.email, "user_id": user.id, "role": user.role.value},
        **token_options
    )
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def headers_for():
    return auth_headers


@pytest.fixture
def make_user(db_session):
    counter = {"n": 0}

    async def _make_user(role=UserRole.ADMIN, email=None, name=None, is_active=True):
        counter["n"] += 1
        user = User(
            name=name or f"{role.value.title()} {counter['n']}",
            email=email or f"{role.value}{counter['n']}@aivodrive.com",
            hashed_password=_PASSWORD_HASH,
            role=role,
            is_active=is_active,
        )
        db_session.add(user)
        await db_session.commit()
        await db_session.refresh(user)
        return user

    return _make_user


@pytest.fixture
async def admin(make_user):
    return await make_user(UserRole.ADMIN, email="admin@aivodrive.com", name="Admin User")


@pytest.fixture
def admin_headers(admin):
    return auth_headers(admin)


@pytest.fixture
async def dispatcher_headers(make_user):
    return auth_headers(await make_user(UserRole.DISPATCHER, email="dispatcher@aivodrive.com"))


@pytest.fixture
def make_vehicle(db_session):
    counter = {"n": 0}

    async def _make_vehicle(**overrides):
        counter["n"] += 1
        values = {
            "make": "Toyota",
            "model": "Camry",
            "year": 2022,
            "license_plate": f"TST-{counter['n']:04d}",
            "status": VehicleStatus.ACTIVE,
            "mileage": 10000,
            "last_service_date": datetime.utcnow() - timedelta(days=10),
        }
        values.update(overrides)
        vehicle = Vehicle(**values)
        db_session.add(vehicle)
        await db_session.commit()
        await db_session.refresh(vehicle)
        return vehicle

    return _make_vehicle


@pytest.fixture
def make_driver(db_session, make_user):
    """Create a driver profile plus its user account; returns ``(driver, user)``."""
    counter = {"n": 0}

    async def _make_driver(status=DriverStatus.AVAILABLE, **overrides):
        counter["n"] += 1
        user = await make_user(UserRole.DRIVER)
        values = {
            "user_id": user.id,
            "license_number": f"DL-TEST-{counter['n']:04d}",
            "license_expiry": datetime.utcnow() + timedelta(days=365),
            "status": status,
            "total_trips": 0,
            "total_distance": 0,
        }
        values.update(overrides)
        driver = Driver(**values)
        db_session.add(driver)
        await db_session.commit()
        await db_session.refresh(driver)
        return driver, user

    return _make_driver
