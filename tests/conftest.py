"""Shared fixtures: in-memory database, in-process Redis and an API client."""

import os
from datetime import date, datetime, time

os.environ.setdefault("DB_URL", "sqlite+aiosqlite://")
os.environ.setdefault("LOCK_MAX_RETRIES", "2")
os.environ.setdefault("LOCK_RETRY_DELAY_MS", "10")

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.api.v1.dependencies import get_clock
from app.database import get_db
from app.main import app
from app.models import Base, Reservation, ReservationStatus, Table
from app.redis_client import get_redis

# Monday 2030-01-07, 09:00. The next day is a Tuesday.
NOW = datetime(2030, 1, 7, 9, 0)
OPEN_DAY = "2030-01-09"  # Wednesday
CLOSED_DAY = "2030-01-08"  # Tuesday


class InMemoryRedis:
    """The subset of the Redis client used by the seat locks."""

    def __init__(self):
        self.store: dict[str, str] = {}

    async def set(self, key, value, nx=False, ex=None):
        if nx and key in self.store:
            return None
        self.store[key] = value
        return True

    async def ping(self):
        return True

    def register_script(self, script):
        async def release(keys, args):
            if self.store.get(keys[0]) == args[0]:
                del self.store[keys[0]]
                return 1
            return 0

        return release


@pytest.fixture
def redis_client():
    return InMemoryRedis()


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(bind=engine, expire_on_commit=False)



@pytest.fixture
async def client(session_factory, redis_client):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    async def override_get_redis():
        return redis_client

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_redis] = override_get_redis
    app.dependency_overrides[get_clock] = lambda: NOW

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def make_reservation(session_factory):
    """Insert a reservation directly, bypassing the booking rules."""

    async def _make(**overrides) -> Reservation:
        fields = {
            "first_name": "Ada",
            "last_name": "Lovelace",
            "mobile_number": "555-0100",
            "reservation_date": date(2030, 1, 9),
            "reservation_time": time(18, 0),
            "people": 2,
            "status": ReservationStatus.BOOKED,
        }
        fields.update(overrides)
        async with session_factory() as session:
            reservation = Reservation(**fields)
            session.add(reservation)
            await session.commit()
            await session.refresh(reservation)
            return reservation

    return _make


@pytest.fixture
def make_table(session_factory):
    """Insert a table directly."""

    async def _make(**overrides) -> Table:
        fields = {"table_name": "Bar #1", "capacity": 4, "reservation_id": None}
        fields.update(overrides)
        async with session_factory() as session:
            table = Table(**fields)
            session.add(table)
            await session.commit()
            await session.refresh(table)
            return table

    return _make


def reservation_body(**overrides) -> dict:
    data = {
        "first_name": "Ada",
        "last_name": "Lovelace",
        "mobile_number": "555-0100",
        "reservation_date": OPEN_DAY,
        "reservation_time": "18:00",
        "people": 4,
    }
    data.update(overrides)
    return {"data": data}
