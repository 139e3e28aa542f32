"""Shared fixtures: an in-memory ledger database and a controllable clock."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import async_sessionmaker

from otp_ledger.database.engine import build_engine, init_db
from otp_ledger.models.user import User

ALICE_UUID = "3f1c2a9e-8b4d-4e7a-9c61-0d2b5f7a1e34"
BOB_UUID = "b7e4d0c2-5a18-4f3b-8d9e-6c1a2b3f4e50"
UNKNOWN_UUID = "00000000-0000-4000-8000-000000000000"

T0 = datetime(2024, 1, 1, 0, 1, 0, tzinfo=UTC)


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: datetime = T0) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now += delta


def as_utc(value: datetime) -> datetime:
    """SQLite returns naive datetimes; the ledger stores UTC."""
    return value if value.tzinfo else value.replace(tzinfo=UTC)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest_asyncio.fixture
async def session_factory():
    """Create tables in a fresh in-memory DB and yield a session factory."""
    engine = build_engine("sqlite+aiosqlite://")
    await init_db(engine)
    factory = async_sessionmaker(engine, expire_on_commit=False)
    yield factory
    await engine.dispose()


@pytest_asyncio.fixture
async def users(session_factory) -> dict[str, int]:
    """Seed Alice and Bob; map each public uuid to its internal key."""
    async with session_factory() as session:
        alice = User(uuid=ALICE_UUID)
        bob = User(uuid=BOB_UUID)
        session.add_all([alice, bob])
        await session.commit()
        return {ALICE_UUID: alice.id, BOB_UUID: bob.id}
