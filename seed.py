"""Seed script — populates the database with sample users for testing."""

import asyncio

from sqlalchemy.ext.asyncio import AsyncSession

from otp_ledger.database.engine import async_session_factory, init_db
from otp_ledger.models.user import User

SAMPLE_USERS = [
    User(uuid="3f1c2a9e-8b4d-4e7a-9c61-0d2b5f7a1e34"),
    User(uuid="b7e4d0c2-5a18-4f3b-8d9e-6c1a2b3f4e50"),
    User(uuid="9a2f6e1d-3c7b-4d85-a0e9-1b4c7d2e8f63"),
    User(uuid="e5d8c3b1-7f2a-4a69-b4c0-8e3d1f6a2b97"),
]


async def seed() -> None:
    """Insert sample users into the database."""
    await init_db()
    async with async_session_factory() as session:
        session: AsyncSession
        for user in SAMPLE_USERS:
            session.add(user)
        await session.commit()
    print(f"✅ Seeded {len(SAMPLE_USERS)} users into the database.")
    for user in SAMPLE_USERS:
        print(f"   {user.uuid}")


if __name__ == "__main__":
    asyncio.run(seed())
