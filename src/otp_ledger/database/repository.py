"""User repository — resolves public identifiers to internal user keys."""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from otp_ledger.errors import IdentityNotFound, StoreError
from otp_ledger.models.user import User

logger = logging.getLogger(__name__)


class UserRepository:
    """Encapsulates all database queries related to users."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def find_by_uuid(self, uuid: str) -> User | None:
        """Look up a user by their public identifier."""
        stmt = select(User).where(User.uuid == uuid)
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            return result.scalar_one_or_none()

    async def resolve(self, uuid: str) -> int:
        """Return the internal key for *uuid*.

        Raises ``IdentityNotFound`` for unknown identifiers and
        ``StoreError`` when the lookup itself fails.
        """
        try:
            user = await self.find_by_uuid(uuid)
        except SQLAlchemyError as exc:
            logger.error("User lookup failed for %s: %s", uuid, exc)
            raise StoreError() from exc
        if user is None:
            raise IdentityNotFound()
        return user.id
