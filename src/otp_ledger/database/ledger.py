"""OTP ledger — transactional issue / consume of one-time passcodes.

Expiry is applied lazily: a stale ``UNUSED`` row is only marked
``EXPIRED`` when the next issue for the same user finds it.  There is no
background sweeper.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime, timedelta

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from otp_ledger.errors import InvalidOTP, OTPAlreadyActive, OTPExpired, StoreError
from otp_ledger.models.otp import OTP, OTPStatus
from otp_ledger.models.user import User

logger = logging.getLogger(__name__)

DEFAULT_TTL = timedelta(minutes=5)


def utcnow() -> datetime:
    return datetime.now(UTC)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything is stored as UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


class OTPLedger:
    """Owns the durable state of every issued OTP.

    Parameters
    ----------
    session_factory:
        Produces one ``AsyncSession`` per operation; each operation runs
        in exactly one transaction on it.
    ttl:
        Lifetime of a freshly issued code.
    now_func:
        Clock returning an aware datetime; normalised to UTC.
    log:
        Logger to report on; defaults to this module's logger.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        *,
        ttl: timedelta = DEFAULT_TTL,
        now_func: Callable[[], datetime] = utcnow,
        log: logging.Logger | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._ttl = ttl
        self._now = now_func
        self._logger = log or logger

    async def issue_or_reject(self, user_key: int, code: str, request_id: str) -> OTP:
        """Store *code* as the user's active OTP.

        Raises ``OTPAlreadyActive`` (after committing, nothing changed) when
        the user still holds a live code.  A code whose ``expires_at`` has
        been reached is retired to ``EXPIRED`` in the same transaction that
        inserts the new one.
        """
        now = self._now().astimezone(UTC)
        already_active = False
        record: OTP | None = None

        try:
            async with self._session_factory() as session:
                async with session.begin():
                    # Per-user lock that exists even when no UNUSED row does
                    await session.execute(
                        select(User.id).where(User.id == user_key).with_for_update()
                    )
                    result = await session.execute(
                        select(OTP)
                        .where(OTP.user_id == user_key, OTP.status == OTPStatus.UNUSED)
                        .order_by(OTP.id.desc())
                        .with_for_update()
                    )
                    current = result.scalars().first()

                    if current is not None and _as_utc(current.expires_at) > now:
                        already_active = True
                    else:
                        if current is not None:
                            current.status = OTPStatus.EXPIRED
                            self._logger.info(
                                "Retired stale OTP %s for user %s", current.id, user_key
                            )
                        record = OTP(
                            user_id=user_key,
                            code=code,
                            request_id=request_id or "",
                            status=OTPStatus.UNUSED,
                            expires_at=now + self._ttl,
                            created_at=now,
                        )
                        session.add(record)
                        await session.flush()
        except SQLAlchemyError as exc:
            self._logger.error("Failed to issue OTP for user %s: %s", user_key, exc)
            raise StoreError() from exc

        if already_active:
            self._logger.info(
                "Rejected OTP request %s for user %s: active OTP outstanding",
                request_id,
                user_key,
            )
            raise OTPAlreadyActive()

        self._logger.info(
            "Issued OTP %s for user %s (request %s)", record.id, user_key, request_id
        )
        return record

    async def consume(self, user_key: int, code: str) -> None:
        """Mark the user's ``UNUSED`` row matching *code* as ``USED``.

        ``InvalidOTP`` covers a wrong code, an already used code and a user
        without any code.  A matching code past its ``expires_at`` raises
        ``OTPExpired`` and is left ``UNUSED``; a code expiring exactly now
        is still accepted.
        """
        now = self._now().astimezone(UTC)
        expired = False

        try:
            async with self._session_factory() as session:
                async with session.begin():
                    result = await session.execute(
                        select(OTP)
                        .where(
                            OTP.user_id == user_key,
                            OTP.code == code,
                            OTP.status == OTPStatus.UNUSED,
                        )
                        .order_by(OTP.id.desc())
                        .with_for_update()
                    )
                    record = result.scalars().first()
                    if record is None:
                        raise InvalidOTP()

                    if _as_utc(record.expires_at) < now:
                        expired = True
                    else:
                        record.status = OTPStatus.USED
                        await session.flush()
        except SQLAlchemyError as exc:
            self._logger.error("Failed to consume OTP for user %s: %s", user_key, exc)
            raise StoreError() from exc

        if expired:
            raise OTPExpired()

        self._logger.info("Consumed OTP %s for user %s", record.id, user_key)

    # ── Read helpers ─────────────────────────────────────

    async def get_active(self, user_key: int) -> OTP | None:
        """Return the user's ``UNUSED`` row, live or stale, if any."""
        stmt = (
            select(OTP)
            .where(OTP.user_id == user_key, OTP.status == OTPStatus.UNUSED)
            .order_by(OTP.id.desc())
        )
        try:
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                return result.scalars().first()
        except SQLAlchemyError as exc:
            raise StoreError() from exc

    async def history(self, user_key: int) -> list[OTP]:
        """Every row ever issued to the user, oldest first."""
        stmt = select(OTP).where(OTP.user_id == user_key).order_by(OTP.id)
        try:
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                return list(result.scalars().all())
        except SQLAlchemyError as exc:
            raise StoreError() from exc
