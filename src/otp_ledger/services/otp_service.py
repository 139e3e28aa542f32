"""OTP lifecycle service — orchestrates issuing and validating passcodes."""

from __future__ import annotations

import logging
from collections.abc import Callable

from otp_ledger.config import settings
from otp_ledger.database.ledger import OTPLedger
from otp_ledger.database.repository import UserRepository
from otp_ledger.services.generator import random_digits

logger = logging.getLogger(__name__)


class OTPService:
    """Translates public user identifiers and drives the ledger.

    Flow
    ----
    1. The public identifier is resolved to the internal user key.
    2. On issue, a fresh code is drawn from the generator; nothing is
       written if identity resolution or generation fails.
    3. The ledger performs the actual state transition in one
       transaction and its outcome is passed back unchanged.
    """

    def __init__(
        self,
        users: UserRepository,
        ledger: OTPLedger,
        generator: Callable[[int], str] = random_digits,
        *,
        otp_length: int | None = None,
        log: logging.Logger | None = None,
    ) -> None:
        self._users = users
        self._ledger = ledger
        self._generate = generator
        self._otp_length = otp_length or settings.otp_length
        self._logger = log or logger

    async def generate_otp(self, user_uuid: str, request_id: str) -> str:
        """Issue a new code for *user_uuid* and return it."""
        user_key = await self._users.resolve(user_uuid)
        code = self._generate(self._otp_length)
        await self._ledger.issue_or_reject(user_key, code, request_id)
        self._logger.info("OTP generated for %s (request %s)", user_uuid, request_id)
        return code

    async def validate_otp(self, user_uuid: str, code: str, request_id: str) -> None:
        """Consume *code* for *user_uuid*.

        ``request_id`` only correlates log lines; it is not compared with
        the token recorded at issuance.
        """
        user_key = await self._users.resolve(user_uuid)
        await self._ledger.consume(user_key, code)
        self._logger.info("OTP validated for %s (request %s)", user_uuid, request_id)
