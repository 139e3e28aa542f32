"""Error taxonomy shared by the service, the ledger and the HTTP layer."""

from __future__ import annotations


class OTPLedgerError(Exception):
    """Base class for every failure the OTP core reports.

    ``code`` is a stable machine-readable identifier; ``message`` is the
    human-readable default used when no explicit message is given.
    """

    code = "OTP_ERROR"
    message = "otp error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.message)
        self.message = message or self.message


class IdentityNotFound(OTPLedgerError):
    code = "IDENTITY_NOT_FOUND"
    message = "data not found"


class GenerationError(OTPLedgerError):
    """The random source could not produce a passcode. Safe to retry."""

    code = "GENERATION_ERROR"
    message = "unable to generate otp"


class OTPAlreadyActive(OTPLedgerError):
    code = "OTP_ALREADY_ACTIVE"
    message = "there is still an active otp"


class InvalidOTP(OTPLedgerError):
    """Wrong, already used, or unknown code. Deliberately not more specific."""

    code = "INVALID_OTP"
    message = "invalid otp"


class OTPExpired(OTPLedgerError):
    code = "OTP_EXPIRED"
    message = "otp expired"


class StoreError(OTPLedgerError):
    """Infrastructure failure: transaction, lock or connectivity fault."""

    code = "STORE_ERROR"
    message = "ledger store failure"
