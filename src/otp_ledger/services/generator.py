"""Cryptographically secure numeric passcode generator."""

from __future__ import annotations

import secrets
import string

from otp_ledger.errors import GenerationError


def random_digits(length: int) -> str:
    """Return *length* random decimal digits drawn from the OS CSPRNG.

    Raises ``GenerationError`` if the entropy source is unavailable.
    """
    if length < 1:
        raise ValueError("length must be at least 1")
    try:
        return "".join(secrets.choice(string.digits) for _ in range(length))
    except OSError as exc:
        raise GenerationError() from exc
