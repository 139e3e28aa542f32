"""OTP API router — request and validate one-time passcodes.

Endpoints
---------
POST /otp/request    → issue a code for a user
POST /otp/validate   → consume a previously issued code
"""

from __future__ import annotations

import asyncio
import logging
from datetime import timedelta

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from pydantic import UUID4, BaseModel, Field

from otp_ledger.config import settings
from otp_ledger.database.engine import async_session_factory
from otp_ledger.database.ledger import OTPLedger
from otp_ledger.database.repository import UserRepository
from otp_ledger.errors import (
    GenerationError,
    IdentityNotFound,
    InvalidOTP,
    OTPAlreadyActive,
    OTPExpired,
    OTPLedgerError,
    StoreError,
)
from otp_ledger.services.otp_service import OTPService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/otp", tags=["otp"])

# ── Shared service (created once, reused across requests) ──
_otp_service = OTPService(
    UserRepository(async_session_factory),
    OTPLedger(async_session_factory, ttl=timedelta(seconds=settings.otp_ttl_seconds)),
    otp_length=settings.otp_length,
)

ERROR_STATUS_CODES: dict[type[OTPLedgerError], int] = {
    IdentityNotFound: status.HTTP_404_NOT_FOUND,
    OTPAlreadyActive: status.HTTP_409_CONFLICT,
    GenerationError: status.HTTP_400_BAD_REQUEST,
    InvalidOTP: status.HTTP_400_BAD_REQUEST,
    OTPExpired: status.HTTP_400_BAD_REQUEST,
    StoreError: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def get_otp_service() -> OTPService:
    return _otp_service


async def otp_error_handler(request: Request, exc: OTPLedgerError) -> JSONResponse:
    """Translate a domain error into its HTTP response."""
    status_code = ERROR_STATUS_CODES.get(
        type(exc), status.HTTP_500_INTERNAL_SERVER_ERROR
    )
    if status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
        message = "Internal Server Error"
    else:
        logger.warning("%s %s rejected: %s", request.method, request.url.path, exc)
        message = exc.message
    return JSONResponse(
        status_code=status_code,
        content={"detail": {"code": exc.code, "message": message}},
    )


# ── Request / response models ────────────────────────────

class OTPRequest(BaseModel):
    user_id: UUID4


class OTPResponse(BaseModel):
    user_id: str
    otp: str


class ValidateOTPRequest(BaseModel):
    user_id: UUID4
    otp: str = Field(min_length=1)
    request_id: str = Field(min_length=1)


class ValidateOTPResponse(BaseModel):
    user_id: str
    message: str


# ── Endpoints ────────────────────────────────────────────

@router.post("/request", response_model=OTPResponse)
async def request_otp(
    body: OTPRequest,
    request: Request,
    service: OTPService = Depends(get_otp_service),
):
    """Issue a passcode; the request id comes from the X-Request-ID header."""
    user_id = str(body.user_id)
    try:
        async with asyncio.timeout(settings.request_timeout_seconds):
            otp = await service.generate_otp(
                user_id, getattr(request.state, "request_id", "")
            )
    except TimeoutError as exc:
        raise StoreError("request deadline exceeded") from exc

    return OTPResponse(user_id=user_id, otp=otp)


@router.post("/validate", response_model=ValidateOTPResponse)
async def validate_otp(
    body: ValidateOTPRequest,
    service: OTPService = Depends(get_otp_service),
):
    """Consume a passcode previously issued to the user."""
    user_id = str(body.user_id)
    try:
        async with asyncio.timeout(settings.request_timeout_seconds):
            await service.validate_otp(user_id, body.otp, body.request_id)
    except TimeoutError as exc:
        raise StoreError("request deadline exceeded") from exc

    return ValidateOTPResponse(user_id=user_id, message="OTP validated successfully.")
