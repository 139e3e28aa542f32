"""FastAPI application entry point."""

import logging
import time
import uuid
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request

from otp_ledger.api.router import otp_error_handler
from otp_ledger.api.router import router as otp_router
from otp_ledger.config import settings
from otp_ledger.database.engine import engine, init_db
from otp_ledger.errors import OTPLedgerError

REQUEST_ID_HEADER = "X-Request-ID"

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup / shutdown lifecycle hook."""
    logger.info("Starting %s …", settings.app_name)
    await init_db()
    logger.info("Database initialised")
    yield
    logger.info("Shutting down %s …", settings.app_name)
    await engine.dispose()


app = FastAPI(
    title=settings.app_name,
    description="Issues and validates single-use passcodes bound to a user",
    version="0.1.0",
    lifespan=lifespan,
)

app.include_router(otp_router)
app.add_exception_handler(OTPLedgerError, otp_error_handler)


@app.middleware("http")
async def request_id_and_access_log(request: Request, call_next):
    """Attach a request id to every request and write one access-log line."""
    request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
    request.state.request_id = request_id

    started = time.perf_counter()
    response = await call_next(request)
    latency_ms = (time.perf_counter() - started) * 1000
    response.headers[REQUEST_ID_HEADER] = request_id

    if response.status_code >= 500:
        log_fn = logger.error
    elif response.status_code >= 400:
        log_fn = logger.warning
    else:
        log_fn = logger.info
    log_fn(
        "access log method=%s path=%s status=%s latency_ms=%.2f request_id=%s",
        request.method,
        request.url.path,
        response.status_code,
        latency_ms,
        request_id,
    )
    return response


@app.get("/health")
async def health_check():
    """Simple liveness probe."""
    return {"status": "healthy", "app": settings.app_name}


def run() -> None:
    """Console entry point: serve the app with uvicorn."""
    uvicorn.run(app, host=settings.host, port=settings.port)
