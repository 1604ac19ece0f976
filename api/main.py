"""
api/main.py -- FastAPI application entry point for Jobboard.

Run with:      uvicorn api.main:app --reload

Middleware stack (outermost to innermost; Starlette wraps the most recently
registered middleware around the rest):
  1. log_requests           -- method, path, status, latency per request
  2. authenticate_requests  -- bearer credential -> request.state.user (never rejects)
  3. SlowAPIMiddleware      -- enforces per-route rate limits from api.limiter
  4. CORSMiddleware         -- adds CORS headers for allowed browser origins

Route guards (auth/dependencies.py) then decide per route whether the
identity found by authenticate_requests is good enough.

Lifespan resolves Settings once, opens the shared Engine and builds the
stores on startup, and disposes the Engine on shutdown.
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from sqlalchemy import text
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.limiter import limiter
from api.models import ErrorDetail, ErrorResponse, HealthResponse
from api.routes.v1.auth import router as auth_router
from api.routes.v1.companies import router as companies_router
from api.routes.v1.jobs import router as jobs_router
from api.routes.v1.users import router as users_router
from auth.dependencies import authenticate
from auth.store import UserStore
from board.store import BoardStore
from core.config import get_settings
from core.db import make_engine
from core.errors import JobBoardError

_VERSION = "0.1.0"

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("jobboard.api")


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application-level resources across the full server lifetime.

    Settings go on app.state so the secret reaches the token helpers as an
    explicit value rather than a module global.
    """
    settings = get_settings()
    app.state.settings = settings
    app.state.engine = make_engine(settings.database_url)
    app.state.user_store = UserStore(app.state.engine, bcrypt_rounds=settings.bcrypt_work_factor)
    app.state.board_store = BoardStore(app.state.engine)
    logger.info("Jobboard API starting up (db=%s)", app.state.engine.url.render_as_string(hide_password=True))

    yield

    app.state.engine.dispose()
    logger.info("Jobboard API shutdown complete")


# ---------------------------------------------------------------------------
# App instantiation
# ---------------------------------------------------------------------------

app = FastAPI(
    title="Jobboard API",
    description="Companies, job postings, users and applications.",
    version=_VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost", "http://localhost:3000", "http://127.0.0.1"],
    allow_methods=["GET", "POST", "PATCH", "DELETE"],
    allow_headers=["Content-Type", "Authorization"],
    max_age=3600,
)

app.add_middleware(SlowAPIMiddleware)

# SlowAPI looks for app.state.limiter by convention.
app.state.limiter = limiter


# ---------------------------------------------------------------------------
# Authentication middleware
#
# authenticate() never raises: a missing or bad credential just leaves
# request.state.user as None for the route guards to judge.
# ---------------------------------------------------------------------------


@app.middleware("http")
async def authenticate_requests(request: Request, call_next):
    authenticate(request, request.app.state.settings.secret_key)
    return await call_next(request)


# ---------------------------------------------------------------------------
# Request logging middleware
# ---------------------------------------------------------------------------


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    ms = (time.perf_counter() - start) * 1000
    logger.info(
        "%s %s %d %.1fms %s",
        request.method,
        request.url.path,
        response.status_code,
        ms,
        request.client.host if request.client else "unknown",
    )
    return response


# ---------------------------------------------------------------------------
# Router registration
# ---------------------------------------------------------------------------

app.include_router(auth_router, prefix="/api/v1", tags=["Auth"])
app.include_router(companies_router, prefix="/api/v1", tags=["Companies"])
app.include_router(jobs_router, prefix="/api/v1", tags=["Jobs"])
app.include_router(users_router, prefix="/api/v1", tags=["Users"])


# ---------------------------------------------------------------------------
# Exception handlers
#
# All handlers return the same ErrorResponse envelope so API clients can parse
# errors uniformly without inspecting status codes to choose a schema.
# ---------------------------------------------------------------------------


def _error_response(status_code: int, code: str, message: str, detail: str | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=ErrorDetail(code=code, message=message, detail=detail)).model_dump(),
    )


@app.exception_handler(JobBoardError)
async def jobboard_error_handler(request: Request, exc: JobBoardError) -> JSONResponse:
    """Render BadRequest / Unauthorized / NotFound raised by stores and guards."""
    return _error_response(exc.status_code, exc.code, exc.message, exc.detail)


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Return 429 with a structured error when a rate limit is exceeded."""
    retry_after = exc.limit.limit.get_expiry() if exc.limit is not None else 60
    response = _error_response(429, "rate_limited", "Too many requests.", str(exc))
    response.headers["Retry-After"] = str(retry_after)
    return response


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Body or path validation failures are plain bad requests in this API."""
    return _error_response(400, "bad_request", "Request validation failed.", str(exc.errors()))


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Structured error for framework HTTP errors (unknown route, wrong method)."""
    return _error_response(exc.status_code, f"http_{exc.status_code}", str(exc.detail))


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all for unexpected server errors.

    The stack trace goes to the log only, never to the response body.
    """
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return _error_response(500, "internal_error", "An unexpected error occurred.")


# ---------------------------------------------------------------------------
# Health endpoint
# ---------------------------------------------------------------------------


@app.get("/api/v1/health", tags=["Health"])
def health(request: Request) -> HealthResponse:
    """Return API liveness, version and database reachability."""
    database = "ok"
    try:
        with request.app.state.engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except Exception:
        logger.exception("Health check: database unreachable")
        database = "error"
    status = "healthy" if database == "ok" else "degraded"
    return HealthResponse(status=status, version=_VERSION, components={"app": "ok", "database": database})
