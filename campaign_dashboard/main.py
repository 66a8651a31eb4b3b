import logging
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from campaign_dashboard.api import campaigns, health, influencers, me
from campaign_dashboard.core.config import settings
from campaign_dashboard.core.errors import (
    ConflictError,
    NotFoundError,
    UnauthenticatedError,
    ValidationError,
)
from campaign_dashboard.core.logging_config import setup_logging
from campaign_dashboard.core.middleware import RequestLoggingMiddleware
from campaign_dashboard.core.rate_limit import limiter
from campaign_dashboard.db.session import engine

# Configure structured JSON logging before anything else
setup_logging()

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan: connect and disconnect from the database."""
    try:
        async with engine.begin():
            pass  # connection pool is initialised
        logger.info("Database connection established")
    except Exception as exc:
        logger.warning("Database connection not available at startup: %s", exc)
    yield
    await engine.dispose()


app = FastAPI(
    title="Campaign Dashboard API",
    description="Campaigns, influencers and their assignments.",
    version="1.0.0",
    openapi_url="/api/openapi.json",
    docs_url="/api/docs",
    debug=settings.debug,
    lifespan=lifespan,
)


# ---------------------------------------------------------------------------
# Rate limiter
# ---------------------------------------------------------------------------
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# ---------------------------------------------------------------------------
# CORS middleware — use configured origins
# ---------------------------------------------------------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ---------------------------------------------------------------------------
# Request logging middleware
# ---------------------------------------------------------------------------
app.add_middleware(RequestLoggingMiddleware)


# ---------------------------------------------------------------------------
# Global exception handlers
# ---------------------------------------------------------------------------
@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    # Same shape as FastAPI's own request validation errors
    loc = ["body", exc.field] if exc.field else ["body"]
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": [{"loc": loc, "msg": exc.message, "type": "value_error"}]},
    )


@app.exception_handler(NotFoundError)
@app.exception_handler(ConflictError)
async def service_error_handler(request: Request, exc: NotFoundError | ConflictError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.exception_handler(UnauthenticatedError)
async def unauthenticated_handler(request: Request, exc: UnauthenticatedError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message},
        headers={"WWW-Authenticate": "Bearer"},
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
app.include_router(health.router, prefix="/api")
app.include_router(me.router, prefix="/api")
app.include_router(campaigns.router, prefix="/api")
app.include_router(influencers.router, prefix="/api")
