"""
TourneyHub FastAPI Application
Main entry point for the application
"""

from contextlib import asynccontextmanager
import logging
import os
import time

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST

from tourneyhub.core.config import settings

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)

# Sentry integration
if os.getenv("SENTRY_DSN"):
    import sentry_sdk
    from sentry_sdk.integrations.fastapi import FastApiIntegration
    from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration
    from sentry_sdk.integrations.redis import RedisIntegration

    sentry_sdk.init(
        dsn=os.getenv("SENTRY_DSN"),
        integrations=[
            FastApiIntegration(),
            SqlalchemyIntegration(),
            RedisIntegration(),
        ],
        traces_sample_rate=0.1,
        environment=settings.app_env,
    )

from tourneyhub.api.health import router as health_router
from tourneyhub.api.responses import error_response
from tourneyhub.api.v1.organizers import router as organizers_router
from tourneyhub.api.v1.players import router as players_router
from tourneyhub.api.v1.tournaments import router as tournaments_router
from tourneyhub.api.v1.wallet import router as wallet_router
from tourneyhub.core.errors import InvalidInput, LedgerError
from tourneyhub.core.metrics import ACTIVE_CONNECTIONS, REQUEST_COUNT, REQUEST_DURATION
from tourneyhub.core.redis_client import create_redis_client
from tourneyhub.db.base import Base
from tourneyhub.db.session import async_engine
from tourneyhub.middleware.rate_limit import RateLimitMiddleware
import tourneyhub.models  # noqa: F401  (register tables on Base.metadata)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.auto_create_schema:
        logger.info("Creating database schema")
        async with async_engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
    yield
    await async_engine.dispose()


# Create FastAPI app instance
app = FastAPI(
    title="TourneyHub API",
    description="Tournament registration with wallet-funded prize pools",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(RateLimitMiddleware, redis_client=create_redis_client())


@app.middleware("http")
async def metrics_middleware(request: Request, call_next):
    start_time = time.time()
    ACTIVE_CONNECTIONS.inc()
    status_code = 500

    try:
        response = await call_next(request)
        status_code = response.status_code
        return response
    finally:
        duration = time.time() - start_time
        ACTIVE_CONNECTIONS.dec()
        route = request.scope.get("route")
        endpoint = route.path if route is not None else request.url.path

        REQUEST_COUNT.labels(method=request.method, endpoint=endpoint, status=status_code).inc()
        REQUEST_DURATION.labels(method=request.method, endpoint=endpoint).observe(duration)


@app.exception_handler(LedgerError)
async def ledger_error_handler(request: Request, exc: LedgerError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.code}: {exc.message}")
    return error_response(exc)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{location}: {first.get('msg')}" if location else first.get("msg")
    else:
        message = None
    return error_response(InvalidInput(message))


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=500,
        content={"success": False, "message": "Internal server error", "error": "Internal"}
    )


@app.get("/metrics")
async def metrics():
    """Prometheus metrics endpoint"""
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)


# Include routers
app.include_router(health_router, prefix=settings.api_v1_prefix, tags=["health"])
app.include_router(tournaments_router, prefix=settings.api_v1_prefix, tags=["tournaments"])
app.include_router(wallet_router, prefix=settings.api_v1_prefix, tags=["wallet"])
app.include_router(players_router, prefix=settings.api_v1_prefix, tags=["players"])
app.include_router(organizers_router, prefix=settings.api_v1_prefix, tags=["organizers"])


@app.get("/")
async def root():
    """Root endpoint"""
    return {"message": settings.app_name, "version": "0.1.0"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", 8000)))
