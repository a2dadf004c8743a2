"""Main FastAPI application."""
import json
import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from adventure_api.settings import settings
from adventure_api.api.adventure import router as adventure_router
from adventure_api.domain.common.errors import ConflictError as DomainConflictError
from adventure_api.infra.cache import RedisCache, build_cache
from adventure_api.infra.db.base import Base, engine
# Import all models to ensure they're registered with Base
from adventure_api.infra.db.models import (  # noqa: F401
    UserModel,
    FriendModel,
    AdventureModel,
    AdventureParticipantModel,
    AdventurePhotoModel,
    AdventureReactionModel,
)

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup
    if not settings.uses_memory_store and engine is not None:
        try:
            async with engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        except Exception as e:
            # Database might not be ready yet; /ready reports it
            logger.warning("Could not create tables during startup: %s", e)
    else:
        logger.info("Using in-memory adventure store; data is lost on restart")

    app.state.cache = build_cache(settings)
    logger.info("Adventure list cache: %s", type(app.state.cache).__name__)

    yield

    # Shutdown
    if isinstance(app.state.cache, RedisCache):
        await app.state.cache.close()
    if engine is not None:
        await engine.dispose()


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials="*" not in settings.cors_origins,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["*"],
    max_age=3600,
)


class LoggingMiddleware(BaseHTTPMiddleware):
    """Middleware to log all requests and responses."""

    async def dispatch(self, request: Request, call_next):
        start_time = time.time()
        logger.info("[REQUEST] %s %s", request.method, request.url.path)

        if logger.isEnabledFor(logging.DEBUG):
            headers = dict(request.headers)
            auth_header = headers.get("authorization", "")
            if auth_header.startswith("Bearer "):
                token = auth_header[7:]
                headers["authorization"] = f"Bearer {token[:20]}..." if len(token) > 20 else "Bearer ***"
            if "cookie" in headers:
                headers["cookie"] = "***"
            logger.debug("   Query params: %s", dict(request.query_params))
            logger.debug("   Headers: %s", headers)

        response = await call_next(request)

        process_time = time.time() - start_time
        logger.info(
            "[RESPONSE] %s %s - %s (%.3fs)",
            request.method, request.url.path, response.status_code, process_time,
        )
        return response


# Add logging middleware AFTER CORS (CORS must be first)
app.add_middleware(LoggingMiddleware)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle validation errors with detailed logging."""
    logger.error("[VALIDATION ERROR] %s %s", request.method, request.url.path)
    body = getattr(exc, "body", None)
    if body:
        body_str = body.decode("utf-8", errors="replace") if isinstance(body, bytes) else str(body)
        logger.error("   Request body: %s", body_str[:2000])

    errors = exc.errors()
    logger.error("   Validation errors (%d):", len(errors))
    for i, error in enumerate(errors, 1):
        logger.error("   Error %d: %s", i, json.dumps(error, default=str))

    return JSONResponse(
        status_code=422,
        content={"detail": json.loads(json.dumps(errors, default=str))},
    )


@app.exception_handler(DomainConflictError)
async def domain_conflict_handler(request: Request, exc: DomainConflictError):
    """Return 409 for conflict errors."""
    return JSONResponse(
        status_code=409,
        content={"detail": exc.message},
    )


# Health check (root and under /v1 so GET /v1/health works behind a /v1 proxy prefix)
@app.get("/health")
@app.get(f"{settings.api_v1_prefix}/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "ok", "version": settings.app_version}


@app.get("/ready")
async def readiness():
    """Readiness endpoint: run all checks and return 200 if ready, 503 otherwise."""
    from adventure_api.readiness import run_all_checks_async, is_ready
    checks = await run_all_checks_async()
    ready, summary = is_ready(checks)
    if ready:
        return {"ready": True, "checks": summary}
    return JSONResponse(
        status_code=503,
        content={"ready": False, "checks": summary},
    )


# API v1 routes
app.include_router(adventure_router, prefix=settings.api_v1_prefix)
