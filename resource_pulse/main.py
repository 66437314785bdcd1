"""
ResourcePulse Backend - FastAPI Application Factory
===================================================

What:  Creates and configures the FastAPI application instance.
How:   `create_app()` wires middleware, exception handlers and routers;
       the module-level `app` is what uvicorn serves
       (`uvicorn resource_pulse.main:app`).

Lifecycle:
    Startup:
    1. Configure logging
    2. Validate security-sensitive settings (logged, not fatal)
    3. Wait for the database (tenacity retry with backoff)
    4. Seed missing system settings

    Shutdown:
    1. Dispose the database engine (close pooled connections)

Error responses all share one shape:
    {"error": "<code>", "message": "...", "details": {...}, "request_id": "..."}
`details` is only included for 4xx errors.
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from resource_pulse import __version__
from resource_pulse.config import settings
from resource_pulse.database import async_session_factory, dispose_engine, wait_for_database
from resource_pulse.exceptions import DatabaseError, RateLimitExceededError, ResourcePulseError
from resource_pulse.middleware.audit import AuditMiddleware
from resource_pulse.middleware.logging import RequestLoggingMiddleware
from resource_pulse.middleware.rate_limit import RateLimitMiddleware
from resource_pulse.middleware.request_id import RequestIDMiddleware, request_id_var
from resource_pulse.routes import ROUTERS
from resource_pulse.services.settings_service import settings_service

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configures the root logger once, writing to stdout.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Per-request chatter from these is either duplicated by our access log
    # or too verbose to be useful.
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    setup_logging()
    logger.info("ResourcePulse backend %s starting up", __version__)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        # Keep serving: local development runs on the defaults.
        logger.error("Configuration error: %s", e)

    await wait_for_database()

    try:
        async with async_session_factory() as session:
            await settings_service.seed_defaults(session)
            await session.commit()
    except DatabaseError as e:
        logger.error("Could not seed system settings (are migrations applied?): %s", e.context)

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)

    yield

    logger.info("ResourcePulse backend shutting down")
    await dispose_engine()
    logger.info("Shutdown complete")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _request_id(request: Request) -> Optional[str]:
    return request_id_var.get("") or getattr(request.state, "request_id", None)


def register_exception_handlers(app: FastAPI) -> None:
    """
    Maps application exceptions to JSON error responses.

        ResourcePulseError subclasses -> their own status_code / error_code
        anything else                 -> 500 with a generic message

    Stack traces and driver errors are logged, never returned.
    """

    @app.exception_handler(ResourcePulseError)
    async def handle_app_error(request: Request, exc: ResourcePulseError):
        rid = _request_id(request)
        content = {"error": exc.error_code, "message": exc.message, "request_id": rid}
        if exc.status_code < 500:
            logger.warning("[%s] %s: %s", rid, exc.error_code, exc.message)
            if exc.context:
                content["details"] = exc.context
        else:
            logger.error("[%s] %s: %s | context: %s", rid, exc.error_code, exc.message, exc.context)

        headers = {}
        if isinstance(exc, RateLimitExceededError):
            headers["Retry-After"] = str(exc.retry_after)
        return JSONResponse(status_code=exc.status_code, content=content, headers=headers)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = _request_id(request)
        logger.error("[%s] Unexpected error: %s", rid, exc, exc_info=True)
        return JSONResponse(
            status_code=500,
            content={
                "error": "internal_server_error",
                "message": "An unexpected error occurred. Please try again or contact support.",
                "request_id": rid,
            },
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    app = FastAPI(
        title="ResourcePulse API",
        description=(
            "Resource and project management: projects, resources, allocations, "
            "staffing requests, milestones, RAID logs and an audit trail."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # Last added runs first. Resulting order:
    # RateLimit -> RequestID -> Logging -> GZip -> CORS -> Audit -> routes
    app.add_middleware(AuditMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "Retry-After"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(RateLimitMiddleware)

    register_exception_handlers(app)

    for router in ROUTERS:
        app.include_router(router)

    return app


app = create_app()
