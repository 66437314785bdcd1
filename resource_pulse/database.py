"""
ResourcePulse Backend - Database Session Management
===================================================

What:  Async SQLAlchemy engine, session factory, declarative base and
       the FastAPI session dependency.
How:   Creates an async engine with connection pooling, provides a session
       dependency that commits on success and rolls back on error.
Who:   Route handlers (via Depends), the audit middleware, the lifespan hook.
When:  Engine is created at module import; sessions are created per-request.

Connection Pooling Strategy:
    pool_size=20:      Persistent connections for normal load
    max_overflow=10:   Temporary connections for traffic spikes (total max = 30)
    pool_pre_ping:     Validates connections before use
    pool_recycle=3600: Recycles connections every hour

    SQLite (tests, local experiments) gets no pool options: aiosqlite uses
    its own pool class which rejects pool_size/max_overflow.
"""

import logging
from typing import Any, AsyncGenerator, Dict

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from resource_pulse.config import settings

logger = logging.getLogger(__name__)


def _engine_options(url: str) -> Dict[str, Any]:
    """Pool options for server databases; SQLite takes none of them."""
    options: Dict[str, Any] = {"echo": settings.log_level == "DEBUG"}
    if url.startswith("sqlite"):
        return options
    options.update(
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_pre_ping=settings.db_pool_pre_ping,
        pool_recycle=3600,
    )
    return options


# ── Engine Configuration ──────────────────────────────────────────────────
engine: AsyncEngine = create_async_engine(
    settings.database_url,
    **_engine_options(settings.database_url),
)

# ── Session Factory ───────────────────────────────────────────────────────
# expire_on_commit=False: attributes stay readable after commit, so response
# models can be built from ORM objects once the transaction has finished.
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


# ── Base Model ────────────────────────────────────────────────────────────
class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Every model registers with `Base.metadata`, which Alembic reads for
    autogenerate and the test suite uses for `create_all`.
    """
    pass


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Creates a new session from the factory
        2. Yields it to the route handler
        3. On success: commits the transaction
        4. On error: rolls back and re-raises for the global error handlers
        5. Always: closes the session (returns connection to pool)

    Example usage in a route:
        @router.get("/projects")
        async def list_projects(db: AsyncSession = Depends(get_db_session)):
            return await project_service.list_projects(db)
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


# ── Lifecycle Helpers ─────────────────────────────────────────────────────
async def check_database(db_engine: AsyncEngine = engine) -> None:
    """Runs `SELECT 1`; raises whatever the driver raises on failure."""
    async with db_engine.connect() as conn:
        await conn.execute(text("SELECT 1"))


async def wait_for_database(db_engine: AsyncEngine = engine) -> None:
    """
    Block startup until the database answers, with exponential backoff.

    What:  Retries `check_database` up to `db_connect_retries` times.
    When:  Called once from the lifespan hook, before settings are seeded.
    Raises: The last connection error once attempts are exhausted.
    """
    async for attempt in AsyncRetrying(
        stop=stop_after_attempt(settings.db_connect_retries),
        wait=wait_exponential(multiplier=settings.db_connect_backoff, max=30),
        retry=retry_if_exception_type(Exception),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    ):
        with attempt:
            await check_database(db_engine)
    logger.info("Database connection verified")


async def dispose_engine() -> None:
    """Gracefully closes all connections in the pool (shutdown)."""
    await engine.dispose()
