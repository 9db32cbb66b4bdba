"""Database plumbing: engine construction, request sessions and the lifecycle client.

Both PostgreSQL (asyncpg) and SQLite (aiosqlite) URLs are accepted; the test
suite runs on an in-memory SQLite engine built with ``build_engine``.
"""

from collections.abc import AsyncGenerator

from sqlalchemy import event, text
from sqlalchemy.exc import DBAPIError, OperationalError, SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from newsnexus.core.config import settings
from newsnexus.utils.logging import get_logger

LOGGER = get_logger(__name__)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


def _enable_sqlite_savepoints(engine: AsyncEngine) -> None:
    """Let SQLAlchemy own BEGIN so that SAVEPOINT works on aiosqlite."""

    @event.listens_for(engine.sync_engine, "connect")
    def do_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def do_begin(conn):
        conn.exec_driver_sql("BEGIN")


def build_engine(
    url: str,
    pool_size: int = 10,
    max_overflow: int = 20,
    echo: bool = False,
) -> AsyncEngine:
    """Create an async engine for PostgreSQL (asyncpg) or SQLite (aiosqlite).

    Args:
        url: SQLAlchemy async database URL
        pool_size: Connection pool size (ignored for SQLite)
        max_overflow: Pool overflow (ignored for SQLite)
        echo: Log SQL statements

    Returns:
        AsyncEngine: Configured engine
    """
    if url.startswith("sqlite"):
        engine = create_async_engine(url, echo=echo, future=True)
        _enable_sqlite_savepoints(engine)
        return engine

    return create_async_engine(
        url,
        pool_size=pool_size,
        max_overflow=max_overflow,
        echo=echo,
        future=True,
        pool_pre_ping=True,
        # Disable prepared statement cache for PgBouncer compatibility
        connect_args={"statement_cache_size": 0},
    )


def is_transient_db_error(error: Exception) -> bool:
    """Whether a database error is a dropped/refused connection worth retrying."""
    if isinstance(error, DBAPIError) and error.connection_invalidated:
        return True
    return isinstance(error, OperationalError)


engine = build_engine(
    settings.database_url,
    pool_size=settings.database_pool_size,
    max_overflow=settings.database_max_overflow,
    echo=settings.database_echo,
)

async_session_maker = async_sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False
)


async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    """Yield one session per request; services own commit and rollback."""
    async with async_session_maker() as session:
        yield session


class DatabaseClient:
    """Owns the engine lifecycle: probing, schema bootstrap and disposal."""

    def __init__(self, engine: AsyncEngine):
        self.engine = engine
        self._connected = False

    @property
    def is_connected(self) -> bool:
        return self._connected

    async def _probe(self) -> bool:
        async with self.engine.connect() as conn:
            return await conn.scalar(text("SELECT 1")) == 1

    async def connect(self) -> None:
        """Open a connection once so misconfiguration surfaces at startup."""
        try:
            self._connected = await self._probe()
        except SQLAlchemyError:
            self._connected = False
            LOGGER.error(
                "Database unreachable",
                exc_info=True,
                extra={"dialect": self.engine.dialect.name},
            )
            raise
        LOGGER.info("Database reachable", extra={"dialect": self.engine.dialect.name})

    async def ensure_schema(self, drop_existing: bool = False) -> None:
        """Create missing news tables; with ``drop_existing`` rebuild them all."""
        from newsnexus.database import models  # noqa: F401

        async with self.engine.begin() as conn:
            if drop_existing:
                LOGGER.warning("Dropping every NewsNexus table")
                await conn.run_sync(Base.metadata.drop_all)
            await conn.run_sync(Base.metadata.create_all)

        LOGGER.info(
            "Schema verified",
            extra={"tables": len(Base.metadata.tables), "rebuilt": drop_existing},
        )

    async def dispose(self) -> None:
        await self.engine.dispose()
        self._connected = False

    async def health_check(self) -> dict:
        """Report reachability in the shape served by ``GET /health``."""
        try:
            ok = await self._probe()
        except SQLAlchemyError as e:
            self._connected = False
            LOGGER.error("Database health probe failed", extra={"error": str(e)})
            return {"status": "unhealthy", "connected": False, "error": str(e)}

        self._connected = ok
        return {
            "status": "healthy" if ok else "unhealthy",
            "connected": ok,
            "database": self.engine.dialect.name,
        }


db_client = DatabaseClient(engine)


async def init_database(auto_migrate: bool = True, drop_existing: bool = False) -> None:
    """Verify connectivity and, when ``auto_migrate`` is set, bootstrap the schema.

    Production deployments run Alembic instead and leave ``auto_migrate`` off.
    """
    await db_client.connect()
    if auto_migrate:
        await db_client.ensure_schema(drop_existing=drop_existing)


async def close_database() -> None:
    await db_client.dispose()
    LOGGER.info("Database engine disposed")
