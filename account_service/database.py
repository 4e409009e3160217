"""
Async engine and session factory for the account store.

Sessions never autocommit: the repository flushes and the request's
unit of work commits or rolls back.
"""

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from account_service.config import get_settings


def _sqlite_pragmas(dbapi_conn, connection_record):
    # WAL lets profile reads proceed while a registration holds the write lock
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA busy_timeout=5000")
    cursor.close()


def create_engine_for(database_url: str, echo: bool = False) -> AsyncEngine:
    """
    Build the async engine for ``database_url``.

    Bound parameters are hidden from SQL error messages and echo output,
    since UPDATE statements carry password hashes.
    """
    if database_url.startswith("sqlite"):
        # A pooled aiosqlite connection would pin one writer; a connection
        # per session lets concurrent requests wait on busy_timeout instead.
        sqlite_engine = create_async_engine(
            database_url,
            echo=echo,
            hide_parameters=True,
            connect_args={"check_same_thread": False},
            poolclass=NullPool,
        )
        event.listen(sqlite_engine.sync_engine, "connect", _sqlite_pragmas)
        return sqlite_engine

    return create_async_engine(
        database_url,
        echo=echo,
        hide_parameters=True,
        pool_pre_ping=True,
        pool_size=5,
        max_overflow=10,
    )


settings = get_settings()
engine = create_engine_for(settings.database_url, echo=settings.debug)

async_session_maker = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


async def init_db() -> None:
    """Create the users table if it does not exist."""
    from account_service.kernel.models import Base

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    await engine.dispose()
