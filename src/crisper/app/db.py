"""
Database engine module.

Manages a single shared SQLAlchemy async engine for the backend.
Other modules call `get_engine()` to obtain the engine (creating it lazily
on first use), `init_db()` to create the tables at startup and
`close_engine()` to shut it down gracefully when the application exits.
"""

import logging
from pathlib import Path
from typing import Optional

from sqlalchemy import Table
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine, create_async_engine
from sqlalchemy.pool import NullPool

from crisper.app.config import settings
from crisper.app.schema import metadata

logger = logging.getLogger(__name__)

# Module-level variable that holds the single shared engine.
# It starts as None and is created on the first call to get_engine().
_engine: Optional[AsyncEngine] = None


def _create_engine(url: str) -> AsyncEngine:
    parsed = make_url(url)

    if parsed.get_backend_name() == "sqlite":
        # Embedded store: make sure the file's directory exists and open a
        # fresh connection per use so the engine is not tied to one event loop.
        if parsed.database and parsed.database != ":memory:":
            Path(parsed.database).parent.mkdir(parents=True, exist_ok=True)
        return create_async_engine(url, poolclass=NullPool)

    # Server databases (postgresql+asyncpg) get a small connection pool
    return create_async_engine(url, pool_size=5, max_overflow=0)


def get_engine() -> AsyncEngine:
    """
    Return the shared database engine, creating it if it does not exist
    yet (lazy initialization).

    Returns:
        AsyncEngine: The active engine.
    """
    global _engine

    if _engine is None:
        _engine = _create_engine(settings.DATABASE_URL)

    return _engine


async def init_db() -> None:
    """
    Create every table that does not exist yet.
    """
    engine = get_engine()
    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all)
    logger.info(f"Database ready at {engine.url.render_as_string(hide_password=True)}")


async def close_engine() -> None:
    """
    Dispose of the shared engine and release all database connections.
    Safe to call even if the engine was never created.
    """
    global _engine
    if _engine is not None:
        await _engine.dispose()
        _engine = None


def insert_ignore(conn: AsyncConnection, table: Table):
    """
    INSERT that skips rows whose primary or unique key already exists.

    Args:
        conn:  Connection the statement will run on; picks the dialect.
        table: Target table.

    Returns:
        An insert statement; its result's ``rowcount`` is 0 when the row existed.
    """
    dialect = postgresql if conn.dialect.name == "postgresql" else sqlite
    return dialect.insert(table).on_conflict_do_nothing()
