"""Async engine and sessionmaker per database URL.

Stores receive the sessionmaker and open one short session per operation,
so there is no request-scoped session dependency here.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import event
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from campquote.core.config import get_settings
from campquote.db.base import Base

SQLITE_BUSY_TIMEOUT_MS = 5000

_engines: dict[str, tuple[AsyncEngine, async_sessionmaker[AsyncSession]]] = {}


def _resolve_database_url(override: str | None = None) -> str:
    return override or get_settings().database_url


def _configure_sqlite(dbapi_connection: Any, connection_record: Any) -> None:
    # Rule-to-camp links rely on ON DELETE CASCADE; slot swaps wait on writers.
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys = ON")
    cursor.execute(f"PRAGMA busy_timeout = {SQLITE_BUSY_TIMEOUT_MS}")
    cursor.close()


def _connect(url: str) -> tuple[AsyncEngine, async_sessionmaker[AsyncSession]]:
    entry = _engines.get(url)
    if entry is None:
        engine = create_async_engine(url, echo=False, future=True)
        if make_url(url).get_backend_name() == "sqlite":
            event.listen(engine.sync_engine, "connect", _configure_sqlite)
        sessionmaker = async_sessionmaker(
            engine, expire_on_commit=False, class_=AsyncSession
        )
        entry = _engines[url] = (engine, sessionmaker)
    return entry


def get_engine(database_url: str | None = None) -> AsyncEngine:
    return _connect(_resolve_database_url(database_url))[0]


def get_sessionmaker(
    database_url: str | None = None,
) -> async_sessionmaker[AsyncSession]:
    """Return (and cache) the sessionmaker the SQL stores share for a URL."""
    return _connect(_resolve_database_url(database_url))[1]


async def create_schema(database_url: str | None = None) -> None:
    """Create missing tables for sqlite and dev databases that skip Alembic."""
    import campquote.models  # noqa: F401

    async with get_engine(database_url).begin() as connection:
        await connection.run_sync(Base.metadata.create_all)


async def dispose_engine(database_url: str | None = None) -> None:
    entry = _engines.pop(_resolve_database_url(database_url), None)
    if entry is not None:
        await entry[0].dispose()
