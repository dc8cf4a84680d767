"""Test fixtures for the camp quote engine."""
from __future__ import annotations

import datetime
import os
from collections.abc import AsyncIterator
from decimal import Decimal

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./test.db")

from campquote.core.config import get_settings
from campquote.db.base import Base
from campquote.db.session import dispose_engine, get_sessionmaker
from campquote.main import app
from campquote.models import *  # noqa: F401,F403
from campquote.schemas.pricing_rule import (
    AdjustmentDirection,
    AdjustmentKind,
    PricingRule,
    RuleAdjustment,
    RuleConditions,
    RuleType,
)
from campquote.services.engine import PricingEngine, build_memory_engine, build_sql_engine

AS_OF = datetime.date(2024, 11, 1)
SATURDAY = datetime.date(2024, 12, 21)
MONDAY = datetime.date(2024, 12, 16)


def make_rule(
    rule_id: str,
    *,
    priority: int = 0,
    kind: AdjustmentKind = AdjustmentKind.PERCENTAGE,
    direction: AdjustmentDirection = AdjustmentDirection.INCREASE,
    value: str = "10",
    camps: tuple[str, ...] = ("C001",),
    rule_type: RuleType = RuleType.SEASONAL,
    active: bool = True,
    **conditions: object,
) -> PricingRule:
    """Build a rule with sensible defaults for tests."""
    return PricingRule(
        id=rule_id,
        name=f"Rule {rule_id}",
        type=rule_type,
        priority=priority,
        active=active,
        conditions=RuleConditions(**conditions),
        adjustment=RuleAdjustment(kind=kind, direction=direction, value=Decimal(value)),
        applicable_camps=frozenset(camps),
    )


@pytest.fixture(scope="session")
def db_url(tmp_path_factory: pytest.TempPathFactory) -> str:
    """Provide a temporary SQLite database URL for the test session."""
    db_path = tmp_path_factory.mktemp("db") / "test.db"
    return f"sqlite+aiosqlite:///{db_path}"


@pytest_asyncio.fixture()
async def reset_database(db_url: str) -> AsyncIterator[None]:
    """Drop and recreate the database schema for an isolated test."""
    os.environ["DATABASE_URL"] = db_url
    get_settings.cache_clear()
    get_settings()

    await dispose_engine(db_url)
    engine = create_async_engine(db_url, future=True)
    async with engine.begin() as connection:
        await connection.run_sync(Base.metadata.drop_all)
        await connection.run_sync(Base.metadata.create_all)
    await engine.dispose()
    yield
    await dispose_engine(db_url)


@pytest.fixture()
def memory_engine() -> PricingEngine:
    """Engine over fresh in-memory stores."""
    return build_memory_engine(get_settings())


@pytest_asyncio.fixture()
async def sql_engine(reset_database: None, db_url: str) -> PricingEngine:
    """Engine persisting to the per-test SQLite database."""
    return build_sql_engine(get_sessionmaker(db_url), get_settings())


@pytest_asyncio.fixture()
async def app_context(sql_engine: PricingEngine) -> AsyncIterator[dict[str, object]]:
    """Yield an async client wired to a SQL-backed engine."""
    app.state.engine = sql_engine
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield {"client": client, "engine": sql_engine}
    app.state.engine = None
