"""Wire the engine components together for one tenant or process."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from campquote.core.config import Settings, get_settings
from campquote.schemas.dynamic_pricing import UpdateFrequency
from campquote.services.availability_ledger import AvailabilityLedger
from campquote.services.event_hooks import EventHooks
from campquote.services.quote_service import QuoteService
from campquote.services.rule_catalog import RuleCatalog
from campquote.services.rule_matcher import RuleMatcher
from campquote.services.surge_evaluator import SurgeEvaluator
from campquote.stores.base import ConfigStore, RuleStore, SlotStore
from campquote.stores.memory import (
    InMemoryConfigStore,
    InMemoryRuleStore,
    InMemorySlotStore,
)
from campquote.stores.sql import SqlConfigStore, SqlRuleStore, SqlSlotStore


@dataclass(slots=True)
class PricingEngine:
    """Component graph sharing one set of stores, locks and event hooks."""

    events: EventHooks
    catalog: RuleCatalog
    ledger: AvailabilityLedger
    surge: SurgeEvaluator
    matcher: RuleMatcher
    quotes: QuoteService


def build_engine(
    *,
    rules: RuleStore,
    slots: SlotStore,
    configs: ConfigStore,
    settings: Settings | None = None,
    events: EventHooks | None = None,
) -> PricingEngine:
    settings = settings or get_settings()
    events = events or EventHooks()
    catalog = RuleCatalog(
        rules, events=events, cache_ttl=settings.rule_cache_ttl_seconds
    )
    ledger = AvailabilityLedger(
        slots, events=events, lock_timeout=settings.lock_timeout_seconds
    )
    surge = SurgeEvaluator(ledger)
    matcher = RuleMatcher(surge)
    quotes = QuoteService(
        catalog=catalog,
        ledger=ledger,
        matcher=matcher,
        configs=configs,
        max_attempts=settings.reserve_max_attempts,
        retry_backoff=settings.reserve_retry_backoff_seconds,
        default_min_multiplier=Decimal(str(settings.default_min_multiplier)),
        default_max_multiplier=Decimal(str(settings.default_max_multiplier)),
        default_update_frequency=UpdateFrequency(settings.default_update_frequency),
    )
    return PricingEngine(
        events=events,
        catalog=catalog,
        ledger=ledger,
        surge=surge,
        matcher=matcher,
        quotes=quotes,
    )


def build_memory_engine(settings: Settings | None = None) -> PricingEngine:
    """Engine over fresh in-memory stores."""
    return build_engine(
        rules=InMemoryRuleStore(),
        slots=InMemorySlotStore(),
        configs=InMemoryConfigStore(),
        settings=settings,
    )


def build_sql_engine(
    sessionmaker: async_sessionmaker[AsyncSession],
    settings: Settings | None = None,
) -> PricingEngine:
    """Engine persisting through SQLAlchemy async sessions."""
    return build_engine(
        rules=SqlRuleStore(sessionmaker),
        slots=SqlSlotStore(sessionmaker),
        configs=SqlConfigStore(sessionmaker),
        settings=settings,
    )
