"""Service layer exports."""
from campquote.services import (
    availability_ledger,
    price_composer,
    quote_service,
    rule_catalog,
    rule_matcher,
    surge_evaluator,
)
from campquote.services.engine import (
    PricingEngine,
    build_engine,
    build_memory_engine,
    build_sql_engine,
)

__all__ = [
    "PricingEngine",
    "availability_ledger",
    "build_engine",
    "build_memory_engine",
    "build_sql_engine",
    "price_composer",
    "quote_service",
    "rule_catalog",
    "rule_matcher",
    "surge_evaluator",
]
