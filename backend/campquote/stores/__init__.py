"""Persistence adapters for rules, slots and dynamic pricing configs."""

from campquote.stores.base import ConfigStore, RuleStore, SlotStore
from campquote.stores.memory import (
    InMemoryConfigStore,
    InMemoryRuleStore,
    InMemorySlotStore,
)
from campquote.stores.sql import SqlConfigStore, SqlRuleStore, SqlSlotStore

__all__ = [
    "ConfigStore",
    "InMemoryConfigStore",
    "InMemoryRuleStore",
    "InMemorySlotStore",
    "RuleStore",
    "SlotStore",
    "SqlConfigStore",
    "SqlRuleStore",
    "SqlSlotStore",
]
