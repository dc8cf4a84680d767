"""Narrow persistence interface used by the engine."""

from __future__ import annotations

import datetime
from typing import Protocol

from campquote.schemas.availability import AvailabilitySlot
from campquote.schemas.dynamic_pricing import DynamicPricingConfig
from campquote.schemas.pricing_rule import PricingRule


class RuleStore(Protocol):
    """Storage for organizer-authored pricing rules."""

    async def load_rules(self, camp_id: str) -> list[PricingRule]:
        """Return every rule (active or not) that lists ``camp_id``."""
        ...

    async def load_rule(self, rule_id: str) -> PricingRule | None: ...

    async def save_rule(self, rule: PricingRule) -> None: ...

    async def delete_rule(self, rule_id: str) -> bool: ...


class SlotStore(Protocol):
    """Storage for availability slots with version compare-and-swap."""

    async def load_slot(
        self, camp_id: str, date: datetime.date
    ) -> AvailabilitySlot | None: ...

    async def list_slots(
        self, camp_id: str, start: datetime.date, end: datetime.date
    ) -> list[AvailabilitySlot]: ...

    async def create_slot(self, slot: AvailabilitySlot) -> bool:
        """Insert a new slot; return False when the key already exists."""
        ...

    async def compare_and_swap_slot(
        self, expected_version: int, new_slot: AvailabilitySlot
    ) -> bool:
        """Replace the slot only if its stored version equals ``expected_version``."""
        ...


class ConfigStore(Protocol):
    """Storage for per-camp dynamic pricing configuration."""

    async def load_config(self, camp_id: str) -> DynamicPricingConfig | None: ...

    async def save_config(self, config: DynamicPricingConfig) -> None: ...
