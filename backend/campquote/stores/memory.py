"""Dict-backed stores scoped to a single engine instance."""

from __future__ import annotations

import datetime

from campquote.schemas.availability import AvailabilitySlot
from campquote.schemas.dynamic_pricing import DynamicPricingConfig
from campquote.schemas.pricing_rule import PricingRule


class InMemoryRuleStore:
    """Rules keyed by id."""

    def __init__(self) -> None:
        self._rules: dict[str, PricingRule] = {}

    async def load_rules(self, camp_id: str) -> list[PricingRule]:
        return [rule for rule in self._rules.values() if rule.applies_to(camp_id)]

    async def load_rule(self, rule_id: str) -> PricingRule | None:
        return self._rules.get(rule_id)

    async def save_rule(self, rule: PricingRule) -> None:
        self._rules[rule.id] = rule

    async def delete_rule(self, rule_id: str) -> bool:
        return self._rules.pop(rule_id, None) is not None


class InMemorySlotStore:
    """Slots keyed by (camp, date); slots are immutable so swaps are atomic."""

    def __init__(self) -> None:
        self._slots: dict[tuple[str, datetime.date], AvailabilitySlot] = {}

    async def load_slot(
        self, camp_id: str, date: datetime.date
    ) -> AvailabilitySlot | None:
        return self._slots.get((camp_id, date))

    async def list_slots(
        self, camp_id: str, start: datetime.date, end: datetime.date
    ) -> list[AvailabilitySlot]:
        slots = [
            slot
            for (slot_camp, slot_date), slot in self._slots.items()
            if slot_camp == camp_id and start <= slot_date <= end
        ]
        return sorted(slots, key=lambda slot: slot.date)

    async def create_slot(self, slot: AvailabilitySlot) -> bool:
        key = (slot.camp_id, slot.date)
        if key in self._slots:
            return False
        self._slots[key] = slot
        return True

    async def compare_and_swap_slot(
        self, expected_version: int, new_slot: AvailabilitySlot
    ) -> bool:
        key = (new_slot.camp_id, new_slot.date)
        current = self._slots.get(key)
        if current is None or current.version != expected_version:
            return False
        self._slots[key] = new_slot
        return True


class InMemoryConfigStore:
    """Dynamic pricing configs keyed by camp."""

    def __init__(self) -> None:
        self._configs: dict[str, DynamicPricingConfig] = {}

    async def load_config(self, camp_id: str) -> DynamicPricingConfig | None:
        return self._configs.get(camp_id)

    async def save_config(self, config: DynamicPricingConfig) -> None:
        self._configs[config.camp_id] = config
