"""Organizer-facing pricing rule catalog."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import UTC, datetime
from decimal import Decimal

from campquote.core.errors import NotFoundError, ValidationError
from campquote.schemas.pricing_rule import (
    AdjustmentDirection,
    AdjustmentKind,
    PricingRule,
)
from campquote.services.event_hooks import EngineEvent, EventHooks, EventKind
from campquote.stores.base import RuleStore

logger = logging.getLogger(__name__)

_HUNDRED = Decimal("100")


def _check_range(label: str, low: int | None, high: int | None) -> None:
    for bound in (low, high):
        if bound is not None and bound < 0:
            raise ValidationError(f"{label} bounds must not be negative")
    if low is not None and high is not None and low > high:
        raise ValidationError(f"min {label} must not exceed max {label}")


def validate_rule(rule: PricingRule) -> None:
    """Raise ``ValidationError`` when the rule breaks a data-model invariant."""
    if not rule.id or not rule.id.strip():
        raise ValidationError("Rule id must not be blank")
    if not rule.name.strip():
        raise ValidationError("Rule name must not be blank")
    if not rule.applicable_camps:
        raise ValidationError("Rule must apply to at least one camp")
    if any(not camp_id.strip() for camp_id in rule.applicable_camps):
        raise ValidationError("Camp ids must not be blank")

    adjustment = rule.adjustment
    if not adjustment.value.is_finite() or adjustment.value < 0:
        raise ValidationError("Adjustment value must be a non-negative number")
    if (
        adjustment.kind is AdjustmentKind.PERCENTAGE
        and adjustment.direction is AdjustmentDirection.DECREASE
        and adjustment.value > _HUNDRED
    ):
        raise ValidationError("Percentage decrease cannot exceed 100")

    conditions = rule.conditions
    if (
        conditions.start_date is not None
        and conditions.end_date is not None
        and conditions.start_date > conditions.end_date
    ):
        raise ValidationError("Rule start date must not be after its end date")
    if conditions.days_of_week is not None:
        if not conditions.days_of_week:
            raise ValidationError("Weekday set must not be empty when provided")
        if any(day < 0 or day > 6 for day in conditions.days_of_week):
            raise ValidationError("Weekdays must be between 0 (Sunday) and 6")
    _check_range("participants", conditions.min_participants, conditions.max_participants)
    _check_range("days advance", conditions.min_days_advance, conditions.max_days_advance)
    _check_range("duration", conditions.min_duration, conditions.max_duration)
    threshold = conditions.occupancy_threshold
    if threshold is not None and not (0 <= threshold <= _HUNDRED):
        raise ValidationError("Occupancy threshold must be between 0 and 100")


def sort_rules(rules: Iterable[PricingRule]) -> list[PricingRule]:
    """Order rules by ascending priority, ties broken by ascending id."""
    return sorted(rules, key=lambda rule: rule.sort_key)


@dataclass(slots=True)
class _CacheEntry:
    rules: list[PricingRule]
    loaded_at: float


class RuleCatalog:
    """Owns pricing rules for the camps served by one engine instance."""

    def __init__(
        self,
        store: RuleStore,
        *,
        events: EventHooks | None = None,
        cache_ttl: float = 300.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._store = store
        self._events = events or EventHooks()
        self._cache_ttl = cache_ttl
        self._clock = clock
        self._cache: dict[str, _CacheEntry] = {}

    async def add(self, rule: PricingRule) -> PricingRule:
        validate_rule(rule)
        if await self._store.load_rule(rule.id) is not None:
            raise ValidationError(f"Rule {rule.id} already exists")
        now = datetime.now(UTC)
        stored = rule.model_copy(update={"created_at": now, "updated_at": now})
        await self._store.save_rule(stored)
        self.invalidate(stored.applicable_camps)
        logger.info(
            "Added pricing rule %s (%s) for camps %s",
            stored.id,
            stored.type.value,
            sorted(stored.applicable_camps),
        )
        return stored

    async def update(self, rule: PricingRule) -> PricingRule:
        validate_rule(rule)
        existing = await self._require(rule.id)
        stored = rule.model_copy(
            update={
                "created_at": existing.created_at,
                "updated_at": datetime.now(UTC),
            }
        )
        await self._store.save_rule(stored)
        self.invalidate(existing.applicable_camps | stored.applicable_camps)
        logger.info("Updated pricing rule %s", stored.id)
        if existing.active != stored.active:
            await self._emit_toggle(stored)
        return stored

    async def remove(self, rule_id: str) -> None:
        existing = await self._require(rule_id)
        await self._store.delete_rule(rule_id)
        self.invalidate(existing.applicable_camps)
        logger.info("Removed pricing rule %s", rule_id)

    async def get(self, rule_id: str) -> PricingRule:
        return await self._require(rule_id)

    async def set_active(self, rule_id: str, active: bool) -> PricingRule:
        existing = await self._require(rule_id)
        if existing.active == active:
            return existing
        return await self.update(existing.model_copy(update={"active": active}))

    async def list_for_camp(
        self, camp_id: str, *, max_age: float | None = None
    ) -> list[PricingRule]:
        """Active rules for ``camp_id`` ordered by ``(priority, id)``.

        ``max_age`` caps how long a cached listing may be reused; callers pass
        the camp's dynamic pricing cadence so demand rules stay fresh.
        """
        ttl = self._cache_ttl if max_age is None else min(self._cache_ttl, max_age)
        entry = self._cache.get(camp_id)
        now = self._clock()
        if entry is not None and now - entry.loaded_at < ttl:
            return list(entry.rules)

        rules = sort_rules(
            rule
            for rule in await self._store.load_rules(camp_id)
            if rule.active and rule.applies_to(camp_id)
        )
        if ttl > 0:
            self._cache[camp_id] = _CacheEntry(rules=rules, loaded_at=now)
        return list(rules)

    async def list_all_for_camp(self, camp_id: str) -> list[PricingRule]:
        """Every rule for the camp, active or not, for the organizer view."""
        return sort_rules(await self._store.load_rules(camp_id))

    def invalidate(self, camp_ids: Iterable[str] | None = None) -> None:
        if camp_ids is None:
            self._cache.clear()
            return
        for camp_id in camp_ids:
            self._cache.pop(camp_id, None)

    async def _require(self, rule_id: str) -> PricingRule:
        rule = await self._store.load_rule(rule_id)
        if rule is None:
            raise NotFoundError(f"Pricing rule {rule_id} not found")
        return rule

    async def _emit_toggle(self, rule: PricingRule) -> None:
        kind = EventKind.RULE_ACTIVATED if rule.active else EventKind.RULE_DEACTIVATED
        logger.info("Pricing rule %s %s", rule.id, "activated" if rule.active else "deactivated")
        for camp_id in sorted(rule.applicable_camps):
            await self._events.emit(
                EngineEvent(
                    kind=kind,
                    camp_id=camp_id,
                    rule_id=rule.id,
                    payload={"name": rule.name, "type": rule.type.value},
                )
            )
