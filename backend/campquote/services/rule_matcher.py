"""Select the pricing rules that apply to a booking."""

from __future__ import annotations

from collections.abc import Iterable
from decimal import Decimal

from campquote.schemas.availability import AvailabilitySlot
from campquote.schemas.pricing_rule import PricingRule, RuleConditions
from campquote.schemas.quote import BookingContext
from campquote.services.rule_catalog import sort_rules
from campquote.services.surge_evaluator import SurgeEvaluator

_HUNDRED = Decimal("100")


def _within(value: int, low: int | None, high: int | None) -> bool:
    if low is not None and value < low:
        return False
    if high is not None and value > high:
        return False
    return True


def conditions_match(
    conditions: RuleConditions,
    context: BookingContext,
    occupancy_percent: Decimal | None,
) -> bool:
    """Return True when every condition dimension that is set matches."""
    if conditions.start_date is not None and context.date < conditions.start_date:
        return False
    if conditions.end_date is not None and context.date > conditions.end_date:
        return False
    if (
        conditions.days_of_week is not None
        and context.weekday not in conditions.days_of_week
    ):
        return False
    if not _within(
        context.participant_count,
        conditions.min_participants,
        conditions.max_participants,
    ):
        return False
    if not _within(
        context.advance_days,
        conditions.min_days_advance,
        conditions.max_days_advance,
    ):
        return False
    if not _within(
        context.duration_days, conditions.min_duration, conditions.max_duration
    ):
        return False
    if conditions.occupancy_threshold is not None:
        if occupancy_percent is None:
            return False
        if occupancy_percent < conditions.occupancy_threshold:
            return False
    return True


class RuleMatcher:
    """Filter catalog listings down to the rules a booking triggers."""

    def __init__(self, surge: SurgeEvaluator) -> None:
        self._surge = surge

    def matches(
        self,
        rule: PricingRule,
        context: BookingContext,
        occupancy_percent: Decimal | None,
    ) -> bool:
        if not rule.active or not rule.applies_to(context.camp_id):
            return False
        return conditions_match(rule.conditions, context, occupancy_percent)

    async def select(
        self,
        context: BookingContext,
        rules: Iterable[PricingRule],
        *,
        snapshot: AvailabilitySlot | None = None,
        max_age: float | None = None,
    ) -> list[PricingRule]:
        """Return matching rules ordered by ``(priority, id)``.

        Occupancy is only looked up when a candidate rule has a threshold.
        """
        candidates = [
            rule
            for rule in rules
            if rule.active and rule.applies_to(context.camp_id)
        ]
        occupancy_percent: Decimal | None = None
        if any(rule.conditions.needs_occupancy for rule in candidates):
            ratio = await self._surge.occupancy_ratio(
                context.camp_id, context.date, snapshot=snapshot, max_age=max_age
            )
            occupancy_percent = ratio * _HUNDRED
        return sort_rules(
            rule
            for rule in candidates
            if conditions_match(rule.conditions, context, occupancy_percent)
        )
