"""Sequential composition of pricing rules into a final price."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from campquote.schemas.dynamic_pricing import DynamicPricingConfig
from campquote.schemas.pricing_rule import AdjustmentDirection, PricingRule

logger = logging.getLogger(__name__)

MONEY_PLACES = Decimal("0.01")
MULTIPLIER_PLACES = Decimal("0.0001")
_ZERO = Decimal("0")
_ONE = Decimal("1")
_HUNDRED = Decimal("100")

FLOORED_AT_ZERO = "floored_at_zero"
MULTIPLIER_CLAMPED = "multiplier_clamped"


def to_money(value: Decimal | float | str) -> Decimal:
    return Decimal(value).quantize(MONEY_PLACES, rounding=ROUND_HALF_UP)


def _to_str(value: Decimal, places: Decimal = MONEY_PLACES) -> str:
    return f"{value.quantize(places, rounding=ROUND_HALF_UP)}"


@dataclass(slots=True, frozen=True)
class BreakdownEntry:
    """One rule's contribution to the running price."""

    rule_id: str
    rule_name: str
    rule_type: str
    signed_delta: Decimal
    running_after: Decimal
    clamped_to_zero: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": "rule",
            "rule_id": self.rule_id,
            "rule_name": self.rule_name,
            "rule_type": self.rule_type,
            "signed_delta": _to_str(self.signed_delta),
            "running_after": _to_str(self.running_after),
            "clamped_to_zero": self.clamped_to_zero,
        }


@dataclass(slots=True, frozen=True)
class ClampedPriceWarning:
    """Informational annotation; never an error."""

    reason: str
    message: str
    rule_id: str | None = None
    running_after: Decimal | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": "warning",
            "reason": self.reason,
            "message": self.message,
            "rule_id": self.rule_id,
            "running_after": (
                _to_str(self.running_after) if self.running_after is not None else None
            ),
        }


BreakdownItem = BreakdownEntry | ClampedPriceWarning


@dataclass(slots=True)
class ComposedPrice:
    """Final price plus the ordered audit trail that produced it."""

    base_price: Decimal
    final_price: Decimal
    multiplier: Decimal
    breakdown: list[BreakdownItem] = field(default_factory=list)

    @property
    def warnings(self) -> list[ClampedPriceWarning]:
        return [item for item in self.breakdown if isinstance(item, ClampedPriceWarning)]

    @property
    def applied_rule_ids(self) -> list[str]:
        return [item.rule_id for item in self.breakdown if isinstance(item, BreakdownEntry)]

    def to_dict(self) -> dict[str, Any]:
        return {
            "base_price": _to_str(self.base_price),
            "final_price": _to_str(self.final_price),
            "multiplier": _to_str(self.multiplier, MULTIPLIER_PLACES),
            "breakdown": [item.to_dict() for item in self.breakdown],
        }


def _rule_delta(rule: PricingRule, running: Decimal) -> Decimal:
    adjustment = rule.adjustment
    if adjustment.is_percentage:
        delta = running * adjustment.value / _HUNDRED
    else:
        delta = adjustment.value
    if adjustment.direction is AdjustmentDirection.DECREASE:
        return -delta
    return delta


def compose(
    base_price: Decimal,
    ordered_rules: Iterable[PricingRule],
    dynamic_config: DynamicPricingConfig | None = None,
) -> ComposedPrice:
    """Apply ``ordered_rules`` one after another to ``base_price``.

    Each rule acts on the running price left by the previous one, so two 10%
    increases give +21%, not +20%. The running price is floored at zero after
    every step. When dynamic pricing is enabled the overall multiplier is then
    clamped into the configured bounds.
    """
    running = Decimal(base_price)
    breakdown: list[BreakdownItem] = []

    for rule in ordered_rules:
        signed_delta = _rule_delta(rule, running)
        running = max(_ZERO, running + signed_delta)
        floored = running == _ZERO and signed_delta < 0
        breakdown.append(
            BreakdownEntry(
                rule_id=rule.id,
                rule_name=rule.name,
                rule_type=rule.type.value,
                signed_delta=signed_delta,
                running_after=running,
                clamped_to_zero=floored,
            )
        )
        if floored:
            logger.warning("Rule %s floored the running price at zero", rule.id)
            breakdown.append(
                ClampedPriceWarning(
                    reason=FLOORED_AT_ZERO,
                    message=f"Rule {rule.name} would take the price below zero",
                    rule_id=rule.id,
                    running_after=running,
                )
            )

    multiplier = running / base_price if base_price else _ONE

    if dynamic_config is not None and dynamic_config.enabled:
        clamped = dynamic_config.clamp(multiplier)
        if clamped != multiplier:
            running = base_price * clamped
            logger.warning(
                "Multiplier %s clamped to %s for camp %s",
                _to_str(multiplier, MULTIPLIER_PLACES),
                clamped,
                dynamic_config.camp_id,
            )
            breakdown.append(
                ClampedPriceWarning(
                    reason=MULTIPLIER_CLAMPED,
                    message=(
                        f"Multiplier {_to_str(multiplier, MULTIPLIER_PLACES)} clamped"
                        f" to [{dynamic_config.min_multiplier},"
                        f" {dynamic_config.max_multiplier}]"
                    ),
                    running_after=running,
                )
            )
            multiplier = clamped

    return ComposedPrice(
        base_price=Decimal(base_price),
        final_price=to_money(running),
        multiplier=multiplier,
        breakdown=breakdown,
    )
