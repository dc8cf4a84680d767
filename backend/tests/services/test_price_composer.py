"""Tests for sequential price composition."""

from __future__ import annotations

from decimal import Decimal

from campquote.schemas.dynamic_pricing import DynamicPricingConfig
from campquote.schemas.pricing_rule import AdjustmentDirection, AdjustmentKind, RuleType
from campquote.services import price_composer
from campquote.services.price_composer import (
    FLOORED_AT_ZERO,
    MULTIPLIER_CLAMPED,
    BreakdownEntry,
    ClampedPriceWarning,
)
from conftest import make_rule


def test_empty_rule_set_keeps_base_price() -> None:
    composed = price_composer.compose(Decimal("3000"), [])

    assert composed.final_price == Decimal("3000.00")
    assert composed.multiplier == Decimal("1")
    assert composed.breakdown == []


def test_single_percentage_increase() -> None:
    rule = make_rule("R1", value="15")

    composed = price_composer.compose(Decimal("3000"), [rule])

    assert composed.final_price == Decimal("3450.00")
    assert composed.applied_rule_ids == ["R1"]


def test_rules_compound_on_the_running_price() -> None:
    seasonal = make_rule("PR001", priority=1, value="30")
    weekend = make_rule("PR002", priority=2, value="15", rule_type=RuleType.WEEKEND)

    composed = price_composer.compose(Decimal("3000"), [seasonal, weekend])

    assert composed.final_price == Decimal("4485.00")
    entries = [item for item in composed.breakdown if isinstance(item, BreakdownEntry)]
    assert [entry.running_after for entry in entries] == [
        Decimal("3900"),
        Decimal("4485"),
    ]
    assert entries[0].signed_delta == Decimal("900")
    assert entries[1].signed_delta == Decimal("585")
    assert composed.multiplier == Decimal("1.495")


def test_stacked_discounts_are_not_summed() -> None:
    first = make_rule("D1", priority=1, value="60", direction=AdjustmentDirection.DECREASE)
    second = make_rule("D2", priority=2, value="70", direction=AdjustmentDirection.DECREASE)

    composed = price_composer.compose(Decimal("1000"), [first, second])

    assert composed.final_price == Decimal("120.00")
    assert composed.warnings == []


def test_fixed_discount_is_floored_at_zero_with_warning() -> None:
    rule = make_rule(
        "F1",
        kind=AdjustmentKind.FIXED,
        direction=AdjustmentDirection.DECREASE,
        value="150",
    )

    composed = price_composer.compose(Decimal("100"), [rule])

    assert composed.final_price == Decimal("0.00")
    entry, warning = composed.breakdown
    assert isinstance(entry, BreakdownEntry)
    assert entry.clamped_to_zero is True
    assert isinstance(warning, ClampedPriceWarning)
    assert warning.reason == FLOORED_AT_ZERO
    assert warning.rule_id == "F1"


def test_fixed_increase_adds_flat_amount() -> None:
    rule = make_rule("F2", kind=AdjustmentKind.FIXED, value="250")

    composed = price_composer.compose(Decimal("3000"), [rule])

    assert composed.final_price == Decimal("3250.00")


def test_enabled_dynamic_config_clamps_the_multiplier() -> None:
    config = DynamicPricingConfig(
        camp_id="C001",
        enabled=True,
        min_multiplier=Decimal("0.7"),
        max_multiplier=Decimal("1.2"),
    )
    rule = make_rule("R1", value="50")

    composed = price_composer.compose(Decimal("1000"), [rule], config)

    assert composed.final_price == Decimal("1200.00")
    assert composed.multiplier == Decimal("1.2")
    assert [warning.reason for warning in composed.warnings] == [MULTIPLIER_CLAMPED]


def test_lower_multiplier_bound_raises_deep_discounts() -> None:
    config = DynamicPricingConfig(camp_id="C001", enabled=True)
    rule = make_rule("R1", value="50", direction=AdjustmentDirection.DECREASE)

    composed = price_composer.compose(Decimal("1000"), [rule], config)

    assert composed.final_price == Decimal("700.00")


def test_disabled_dynamic_config_leaves_multiplier_alone() -> None:
    config = DynamicPricingConfig(
        camp_id="C001", enabled=False, max_multiplier=Decimal("1.2")
    )
    rule = make_rule("R1", value="50")

    composed = price_composer.compose(Decimal("1000"), [rule], config)

    assert composed.final_price == Decimal("1500.00")
    assert composed.warnings == []


def test_zero_base_price_has_unit_multiplier() -> None:
    composed = price_composer.compose(Decimal("0"), [make_rule("R1", value="20")])

    assert composed.final_price == Decimal("0.00")
    assert composed.multiplier == Decimal("1")


def test_final_price_rounds_half_up_to_cents() -> None:
    rule = make_rule("R1", value="12.5")

    composed = price_composer.compose(Decimal("0.20"), [rule])

    assert composed.final_price == Decimal("0.23")


def test_to_dict_serializes_money_as_strings() -> None:
    rule = make_rule("R1", value="15")

    payload = price_composer.compose(Decimal("3000"), [rule]).to_dict()

    assert payload["base_price"] == "3000.00"
    assert payload["final_price"] == "3450.00"
    assert payload["multiplier"] == "1.1500"
    assert payload["breakdown"][0] == {
        "kind": "rule",
        "rule_id": "R1",
        "rule_name": "Rule R1",
        "rule_type": "seasonal",
        "signed_delta": "450.00",
        "running_after": "3450.00",
        "clamped_to_zero": False,
    }
