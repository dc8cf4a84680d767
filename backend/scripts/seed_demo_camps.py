"""Seed demo camps with open dates and the standard pricing rules."""

from __future__ import annotations

import asyncio
from datetime import date, timedelta
from decimal import Decimal

from campquote.core.config import get_settings
from campquote.core.errors import ValidationError
from campquote.db.session import create_schema, dispose_engine, get_sessionmaker
from campquote.schemas.pricing_rule import (
    AdjustmentDirection,
    AdjustmentKind,
    PricingRule,
    RuleAdjustment,
    RuleConditions,
    RuleType,
)
from campquote.services.engine import build_sql_engine

DEMO_CAMPS = ("C001", "C002", "C003")
DEMO_BASE_PRICE = Decimal("3000")
DEMO_CAPACITY = 20
DEMO_DAYS = 90


def _percent(direction: AdjustmentDirection, value: str) -> RuleAdjustment:
    return RuleAdjustment(
        kind=AdjustmentKind.PERCENTAGE, direction=direction, value=Decimal(value)
    )


def demo_rules(today: date | None = None) -> list[PricingRule]:
    """Standard rule set offered to new organizers."""
    today = today or date.today()
    season_start = date(today.year, 12, 15)
    return [
        PricingRule(
            id="PR001",
            name="Winter Holiday Premium",
            description="Higher prices during the winter holiday season",
            type=RuleType.SEASONAL,
            priority=1,
            conditions=RuleConditions(
                start_date=season_start,
                end_date=date(today.year + 1, 1, 15),
            ),
            adjustment=_percent(AdjustmentDirection.INCREASE, "30"),
            applicable_camps=frozenset({"C001", "C002"}),
        ),
        PricingRule(
            id="PR002",
            name="Weekend Premium",
            description="Premium pricing for Friday and Saturday nights",
            type=RuleType.WEEKEND,
            priority=2,
            conditions=RuleConditions(days_of_week=frozenset({5, 6})),
            adjustment=_percent(AdjustmentDirection.INCREASE, "15"),
            applicable_camps=frozenset(DEMO_CAMPS),
        ),
        PricingRule(
            id="PR003",
            name="Early Bird Discount",
            description="Discount for bookings made 30+ days in advance",
            type=RuleType.EARLY_BIRD,
            priority=3,
            conditions=RuleConditions(min_days_advance=30),
            adjustment=_percent(AdjustmentDirection.DECREASE, "10"),
            applicable_camps=frozenset({"C001", "C002"}),
        ),
        PricingRule(
            id="PR004",
            name="Group Discount",
            description="Discount for groups of 10 or more",
            type=RuleType.GROUP_SIZE,
            priority=4,
            conditions=RuleConditions(min_participants=10),
            adjustment=_percent(AdjustmentDirection.DECREASE, "15"),
            applicable_camps=frozenset({"C001", "C003"}),
        ),
        PricingRule(
            id="PR005",
            name="High Demand Surge",
            description="Price increase when occupancy is above 80%",
            type=RuleType.DEMAND,
            priority=5,
            conditions=RuleConditions(occupancy_threshold=Decimal("80")),
            adjustment=_percent(AdjustmentDirection.INCREASE, "20"),
            applicable_camps=frozenset(DEMO_CAMPS),
        ),
    ]


async def seed_demo_camps() -> None:
    settings = get_settings()
    if settings.database_url.startswith("sqlite"):
        await create_schema(settings.database_url)
    engine = build_sql_engine(get_sessionmaker(settings.database_url), settings)

    rules_created = 0
    for rule in demo_rules():
        try:
            await engine.catalog.add(rule)
        except ValidationError:
            continue
        rules_created += 1

    slots_created = 0
    today = date.today()
    for camp_id in DEMO_CAMPS:
        for offset in range(DEMO_DAYS):
            try:
                await engine.ledger.open_slot(
                    camp_id,
                    today + timedelta(days=offset),
                    capacity=DEMO_CAPACITY,
                    base_price=DEMO_BASE_PRICE,
                )
            except ValidationError:
                continue
            slots_created += 1

    await dispose_engine(settings.database_url)
    print(
        f"Seeded {rules_created} pricing rule(s) and {slots_created} slot(s)"
        f" across {len(DEMO_CAMPS)} camp(s)."
    )


if __name__ == "__main__":
    asyncio.run(seed_demo_camps())
