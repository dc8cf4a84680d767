"""Tests for quoting and reserving at the quoted price."""

from __future__ import annotations

import asyncio
import datetime
from decimal import Decimal

import pytest

from campquote.core.config import Settings, get_settings
from campquote.core.errors import (
    CapacityExceededError,
    LockTimeoutError,
    NotFoundError,
    SlotBlockedError,
    TransientReservationError,
    ValidationError,
)
from campquote.schemas.availability import AvailabilitySlot
from campquote.schemas.dynamic_pricing import DynamicPricingConfig, UpdateFrequency
from campquote.schemas.pricing_rule import (
    AdjustmentDirection,
    AdjustmentKind,
    PricingRule,
    RuleType,
)
from campquote.schemas.quote import BookingContext
from campquote.services.engine import PricingEngine, build_engine
from campquote.services.event_hooks import EngineEvent, EventHooks
from campquote.services.quote_service import Reservation
from campquote.stores.memory import (
    InMemoryConfigStore,
    InMemoryRuleStore,
    InMemorySlotStore,
)
from conftest import AS_OF, MONDAY, SATURDAY, make_rule

pytestmark = pytest.mark.asyncio


class _ConflictingSlotStore(InMemorySlotStore):
    """Fails the first ``conflicts`` swaps as if another writer got there first."""

    def __init__(self, conflicts: int) -> None:
        super().__init__()
        self.conflicts = conflicts
        self.swaps = 0

    async def compare_and_swap_slot(
        self, expected_version: int, new_slot: AvailabilitySlot
    ) -> bool:
        self.swaps += 1
        if self.conflicts > 0:
            self.conflicts -= 1
            return False
        return await super().compare_and_swap_slot(expected_version, new_slot)


def _no_backoff() -> Settings:
    return get_settings().model_copy(update={"reserve_retry_backoff_seconds": 0.0})


def _context(**overrides: object) -> BookingContext:
    data: dict[str, object] = {"camp_id": "C001", "date": SATURDAY, "as_of": AS_OF}
    data.update(overrides)
    return BookingContext(**data)


async def _seed_demo(engine: PricingEngine, *, capacity: int = 20) -> None:
    await engine.catalog.add(
        make_rule(
            "PR001",
            priority=1,
            value="30",
            start_date=datetime.date(2024, 12, 15),
            end_date=datetime.date(2025, 1, 15),
            camps=("C001", "C002"),
        )
    )
    await engine.catalog.add(
        make_rule(
            "PR002",
            priority=2,
            value="15",
            rule_type=RuleType.WEEKEND,
            days_of_week=frozenset({5, 6}),
            camps=("C001", "C002", "C003"),
        )
    )
    await engine.ledger.open_slot(
        "C001", SATURDAY, capacity=capacity, base_price=Decimal("3000")
    )


async def test_quote_composes_matching_rules(memory_engine: PricingEngine) -> None:
    await _seed_demo(memory_engine)

    quote = await memory_engine.quotes.get_quote(_context())

    assert quote.final_price == Decimal("4485.00")
    assert quote.available is True
    assert quote.remaining_capacity == 20
    assert [item.rule_id for item in quote.breakdown] == ["PR001", "PR002"]


async def test_quote_is_free_of_side_effects(memory_engine: PricingEngine) -> None:
    await _seed_demo(memory_engine)

    first = await memory_engine.quotes.get_quote(_context())
    second = await memory_engine.quotes.get_quote(_context())

    assert first.to_dict() == second.to_dict()
    assert (await memory_engine.ledger.load("C001", SATURDAY)).booked == 0


async def test_quote_reports_unavailable_when_request_exceeds_capacity(
    memory_engine: PricingEngine,
) -> None:
    await _seed_demo(memory_engine, capacity=5)

    quote = await memory_engine.quotes.get_quote(
        _context(participant_count=6)
    )

    assert quote.available is False
    assert quote.remaining_capacity == 5


async def test_quote_on_missing_slot_raises_not_found(memory_engine: PricingEngine) -> None:
    with pytest.raises(NotFoundError):
        await memory_engine.quotes.get_quote(_context(date=MONDAY))


async def test_quote_on_blocked_slot_is_rejected(memory_engine: PricingEngine) -> None:
    await _seed_demo(memory_engine)
    await memory_engine.ledger.block("C001", SATURDAY)

    with pytest.raises(SlotBlockedError):
        await memory_engine.quotes.get_quote(_context())
    with pytest.raises(SlotBlockedError):
        await memory_engine.quotes.reserve_and_quote(_context())


async def test_malformed_context_is_rejected(memory_engine: PricingEngine) -> None:
    await _seed_demo(memory_engine)

    with pytest.raises(ValidationError):
        await memory_engine.quotes.get_quote(_context(participant_count=0))
    with pytest.raises(ValidationError):
        await memory_engine.quotes.get_quote(
            _context(end_date=SATURDAY - datetime.timedelta(days=1))
        )


async def test_reserve_charges_the_quoted_price(memory_engine: PricingEngine) -> None:
    await _seed_demo(memory_engine)

    reservation = await memory_engine.quotes.reserve_and_quote(
        _context(participant_count=2)
    )

    assert reservation.charged_price == Decimal("4485.00")
    assert reservation.reserved_count == 2
    assert reservation.quote.remaining_capacity == 18
    slot = await memory_engine.ledger.load("C001", SATURDAY)
    assert slot.booked == 2
    assert slot.version == reservation.slot_version


async def test_requested_count_overrides_participants(memory_engine: PricingEngine) -> None:
    await _seed_demo(memory_engine)

    reservation = await memory_engine.quotes.reserve_and_quote(
        _context(participant_count=12, requested_count=1)
    )

    assert reservation.reserved_count == 1
    assert (await memory_engine.ledger.load("C001", SATURDAY)).booked == 1


async def test_reserve_prices_demand_against_the_locked_snapshot(
    memory_engine: PricingEngine,
) -> None:
    await memory_engine.catalog.add(
        make_rule("PR005", priority=5, value="20", occupancy_threshold=Decimal("80"))
    )
    await memory_engine.ledger.open_slot(
        "C001", SATURDAY, capacity=20, base_price=Decimal("3000")
    )
    await memory_engine.ledger.reserve("C001", SATURDAY, 15)

    below = await memory_engine.quotes.reserve_and_quote(_context())
    above = await memory_engine.quotes.reserve_and_quote(_context())

    assert below.charged_price == Decimal("3000.00")
    assert above.charged_price == Decimal("3600.00")


async def test_full_slot_rejects_reservation(memory_engine: PricingEngine) -> None:
    await _seed_demo(memory_engine, capacity=1)
    await memory_engine.quotes.reserve_and_quote(_context())

    with pytest.raises(CapacityExceededError):
        await memory_engine.quotes.reserve_and_quote(_context())
    assert (await memory_engine.ledger.load("C001", SATURDAY)).booked == 1


async def test_concurrent_reservations_never_oversell(memory_engine: PricingEngine) -> None:
    await _seed_demo(memory_engine, capacity=3)

    results = await asyncio.gather(
        *(memory_engine.quotes.reserve_and_quote(_context()) for _ in range(5)),
        return_exceptions=True,
    )

    booked = [result for result in results if not isinstance(result, Exception)]
    rejected = [result for result in results if isinstance(result, CapacityExceededError)]
    assert len(booked) == 3
    assert len(rejected) == 2
    assert (await memory_engine.ledger.load("C001", SATURDAY)).booked == 3


async def test_conflicts_are_retried() -> None:
    slots = _ConflictingSlotStore(conflicts=2)
    engine = build_engine(
        rules=InMemoryRuleStore(),
        slots=slots,
        configs=InMemoryConfigStore(),
        settings=_no_backoff(),
    )
    await _seed_demo(engine)

    reservation = await engine.quotes.reserve_and_quote(_context())

    assert reservation.charged_price == Decimal("4485.00")
    assert slots.swaps == 3
    assert (await engine.ledger.load("C001", SATURDAY)).booked == 1


async def test_persistent_conflicts_surface_a_transient_error() -> None:
    slots = _ConflictingSlotStore(conflicts=10)
    engine = build_engine(
        rules=InMemoryRuleStore(),
        slots=slots,
        configs=InMemoryConfigStore(),
        settings=_no_backoff(),
    )
    await _seed_demo(engine)

    with pytest.raises(TransientReservationError) as excinfo:
        await engine.quotes.reserve_and_quote(_context())

    assert excinfo.value.attempts == 3
    assert (await engine.ledger.load("C001", SATURDAY)).booked == 0


async def test_release_returns_units(memory_engine: PricingEngine) -> None:
    await _seed_demo(memory_engine)
    await memory_engine.quotes.reserve_and_quote(_context(participant_count=4))

    slot = await memory_engine.quotes.release("C001", SATURDAY, 3)

    assert slot.booked == 1


async def test_dynamic_config_defaults_to_disabled(memory_engine: PricingEngine) -> None:
    config = await memory_engine.quotes.get_dynamic_config("C009")

    assert config.enabled is False
    assert config.min_multiplier == Decimal("0.7")
    assert config.max_multiplier == Decimal("2.0")
    assert config.update_frequency is UpdateFrequency.DAILY


async def test_enabled_dynamic_config_bounds_the_quote(memory_engine: PricingEngine) -> None:
    await _seed_demo(memory_engine)
    await memory_engine.quotes.set_dynamic_config(
        DynamicPricingConfig(
            camp_id="C001",
            enabled=True,
            min_multiplier=Decimal("0.8"),
            max_multiplier=Decimal("1.25"),
        )
    )

    quote = await memory_engine.quotes.get_quote(_context())

    assert quote.final_price == Decimal("3750.00")
    assert quote.multiplier == Decimal("1.25")


async def test_price_calendar_covers_opened_dates(memory_engine: PricingEngine) -> None:
    await _seed_demo(memory_engine)
    await memory_engine.ledger.open_slot(
        "C001", MONDAY, capacity=20, base_price=Decimal("3000")
    )
    friday = SATURDAY - datetime.timedelta(days=1)
    await memory_engine.ledger.open_slot(
        "C001", friday, capacity=20, base_price=Decimal("3000")
    )
    await memory_engine.ledger.block("C001", friday)
    await memory_engine.catalog.add(
        make_rule(
            "PR003",
            priority=3,
            value="10",
            direction=AdjustmentDirection.DECREASE,
            min_days_advance=30,
        )
    )

    days = await memory_engine.quotes.price_calendar(
        "C001", MONDAY, SATURDAY, as_of=AS_OF
    )

    assert [day.date for day in days] == [MONDAY, friday, SATURDAY]
    monday, blocked, saturday = days
    assert monday.dynamic_price == Decimal("3510.00")
    assert blocked.status == "blocked"
    assert blocked.available is False
    assert blocked.dynamic_price == Decimal("3000.00")
    assert saturday.dynamic_price == Decimal("4036.50")


async def test_price_calendar_rejects_inverted_range(memory_engine: PricingEngine) -> None:
    with pytest.raises(ValidationError):
        await memory_engine.quotes.price_calendar("C001", SATURDAY, MONDAY)


async def test_slow_listener_does_not_hold_the_slot_lock() -> None:
    events = EventHooks()

    async def slow_listener(event: EngineEvent) -> None:
        await asyncio.sleep(0.2)

    events.subscribe(slow_listener)
    engine = build_engine(
        rules=InMemoryRuleStore(),
        slots=InMemorySlotStore(),
        configs=InMemoryConfigStore(),
        settings=get_settings().model_copy(update={"lock_timeout_seconds": 0.05}),
        events=events,
    )
    await _seed_demo(engine, capacity=1)

    results = await asyncio.gather(
        engine.quotes.reserve_and_quote(_context()),
        engine.quotes.reserve_and_quote(_context()),
        return_exceptions=True,
    )

    assert not any(isinstance(result, LockTimeoutError) for result in results)
    assert sum(isinstance(result, Reservation) for result in results) == 1
    assert sum(isinstance(result, CapacityExceededError) for result in results) == 1
    assert (await engine.ledger.load("C001", SATURDAY)).booked == 1


def _ordering_rules() -> list[PricingRule]:
    return [
        make_rule("R-B", priority=1, value="10"),
        make_rule("R-A", priority=1, kind=AdjustmentKind.FIXED, value="250"),
        make_rule(
            "R-C", priority=2, direction=AdjustmentDirection.DECREASE, value="5"
        ),
        make_rule(
            "R-D",
            priority=0,
            kind=AdjustmentKind.FIXED,
            direction=AdjustmentDirection.DECREASE,
            value="100",
        ),
    ]


async def _engine_with_rules(rules: list[PricingRule]) -> PricingEngine:
    engine = build_engine(
        rules=InMemoryRuleStore(),
        slots=InMemorySlotStore(),
        configs=InMemoryConfigStore(),
    )
    for rule in rules:
        await engine.catalog.add(rule)
    await engine.ledger.open_slot("C001", SATURDAY, capacity=20, base_price=Decimal("3000"))
    return engine


async def test_quote_does_not_depend_on_rule_storage_order() -> None:
    rules = _ordering_rules()
    forward = await _engine_with_rules(rules)
    backward = await _engine_with_rules(list(reversed(rules)))

    first = await forward.quotes.get_quote(_context())
    second = await backward.quotes.get_quote(_context())

    assert first.final_price == second.final_price == Decimal("3291.75")
    assert [item.to_dict() for item in first.breakdown] == [
        item.to_dict() for item in second.breakdown
    ]
    assert [item.rule_id for item in first.breakdown] == ["R-D", "R-A", "R-B", "R-C"]
