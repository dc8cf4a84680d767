"""Tests for event fan-out."""

from __future__ import annotations

import datetime

import pytest

from campquote.services.event_hooks import EngineEvent, EventHooks, EventKind

pytestmark = pytest.mark.asyncio


async def test_sync_and_async_listeners_receive_events() -> None:
    hooks = EventHooks()
    seen: list[str] = []

    async def _async_listener(event: EngineEvent) -> None:
        seen.append(f"async:{event.kind.value}")

    hooks.subscribe(lambda event: seen.append(f"sync:{event.kind.value}"))
    hooks.subscribe(_async_listener)

    await hooks.emit(EngineEvent(kind=EventKind.SLOT_FULL, camp_id="C001"))

    assert seen == ["sync:slot.full", "async:slot.full"]


async def test_unsubscribe_stops_delivery() -> None:
    hooks = EventHooks()
    seen: list[EngineEvent] = []
    unsubscribe = hooks.subscribe(seen.append)

    unsubscribe()
    await hooks.emit(EngineEvent(kind=EventKind.SLOT_OPEN))

    assert seen == []


async def test_failing_listener_is_isolated() -> None:
    hooks = EventHooks()
    seen: list[EngineEvent] = []

    def _broken(event: EngineEvent) -> None:
        raise RuntimeError("boom")

    hooks.subscribe(_broken)
    hooks.subscribe(seen.append)

    await hooks.emit(EngineEvent(kind=EventKind.RULE_ACTIVATED, rule_id="PR001"))

    assert len(seen) == 1


async def test_event_serializes_to_plain_dict() -> None:
    event = EngineEvent(
        kind=EventKind.SLOT_BLOCKED,
        camp_id="C001",
        date=datetime.date(2024, 12, 21),
        payload={"previous": "open"},
    )

    assert event.to_dict() == {
        "kind": "slot.blocked",
        "camp_id": "C001",
        "date": "2024-12-21",
        "rule_id": None,
        "payload": {"previous": "open"},
    }
