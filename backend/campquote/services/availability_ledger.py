"""Per (camp, date) capacity bookkeeping with atomic mutation."""

from __future__ import annotations

import datetime
import logging
from collections.abc import AsyncIterator, Callable, Iterable
from contextlib import AsyncExitStack, asynccontextmanager
from decimal import Decimal
from typing import Any

from campquote.core.errors import (
    CapacityExceededError,
    ConcurrencyConflictError,
    NotFoundError,
    SlotBlockedError,
    ValidationError,
)
from campquote.schemas.availability import AvailabilitySlot, SlotState
from campquote.services.event_hooks import EngineEvent, EventHooks, EventKind
from campquote.services.keyed_lock import KeyedLock
from campquote.stores.base import SlotStore

logger = logging.getLogger(__name__)

_STATE_EVENTS = {
    SlotState.OPEN: EventKind.SLOT_OPEN,
    SlotState.FULL: EventKind.SLOT_FULL,
    SlotState.BLOCKED: EventKind.SLOT_BLOCKED,
}


def _slot_edits(
    slot: AvailabilitySlot,
    *,
    capacity: int | None,
    base_price: Decimal | None,
    notes: str | None,
) -> dict[str, Any]:
    """Validate an organizer edit against ``slot`` and return the changed fields."""
    changes: dict[str, Any] = {}
    if base_price is not None:
        if base_price < 0:
            raise ValidationError("Base price must not be negative")
        changes["base_price"] = base_price
    if notes is not None:
        changes["notes"] = notes
    if capacity is not None:
        if capacity < 0:
            raise ValidationError("Capacity must not be negative")
        if capacity < slot.booked:
            raise ValidationError(
                f"Capacity {capacity} on {slot.date} is below the {slot.booked}"
                " unit(s) booked"
            )
        changes["capacity"] = capacity
    return changes


class AvailabilityLedger:
    """Owns availability slots for the camps served by one engine instance."""

    def __init__(
        self,
        store: SlotStore,
        *,
        events: EventHooks | None = None,
        lock_timeout: float = 2.0,
    ) -> None:
        self._store = store
        self._events = events or EventHooks()
        self._locks = KeyedLock(timeout=lock_timeout)
        self._write_listeners: list[Callable[[str, datetime.date], None]] = []

    def on_write(self, listener: Callable[[str, datetime.date], None]) -> None:
        """Call ``listener(camp_id, date)`` after every persisted slot change."""
        self._write_listeners.append(listener)

    @asynccontextmanager
    async def serialized(
        self, camp_id: str, date: datetime.date
    ) -> AsyncIterator[None]:
        """Hold the single-writer serialization for one slot key."""
        async with self._locks.hold((camp_id, date)):
            yield

    async def open_slot(
        self,
        camp_id: str,
        date: datetime.date,
        *,
        capacity: int,
        base_price: Decimal,
        notes: str | None = None,
    ) -> AvailabilitySlot:
        if capacity < 0:
            raise ValidationError("Capacity must not be negative")
        if base_price < 0:
            raise ValidationError("Base price must not be negative")
        slot = AvailabilitySlot(
            camp_id=camp_id,
            date=date,
            capacity=capacity,
            booked=0,
            is_available=True,
            base_price=base_price,
            version=1,
            notes=notes,
        )
        async with self.serialized(camp_id, date):
            if not await self._store.create_slot(slot):
                raise ValidationError(f"Slot for {camp_id} on {date} already exists")
        self._notify_write(camp_id, date)
        logger.info(
            "Opened slot %s %s with capacity %s at %s",
            camp_id,
            date.isoformat(),
            capacity,
            base_price,
        )
        await self.announce(None, slot)
        return slot

    async def load(self, camp_id: str, date: datetime.date) -> AvailabilitySlot:
        slot = await self._store.load_slot(camp_id, date)
        if slot is None:
            raise NotFoundError(f"No availability slot for {camp_id} on {date}")
        return slot

    async def list_slots(
        self, camp_id: str, start: datetime.date, end: datetime.date
    ) -> list[AvailabilitySlot]:
        if start > end:
            raise ValidationError("Calendar start must not be after its end")
        return await self._store.list_slots(camp_id, start, end)

    async def occupancy_ratio(self, camp_id: str, date: datetime.date) -> Decimal:
        """Return booked / capacity; zero when the slot has no capacity."""
        slot = await self.load(camp_id, date)
        return slot.occupancy_ratio()

    async def reserve(
        self,
        camp_id: str,
        date: datetime.date,
        count: int,
        *,
        expected_version: int | None = None,
        announce: bool = True,
    ) -> AvailabilitySlot:
        """Take ``count`` units, failing on blocked, full or changed slots.

        Callers holding ``serialized`` pass ``announce=False`` and call
        ``announce`` themselves once the lock is released.
        """
        if count < 1:
            raise ValidationError("Reservation count must be at least 1")
        async with self.serialized(camp_id, date):
            slot = await self.load(camp_id, date)
            if expected_version is not None and slot.version != expected_version:
                logger.warning(
                    "Slot %s %s moved from version %s to %s before reserve",
                    camp_id,
                    date.isoformat(),
                    expected_version,
                    slot.version,
                )
                raise ConcurrencyConflictError(
                    f"Slot {camp_id} {date} changed since it was read"
                )
            if not slot.is_available:
                raise SlotBlockedError(
                    f"Slot {camp_id} {date} is blocked", camp_id=camp_id, date=date
                )
            if not slot.can_take(count):
                raise CapacityExceededError(
                    f"Slot {camp_id} {date} has {slot.remaining} unit(s) left,"
                    f" {count} requested",
                    camp_id=camp_id,
                    date=date,
                    remaining=slot.remaining,
                    requested=count,
                )
            updated = await self._swap(slot, booked=slot.booked + count)
        logger.info(
            "Reserved %s unit(s) on %s %s (%s/%s booked)",
            count,
            camp_id,
            date.isoformat(),
            updated.booked,
            updated.capacity,
        )
        if announce:
            await self.announce(slot, updated)
        return updated

    async def release(
        self, camp_id: str, date: datetime.date, count: int
    ) -> AvailabilitySlot:
        """Return ``count`` units; booked never drops below zero."""
        if count < 1:
            raise ValidationError("Release count must be at least 1")
        async with self.serialized(camp_id, date):
            slot = await self.load(camp_id, date)
            booked = max(0, slot.booked - count)
            if booked == slot.booked:
                return slot
            updated = await self._swap(slot, booked=booked)
        logger.info(
            "Released %s unit(s) on %s %s (%s/%s booked)",
            slot.booked - booked,
            camp_id,
            date.isoformat(),
            updated.booked,
            updated.capacity,
        )
        await self.announce(slot, updated)
        return updated

    async def block(self, camp_id: str, date: datetime.date) -> AvailabilitySlot:
        return await self._set_available(camp_id, date, False)

    async def unblock(self, camp_id: str, date: datetime.date) -> AvailabilitySlot:
        return await self._set_available(camp_id, date, True)

    async def update_slot(
        self,
        camp_id: str,
        date: datetime.date,
        *,
        capacity: int | None = None,
        base_price: Decimal | None = None,
        notes: str | None = None,
    ) -> AvailabilitySlot:
        """Apply organizer edits; capacity may not drop below what is booked."""
        async with self.serialized(camp_id, date):
            slot = await self.load(camp_id, date)
            changes = _slot_edits(
                slot, capacity=capacity, base_price=base_price, notes=notes
            )
            if not changes:
                return slot
            updated = await self._swap(slot, **changes)
        await self.announce(slot, updated)
        return updated

    async def bulk_update(
        self,
        camp_id: str,
        dates: Iterable[datetime.date],
        *,
        capacity: int | None = None,
        base_price: Decimal | None = None,
        notes: str | None = None,
    ) -> list[AvailabilitySlot]:
        """Apply the same edit to each date, or to none of them.

        Every date is locked and checked before the first write, so a date
        that cannot take the edit leaves all dates untouched.
        """
        ordered = sorted(set(dates))
        results: list[AvailabilitySlot] = []
        written: list[tuple[AvailabilitySlot, AvailabilitySlot]] = []
        async with AsyncExitStack() as stack:
            for date in ordered:
                await stack.enter_async_context(self.serialized(camp_id, date))
            planned: list[tuple[AvailabilitySlot, dict[str, Any]]] = []
            for date in ordered:
                slot = await self.load(camp_id, date)
                planned.append(
                    (
                        slot,
                        _slot_edits(
                            slot, capacity=capacity, base_price=base_price, notes=notes
                        ),
                    )
                )
            for slot, changes in planned:
                if not changes:
                    results.append(slot)
                    continue
                updated = await self._swap(slot, **changes)
                written.append((slot, updated))
                results.append(updated)
        logger.info("Bulk edited %s slot(s) for %s", len(written), camp_id)
        for before, after in written:
            await self.announce(before, after)
        return results

    async def _set_available(
        self, camp_id: str, date: datetime.date, available: bool
    ) -> AvailabilitySlot:
        async with self.serialized(camp_id, date):
            slot = await self.load(camp_id, date)
            if slot.is_available == available:
                return slot
            updated = await self._swap(slot, is_available=available)
        logger.info(
            "%s slot %s %s",
            "Unblocked" if available else "Blocked",
            camp_id,
            date.isoformat(),
        )
        await self.announce(slot, updated)
        return updated

    async def _swap(self, slot: AvailabilitySlot, **changes: Any) -> AvailabilitySlot:
        updated = slot.model_copy(update={**changes, "version": slot.version + 1})
        if not await self._store.compare_and_swap_slot(slot.version, updated):
            logger.warning(
                "Compare-and-swap conflict on %s %s at version %s",
                slot.camp_id,
                slot.date.isoformat(),
                slot.version,
            )
            raise ConcurrencyConflictError(
                f"Slot {slot.camp_id} {slot.date} was modified concurrently"
            )
        self._notify_write(slot.camp_id, slot.date)
        return updated

    def _notify_write(self, camp_id: str, date: datetime.date) -> None:
        for listener in self._write_listeners:
            listener(camp_id, date)

    async def announce(
        self, before: AvailabilitySlot | None, after: AvailabilitySlot
    ) -> None:
        if before is not None and before.state is after.state:
            return
        await self._events.emit(
            EngineEvent(
                kind=_STATE_EVENTS[after.state],
                camp_id=after.camp_id,
                date=after.date,
                payload={
                    "previous": before.state.value if before is not None else "draft",
                    "booked": after.booked,
                    "capacity": after.capacity,
                    "version": after.version,
                },
            )
        )
