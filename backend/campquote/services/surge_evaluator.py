"""Occupancy lookups feeding demand-based rule conditions."""

from __future__ import annotations

import datetime
import time
from collections.abc import Callable
from decimal import Decimal

from campquote.schemas.availability import AvailabilitySlot
from campquote.services.availability_ledger import AvailabilityLedger


class SurgeEvaluator:
    """Thin wrapper over the ledger's occupancy ratio.

    Ratios are computed at quote time. A ratio read from the ledger may be
    reused for at most ``max_age`` seconds (the camp's update cadence) and is
    dropped as soon as the ledger writes that slot.
    """

    def __init__(
        self,
        ledger: AvailabilityLedger,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._ledger = ledger
        self._clock = clock
        self._cache: dict[
            tuple[str, datetime.date], tuple[Decimal, float, float]
        ] = {}
        ledger.on_write(self.invalidate)

    async def occupancy_ratio(
        self,
        camp_id: str,
        date: datetime.date,
        *,
        snapshot: AvailabilitySlot | None = None,
        max_age: float | None = None,
    ) -> Decimal:
        if snapshot is not None:
            return snapshot.occupancy_ratio()

        key = (camp_id, date)
        now = self._clock()
        self._prune(now)
        cached = self._cache.get(key)
        if cached is not None and max_age is not None and now - cached[1] < max_age:
            return cached[0]

        ratio = await self._ledger.occupancy_ratio(camp_id, date)
        if max_age:
            self._cache[key] = (ratio, now, now + max_age)
        return ratio

    def __len__(self) -> int:
        return len(self._cache)

    def _prune(self, now: float) -> None:
        expired = [key for key, entry in self._cache.items() if entry[2] <= now]
        for key in expired:
            del self._cache[key]

    def invalidate(self, camp_id: str, date: datetime.date) -> None:
        self._cache.pop((camp_id, date), None)
