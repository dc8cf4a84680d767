"""Per-key asyncio serialization with bounded waits."""

from __future__ import annotations

import asyncio
import weakref
from collections.abc import AsyncIterator, Hashable
from contextlib import asynccontextmanager

from campquote.core.errors import LockTimeoutError


class _KeyLock:
    """Re-entrant lock owned by a single task at a time."""

    def __init__(self) -> None:
        self.lock = asyncio.Lock()
        self.owner: asyncio.Task | None = None
        self.depth = 0


class KeyedLock:
    """Serialize work per key; the owning task may re-enter freely.

    Locks are weakly held so idle keys do not accumulate.
    """

    def __init__(self, *, timeout: float) -> None:
        self._timeout = timeout
        self._locks: weakref.WeakValueDictionary[Hashable, _KeyLock] = (
            weakref.WeakValueDictionary()
        )

    def _lock_for(self, key: Hashable) -> _KeyLock:
        entry = self._locks.get(key)
        if entry is None:
            entry = _KeyLock()
            self._locks[key] = entry
        return entry

    def is_held(self, key: Hashable) -> bool:
        entry = self._locks.get(key)
        return entry is not None and entry.lock.locked()

    @asynccontextmanager
    async def hold(
        self, key: Hashable, *, timeout: float | None = None
    ) -> AsyncIterator[None]:
        entry = self._lock_for(key)
        task = asyncio.current_task()
        if entry.owner is not None and entry.owner is task:
            entry.depth += 1
            try:
                yield
            finally:
                entry.depth -= 1
            return

        wait = self._timeout if timeout is None else timeout
        try:
            await asyncio.wait_for(entry.lock.acquire(), timeout=wait)
        except TimeoutError as exc:
            raise LockTimeoutError(
                f"Timed out after {wait:.2f}s waiting for {key!r}"
            ) from exc
        entry.owner = task
        entry.depth = 1
        try:
            yield
        finally:
            entry.depth = 0
            entry.owner = None
            entry.lock.release()
