"""Event emission hook consumed by the external automation engine."""

from __future__ import annotations

import datetime
import enum
import inspect
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger(__name__)


class EventKind(str, enum.Enum):
    """Transitions the engine announces."""

    SLOT_FULL = "slot.full"
    SLOT_BLOCKED = "slot.blocked"
    SLOT_OPEN = "slot.open"
    RULE_ACTIVATED = "rule.activated"
    RULE_DEACTIVATED = "rule.deactivated"


@dataclass(slots=True, frozen=True)
class EngineEvent:
    """Payload delivered to every listener."""

    kind: EventKind
    camp_id: str | None = None
    date: datetime.date | None = None
    rule_id: str | None = None
    payload: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "camp_id": self.camp_id,
            "date": self.date.isoformat() if self.date else None,
            "rule_id": self.rule_id,
            "payload": dict(self.payload),
        }


Listener = Callable[[EngineEvent], Awaitable[None] | None]


class EventHooks:
    """Fan events out to subscribed listeners; never raises into the caller."""

    def __init__(self) -> None:
        self._listeners: list[Listener] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener`` and return a callable that unsubscribes it."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    async def emit(self, event: EngineEvent) -> None:
        logger.debug("Emitting %s for camp %s", event.kind.value, event.camp_id)
        for listener in list(self._listeners):
            try:
                result = listener(event)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                logger.exception(
                    "Event listener failed for %s (camp %s)",
                    event.kind.value,
                    event.camp_id,
                )
