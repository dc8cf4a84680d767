"""Exceptions raised by the pricing and availability engine."""

from __future__ import annotations

import datetime


class QuoteEngineError(Exception):
    """Base class for every engine failure."""


class ValidationError(QuoteEngineError, ValueError):
    """Malformed rule, slot or booking context; never retried."""


class NotFoundError(QuoteEngineError, LookupError):
    """No slot, rule or config exists for the requested key."""


class BookingRejectedError(QuoteEngineError):
    """Expected business outcome that prevents a reservation."""

    def __init__(self, message: str, *, camp_id: str, date: datetime.date) -> None:
        super().__init__(message)
        self.camp_id = camp_id
        self.date = date


class SlotBlockedError(BookingRejectedError):
    """The slot exists but has been blocked by the organizer."""


class CapacityExceededError(BookingRejectedError):
    """The slot cannot take the requested number of units."""

    def __init__(
        self,
        message: str,
        *,
        camp_id: str,
        date: datetime.date,
        remaining: int,
        requested: int,
    ) -> None:
        super().__init__(message, camp_id=camp_id, date=date)
        self.remaining = remaining
        self.requested = requested


class ConcurrencyConflictError(QuoteEngineError):
    """The slot version changed between read and write."""


class TransientReservationError(ConcurrencyConflictError):
    """Reservation kept conflicting after the bounded number of retries."""

    def __init__(self, message: str, *, attempts: int) -> None:
        super().__init__(message)
        self.attempts = attempts


class LockTimeoutError(QuoteEngineError, TimeoutError):
    """Waiting for the per-slot serialization took longer than allowed."""


__all__ = [
    "BookingRejectedError",
    "CapacityExceededError",
    "ConcurrencyConflictError",
    "LockTimeoutError",
    "NotFoundError",
    "QuoteEngineError",
    "SlotBlockedError",
    "TransientReservationError",
    "ValidationError",
]
