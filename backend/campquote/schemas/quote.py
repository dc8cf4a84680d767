"""Booking context and quote schemas."""

from __future__ import annotations

import datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


def today_utc() -> datetime.date:
    return datetime.datetime.now(datetime.UTC).date()


class BookingContext(BaseModel):
    """Everything the engine needs to price and place one booking."""

    camp_id: str
    date: datetime.date
    end_date: datetime.date | None = None
    participant_count: int = 1
    requested_count: int | None = None
    as_of: datetime.date = Field(default_factory=today_utc)

    model_config = ConfigDict(frozen=True)

    @property
    def units(self) -> int:
        """Capacity units the booking consumes."""
        if self.requested_count is None:
            return self.participant_count
        return self.requested_count

    @property
    def advance_days(self) -> int:
        return (self.date - self.as_of).days

    @property
    def duration_days(self) -> int:
        if self.end_date is None:
            return 1
        return (self.end_date - self.date).days + 1

    @property
    def weekday(self) -> int:
        """Weekday of the booking date, 0 = Sunday through 6 = Saturday."""
        return self.date.isoweekday() % 7


class QuoteRequest(BaseModel):
    """Checkout payload asking for a price and capacity decision."""

    camp_id: str = Field(min_length=1)
    date: datetime.date
    end_date: datetime.date | None = None
    participant_count: int = Field(default=1, ge=1)
    requested_count: int | None = Field(default=None, ge=1)

    def to_context(self, *, as_of: datetime.date | None = None) -> BookingContext:
        data: dict[str, Any] = self.model_dump()
        if as_of is not None:
            data["as_of"] = as_of
        return BookingContext(**data)


class BreakdownLineRead(BaseModel):
    """One auditable step of a composed price."""

    kind: str
    rule_id: str | None = None
    rule_name: str | None = None
    rule_type: str | None = None
    signed_delta: Decimal | None = None
    running_after: Decimal | None = None
    clamped_to_zero: bool = False
    reason: str | None = None
    message: str | None = None


class QuoteRead(BaseModel):
    """Quote response shown at checkout and retained for disputes."""

    camp_id: str
    date: datetime.date
    available: bool
    remaining_capacity: int
    base_price: Decimal
    final_price: Decimal
    multiplier: Decimal
    breakdown: list[BreakdownLineRead]


class ReservationRead(BaseModel):
    """Committed reservation at the quoted price."""

    quote: QuoteRead
    reserved_count: int
    slot_version: int
    charged_price: Decimal


class CalendarDayRead(BaseModel):
    """Advisory price for one calendar day."""

    date: datetime.date
    status: str
    available: bool
    remaining_capacity: int
    base_price: Decimal
    dynamic_price: Decimal
    multiplier: Decimal
