"""Availability slot schemas."""

from __future__ import annotations

import datetime
import enum
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

LIMITED_OCCUPANCY = Decimal("0.8")


class SlotState(str, enum.Enum):
    """Lifecycle state of an opened slot."""

    OPEN = "open"
    FULL = "full"
    BLOCKED = "blocked"


class SlotStatusLabel(str, enum.Enum):
    """Calendar label shown to organizers."""

    AVAILABLE = "available"
    LIMITED = "limited"
    FULL = "full"
    BLOCKED = "blocked"


class AvailabilitySlot(BaseModel):
    """Capacity and price record for one camp on one date."""

    camp_id: str
    date: datetime.date
    capacity: int
    booked: int = 0
    is_available: bool = True
    base_price: Decimal
    version: int = 0
    notes: str | None = None

    model_config = ConfigDict(frozen=True, from_attributes=True)

    @property
    def remaining(self) -> int:
        return max(self.capacity - self.booked, 0)

    @property
    def state(self) -> SlotState:
        if not self.is_available:
            return SlotState.BLOCKED
        if self.booked >= self.capacity:
            return SlotState.FULL
        return SlotState.OPEN

    @property
    def status_label(self) -> SlotStatusLabel:
        state = self.state
        if state is SlotState.BLOCKED:
            return SlotStatusLabel.BLOCKED
        if state is SlotState.FULL:
            return SlotStatusLabel.FULL
        if self.booked > self.capacity * LIMITED_OCCUPANCY:
            return SlotStatusLabel.LIMITED
        return SlotStatusLabel.AVAILABLE

    def occupancy_ratio(self) -> Decimal:
        """Return booked / capacity, or zero for a zero-capacity slot."""
        if self.capacity <= 0:
            return Decimal("0")
        return Decimal(self.booked) / Decimal(self.capacity)

    def can_take(self, count: int) -> bool:
        return self.booked + count <= self.capacity


class SlotOpen(BaseModel):
    """Payload to open a date for sale."""

    date: datetime.date
    capacity: int = Field(ge=0)
    base_price: Decimal = Field(ge=0)
    notes: str | None = None


class SlotUpdate(BaseModel):
    """Mutable organizer fields of a slot."""

    capacity: int | None = Field(default=None, ge=0)
    base_price: Decimal | None = Field(default=None, ge=0)
    notes: str | None = None


class SlotBulkUpdate(SlotUpdate):
    """Apply the same edit to several dates."""

    dates: list[datetime.date] = Field(min_length=1)


class SlotRelease(BaseModel):
    """Return previously reserved units."""

    count: int = Field(ge=1)


class SlotRead(BaseModel):
    """Serialized slot with calendar-derived fields."""

    camp_id: str
    date: datetime.date
    capacity: int
    booked: int
    is_available: bool
    base_price: Decimal
    version: int
    notes: str | None = None
    remaining_capacity: int
    state: SlotState
    status: SlotStatusLabel

    @classmethod
    def from_slot(cls, slot: AvailabilitySlot) -> "SlotRead":
        return cls(
            **slot.model_dump(),
            remaining_capacity=slot.remaining,
            state=slot.state,
            status=slot.status_label,
        )
