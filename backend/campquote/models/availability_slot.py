"""Availability slot persistence model."""

from __future__ import annotations

import datetime
from decimal import Decimal

from sqlalchemy import Boolean, CheckConstraint, Date, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from campquote.db.base import Base
from campquote.models.mixins import TimestampMixin


class AvailabilitySlotRecord(TimestampMixin, Base):
    """Capacity counters for one camp date, versioned for compare-and-swap."""

    __tablename__ = "availability_slots"
    __table_args__ = (
        CheckConstraint("capacity >= 0", name="ck_slot_capacity_non_negative"),
        CheckConstraint(
            "booked >= 0 AND booked <= capacity", name="ck_slot_booked_within_capacity"
        ),
    )

    camp_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    date: Mapped[datetime.date] = mapped_column(Date, primary_key=True)
    capacity: Mapped[int] = mapped_column(Integer, nullable=False)
    booked: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_available: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    base_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
