"""Per-camp dynamic pricing configuration model."""

from __future__ import annotations

from decimal import Decimal

from sqlalchemy import Boolean, Enum, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from campquote.db.base import Base
from campquote.models.mixins import TimestampMixin
from campquote.schemas.dynamic_pricing import UpdateFrequency


class DynamicPricingConfigRecord(TimestampMixin, Base):
    """Stored multiplier bounds and refresh cadence for a camp."""

    __tablename__ = "dynamic_pricing_configs"

    camp_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    demand_weight: Mapped[Decimal] = mapped_column(Numeric(6, 2), nullable=False)
    seasonal_weight: Mapped[Decimal] = mapped_column(Numeric(6, 2), nullable=False)
    competitor_weight: Mapped[Decimal] = mapped_column(Numeric(6, 2), nullable=False)
    inventory_weight: Mapped[Decimal] = mapped_column(Numeric(6, 2), nullable=False)
    min_multiplier: Mapped[Decimal] = mapped_column(Numeric(6, 3), nullable=False)
    max_multiplier: Mapped[Decimal] = mapped_column(Numeric(6, 3), nullable=False)
    update_frequency: Mapped[UpdateFrequency] = mapped_column(
        Enum(UpdateFrequency), nullable=False, default=UpdateFrequency.DAILY
    )
