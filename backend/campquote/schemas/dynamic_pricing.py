"""Dynamic pricing configuration schemas."""

from __future__ import annotations

import enum
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, model_validator

_CADENCE_SECONDS = {
    "hourly": 3600.0,
    "daily": 86400.0,
    "weekly": 604800.0,
}


class UpdateFrequency(str, enum.Enum):
    """How often demand-sensitive pricing data may be refreshed."""

    HOURLY = "hourly"
    DAILY = "daily"
    WEEKLY = "weekly"

    @property
    def seconds(self) -> float:
        return _CADENCE_SECONDS[self.value]


class DynamicPricingWrite(BaseModel):
    """Organizer payload for a camp's dynamic pricing settings."""

    enabled: bool = False
    demand_weight: Decimal = Decimal("40")
    seasonal_weight: Decimal = Decimal("30")
    competitor_weight: Decimal = Decimal("20")
    inventory_weight: Decimal = Decimal("10")
    min_multiplier: Decimal = Field(default=Decimal("0.7"), ge=0)
    max_multiplier: Decimal = Field(default=Decimal("2.0"), ge=0)
    update_frequency: UpdateFrequency = UpdateFrequency.DAILY

    @model_validator(mode="after")
    def _check_bounds(self) -> "DynamicPricingWrite":
        if self.min_multiplier > self.max_multiplier:
            raise ValueError("min_multiplier must not exceed max_multiplier")
        return self

    def to_config(self, camp_id: str) -> "DynamicPricingConfig":
        return DynamicPricingConfig(camp_id=camp_id, **self.model_dump())


class DynamicPricingConfig(DynamicPricingWrite):
    """Per-camp bounds applied to the composed multiplier."""

    camp_id: str

    model_config = ConfigDict(frozen=True, from_attributes=True)

    @property
    def cadence_seconds(self) -> float:
        return self.update_frequency.seconds

    def clamp(self, multiplier: Decimal) -> Decimal:
        return min(max(multiplier, self.min_multiplier), self.max_multiplier)
