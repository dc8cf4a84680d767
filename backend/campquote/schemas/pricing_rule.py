"""Pricing rule schema definitions."""

from __future__ import annotations

import datetime
import enum
import uuid
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class RuleType(str, enum.Enum):
    """Organizer-facing rule categories."""

    SEASONAL = "seasonal"
    WEEKEND = "weekend"
    HOLIDAY = "holiday"
    DEMAND = "demand"
    EARLY_BIRD = "early_bird"
    LAST_MINUTE = "last_minute"
    GROUP_SIZE = "group_size"
    DURATION = "duration"


class AdjustmentKind(str, enum.Enum):
    """How an adjustment value is interpreted."""

    PERCENTAGE = "percentage"
    FIXED = "fixed"


class AdjustmentDirection(str, enum.Enum):
    """Whether an adjustment raises or lowers the running price."""

    INCREASE = "increase"
    DECREASE = "decrease"


class RuleConditions(BaseModel):
    """Closed set of optional condition dimensions.

    Every unset dimension matches any booking. ``days_of_week`` uses
    0 = Sunday through 6 = Saturday.
    """

    start_date: datetime.date | None = None
    end_date: datetime.date | None = None
    days_of_week: frozenset[int] | None = None
    min_participants: int | None = None
    max_participants: int | None = None
    min_days_advance: int | None = None
    max_days_advance: int | None = None
    min_duration: int | None = None
    max_duration: int | None = None
    occupancy_threshold: Decimal | None = None

    model_config = ConfigDict(frozen=True, extra="forbid", from_attributes=True)

    @property
    def needs_occupancy(self) -> bool:
        return self.occupancy_threshold is not None


class RuleAdjustment(BaseModel):
    """Numeric effect of a rule on the running price."""

    kind: AdjustmentKind
    direction: AdjustmentDirection
    value: Decimal

    model_config = ConfigDict(frozen=True, extra="forbid", from_attributes=True)

    @property
    def is_percentage(self) -> bool:
        return self.kind is AdjustmentKind.PERCENTAGE


def _new_rule_id() -> str:
    return uuid.uuid4().hex


class PricingRule(BaseModel):
    """Organizer-authored pricing rule; never mutated by the engine."""

    id: str = Field(default_factory=_new_rule_id)
    name: str
    description: str | None = None
    type: RuleType
    priority: int = 0
    active: bool = True
    conditions: RuleConditions = Field(default_factory=RuleConditions)
    adjustment: RuleAdjustment
    applicable_camps: frozenset[str]
    created_at: datetime.datetime | None = None
    updated_at: datetime.datetime | None = None

    model_config = ConfigDict(frozen=True, from_attributes=True)

    @property
    def sort_key(self) -> tuple[int, str]:
        return (self.priority, self.id)

    def applies_to(self, camp_id: str) -> bool:
        return camp_id in self.applicable_camps


class PricingRuleWrite(BaseModel):
    """Payload to create or replace a pricing rule."""

    id: str | None = None
    name: str
    description: str | None = None
    type: RuleType
    priority: int = 0
    active: bool = True
    conditions: RuleConditions = Field(default_factory=RuleConditions)
    adjustment: RuleAdjustment
    applicable_camps: frozenset[str]

    def to_rule(self, *, rule_id: str | None = None) -> PricingRule:
        data = self.model_dump(exclude={"id"})
        resolved_id = rule_id or self.id
        if resolved_id:
            data["id"] = resolved_id
        return PricingRule(**data)


class RuleToggle(BaseModel):
    """Organizer toggle payload."""

    active: bool
