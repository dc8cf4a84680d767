"""Schema exports."""

from campquote.schemas.availability import (
    AvailabilitySlot,
    SlotBulkUpdate,
    SlotOpen,
    SlotRead,
    SlotRelease,
    SlotState,
    SlotStatusLabel,
    SlotUpdate,
)
from campquote.schemas.dynamic_pricing import (
    DynamicPricingConfig,
    DynamicPricingWrite,
    UpdateFrequency,
)
from campquote.schemas.pricing_rule import (
    AdjustmentDirection,
    AdjustmentKind,
    PricingRule,
    PricingRuleWrite,
    RuleAdjustment,
    RuleConditions,
    RuleToggle,
    RuleType,
)
from campquote.schemas.quote import (
    BookingContext,
    BreakdownLineRead,
    CalendarDayRead,
    QuoteRead,
    QuoteRequest,
    ReservationRead,
)

__all__ = [
    "AdjustmentDirection",
    "AdjustmentKind",
    "AvailabilitySlot",
    "BookingContext",
    "BreakdownLineRead",
    "CalendarDayRead",
    "DynamicPricingConfig",
    "DynamicPricingWrite",
    "PricingRule",
    "PricingRuleWrite",
    "QuoteRead",
    "QuoteRequest",
    "ReservationRead",
    "RuleAdjustment",
    "RuleConditions",
    "RuleToggle",
    "RuleType",
    "SlotBulkUpdate",
    "SlotOpen",
    "SlotRead",
    "SlotRelease",
    "SlotState",
    "SlotStatusLabel",
    "SlotUpdate",
    "UpdateFrequency",
]
