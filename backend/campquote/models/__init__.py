"""ORM models package export."""

from campquote.models.availability_slot import AvailabilitySlotRecord
from campquote.models.dynamic_pricing import DynamicPricingConfigRecord
from campquote.models.pricing_rule import PricingRuleCamp, PricingRuleRecord

__all__ = [
    "AvailabilitySlotRecord",
    "DynamicPricingConfigRecord",
    "PricingRuleCamp",
    "PricingRuleRecord",
]
