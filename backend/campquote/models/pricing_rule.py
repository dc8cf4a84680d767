"""Pricing rule persistence models."""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from sqlalchemy import Boolean, Enum, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.types import JSON

from campquote.db.base import Base
from campquote.models.mixins import TimestampMixin
from campquote.schemas.pricing_rule import (
    AdjustmentDirection,
    AdjustmentKind,
    RuleType,
)

JSONB_TYPE = JSONB().with_variant(JSON(), "sqlite")


class PricingRuleRecord(TimestampMixin, Base):
    """Stored pricing rule; conditions are kept as a JSON document."""

    __tablename__ = "pricing_rules"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    rule_type: Mapped[RuleType] = mapped_column(Enum(RuleType), nullable=False)
    priority: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    conditions: Mapped[dict[str, Any]] = mapped_column(
        JSONB_TYPE, default=dict, nullable=False
    )
    adjustment_kind: Mapped[AdjustmentKind] = mapped_column(
        Enum(AdjustmentKind), nullable=False
    )
    adjustment_direction: Mapped[AdjustmentDirection] = mapped_column(
        Enum(AdjustmentDirection), nullable=False
    )
    adjustment_value: Mapped[Decimal] = mapped_column(Numeric(12, 4), nullable=False)

    camps: Mapped[list["PricingRuleCamp"]] = relationship(
        "PricingRuleCamp",
        back_populates="rule",
        cascade="all, delete-orphan",
        lazy="selectin",
    )


class PricingRuleCamp(Base):
    """Camps a pricing rule applies to."""

    __tablename__ = "pricing_rule_camps"

    rule_id: Mapped[str] = mapped_column(
        ForeignKey("pricing_rules.id", ondelete="CASCADE"), primary_key=True
    )
    camp_id: Mapped[str] = mapped_column(String(64), primary_key=True, index=True)

    rule: Mapped[PricingRuleRecord] = relationship(
        "PricingRuleRecord", back_populates="camps"
    )
