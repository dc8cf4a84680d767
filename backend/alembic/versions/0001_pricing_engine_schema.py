"""Pricing rules, availability slots and dynamic pricing settings."""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "0001"
down_revision = None
branch_labels = None
depends_on = None

RULE_TYPES = (
    "SEASONAL",
    "WEEKEND",
    "HOLIDAY",
    "DEMAND",
    "EARLY_BIRD",
    "LAST_MINUTE",
    "GROUP_SIZE",
    "DURATION",
)


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    ]


def upgrade() -> None:
    rule_type = sa.Enum(*RULE_TYPES, name="ruletype")
    adjustment_kind = sa.Enum("PERCENTAGE", "FIXED", name="adjustmentkind")
    adjustment_direction = sa.Enum(
        "INCREASE", "DECREASE", name="adjustmentdirection"
    )
    update_frequency = sa.Enum("HOURLY", "DAILY", "WEEKLY", name="updatefrequency")

    json_type = sa.JSON().with_variant(
        postgresql.JSONB(astext_type=sa.Text()), "postgresql"
    )

    op.create_table(
        "pricing_rules",
        sa.Column("id", sa.String(length=64), primary_key=True),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("rule_type", rule_type, nullable=False),
        sa.Column("priority", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("conditions", json_type, nullable=False),
        sa.Column("adjustment_kind", adjustment_kind, nullable=False),
        sa.Column("adjustment_direction", adjustment_direction, nullable=False),
        sa.Column("adjustment_value", sa.Numeric(12, 4), nullable=False),
        *_timestamps(),
    )

    op.create_table(
        "pricing_rule_camps",
        sa.Column(
            "rule_id",
            sa.String(length=64),
            sa.ForeignKey("pricing_rules.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column("camp_id", sa.String(length=64), primary_key=True),
    )
    op.create_index(
        "ix_pricing_rule_camps_camp_id", "pricing_rule_camps", ["camp_id"]
    )

    op.create_table(
        "availability_slots",
        sa.Column("camp_id", sa.String(length=64), primary_key=True),
        sa.Column("date", sa.Date(), primary_key=True),
        sa.Column("capacity", sa.Integer(), nullable=False),
        sa.Column("booked", sa.Integer(), nullable=False, server_default="0"),
        sa.Column(
            "is_available", sa.Boolean(), nullable=False, server_default=sa.true()
        ),
        sa.Column("base_price", sa.Numeric(12, 2), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
        sa.CheckConstraint("capacity >= 0", name="ck_slot_capacity_non_negative"),
        sa.CheckConstraint(
            "booked >= 0 AND booked <= capacity",
            name="ck_slot_booked_within_capacity",
        ),
    )

    op.create_table(
        "dynamic_pricing_configs",
        sa.Column("camp_id", sa.String(length=64), primary_key=True),
        sa.Column("enabled", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("demand_weight", sa.Numeric(6, 2), nullable=False),
        sa.Column("seasonal_weight", sa.Numeric(6, 2), nullable=False),
        sa.Column("competitor_weight", sa.Numeric(6, 2), nullable=False),
        sa.Column("inventory_weight", sa.Numeric(6, 2), nullable=False),
        sa.Column("min_multiplier", sa.Numeric(6, 3), nullable=False),
        sa.Column("max_multiplier", sa.Numeric(6, 3), nullable=False),
        sa.Column("update_frequency", update_frequency, nullable=False),
        *_timestamps(),
    )


def downgrade() -> None:
    op.drop_table("dynamic_pricing_configs")
    op.drop_table("availability_slots")
    op.drop_index("ix_pricing_rule_camps_camp_id", table_name="pricing_rule_camps")
    op.drop_table("pricing_rule_camps")
    op.drop_table("pricing_rules")

    for name in ("updatefrequency", "adjustmentdirection", "adjustmentkind", "ruletype"):
        sa.Enum(name=name).drop(op.get_bind(), checkfirst=True)
