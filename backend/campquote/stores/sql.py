"""SQLAlchemy-backed stores; every call runs in its own short session."""

from __future__ import annotations

import datetime

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from campquote.models import (
    AvailabilitySlotRecord,
    DynamicPricingConfigRecord,
    PricingRuleCamp,
    PricingRuleRecord,
)
from campquote.schemas.availability import AvailabilitySlot
from campquote.schemas.dynamic_pricing import DynamicPricingConfig
from campquote.schemas.pricing_rule import PricingRule, RuleAdjustment, RuleConditions


def _rule_from_record(record: PricingRuleRecord) -> PricingRule:
    return PricingRule(
        id=record.id,
        name=record.name,
        description=record.description,
        type=record.rule_type,
        priority=record.priority,
        active=record.active,
        conditions=RuleConditions.model_validate(record.conditions or {}),
        adjustment=RuleAdjustment(
            kind=record.adjustment_kind,
            direction=record.adjustment_direction,
            value=record.adjustment_value,
        ),
        applicable_camps=frozenset(link.camp_id for link in record.camps),
        created_at=record.created_at,
        updated_at=record.updated_at,
    )


def _apply_rule(record: PricingRuleRecord, rule: PricingRule) -> None:
    record.name = rule.name
    record.description = rule.description
    record.rule_type = rule.type
    record.priority = rule.priority
    record.active = rule.active
    record.conditions = rule.conditions.model_dump(mode="json", exclude_none=True)
    record.adjustment_kind = rule.adjustment.kind
    record.adjustment_direction = rule.adjustment.direction
    record.adjustment_value = rule.adjustment.value
    if rule.created_at is not None:
        record.created_at = rule.created_at
    if rule.updated_at is not None:
        record.updated_at = rule.updated_at
    current = {link.camp_id for link in record.camps}
    for link in list(record.camps):
        if link.camp_id not in rule.applicable_camps:
            record.camps.remove(link)
    for camp_id in sorted(rule.applicable_camps - current):
        record.camps.append(PricingRuleCamp(camp_id=camp_id))


def _slot_from_record(record: AvailabilitySlotRecord) -> AvailabilitySlot:
    return AvailabilitySlot.model_validate(record)


class SqlRuleStore:
    """Pricing rules persisted in ``pricing_rules``."""

    def __init__(self, sessionmaker: async_sessionmaker[AsyncSession]) -> None:
        self._sessionmaker = sessionmaker

    async def load_rules(self, camp_id: str) -> list[PricingRule]:
        async with self._sessionmaker() as session:
            result = await session.execute(
                select(PricingRuleRecord)
                .join(PricingRuleCamp)
                .where(PricingRuleCamp.camp_id == camp_id)
            )
            return [_rule_from_record(record) for record in result.scalars().unique()]

    async def load_rule(self, rule_id: str) -> PricingRule | None:
        async with self._sessionmaker() as session:
            record = await session.get(PricingRuleRecord, rule_id)
            return _rule_from_record(record) if record is not None else None

    async def save_rule(self, rule: PricingRule) -> None:
        async with self._sessionmaker() as session:
            record = await session.get(PricingRuleRecord, rule.id)
            if record is None:
                record = PricingRuleRecord(id=rule.id, camps=[])
                session.add(record)
            _apply_rule(record, rule)
            await session.commit()

    async def delete_rule(self, rule_id: str) -> bool:
        async with self._sessionmaker() as session:
            record = await session.get(PricingRuleRecord, rule_id)
            if record is None:
                return False
            await session.delete(record)
            await session.commit()
            return True


class SqlSlotStore:
    """Availability slots persisted in ``availability_slots``."""

    def __init__(self, sessionmaker: async_sessionmaker[AsyncSession]) -> None:
        self._sessionmaker = sessionmaker

    async def load_slot(
        self, camp_id: str, date: datetime.date
    ) -> AvailabilitySlot | None:
        async with self._sessionmaker() as session:
            record = await session.get(AvailabilitySlotRecord, (camp_id, date))
            return _slot_from_record(record) if record is not None else None

    async def list_slots(
        self, camp_id: str, start: datetime.date, end: datetime.date
    ) -> list[AvailabilitySlot]:
        async with self._sessionmaker() as session:
            result = await session.execute(
                select(AvailabilitySlotRecord)
                .where(
                    AvailabilitySlotRecord.camp_id == camp_id,
                    AvailabilitySlotRecord.date >= start,
                    AvailabilitySlotRecord.date <= end,
                )
                .order_by(AvailabilitySlotRecord.date)
            )
            return [_slot_from_record(record) for record in result.scalars().all()]

    async def create_slot(self, slot: AvailabilitySlot) -> bool:
        async with self._sessionmaker() as session:
            session.add(AvailabilitySlotRecord(**slot.model_dump()))
            try:
                await session.commit()
            except IntegrityError:
                await session.rollback()
                return False
            return True

    async def compare_and_swap_slot(
        self, expected_version: int, new_slot: AvailabilitySlot
    ) -> bool:
        async with self._sessionmaker() as session:
            result = await session.execute(
                update(AvailabilitySlotRecord)
                .where(
                    AvailabilitySlotRecord.camp_id == new_slot.camp_id,
                    AvailabilitySlotRecord.date == new_slot.date,
                    AvailabilitySlotRecord.version == expected_version,
                )
                .values(
                    capacity=new_slot.capacity,
                    booked=new_slot.booked,
                    is_available=new_slot.is_available,
                    base_price=new_slot.base_price,
                    version=new_slot.version,
                    notes=new_slot.notes,
                )
            )
            await session.commit()
            return result.rowcount == 1


class SqlConfigStore:
    """Dynamic pricing configuration persisted in ``dynamic_pricing_configs``."""

    def __init__(self, sessionmaker: async_sessionmaker[AsyncSession]) -> None:
        self._sessionmaker = sessionmaker

    async def load_config(self, camp_id: str) -> DynamicPricingConfig | None:
        async with self._sessionmaker() as session:
            record = await session.get(DynamicPricingConfigRecord, camp_id)
            if record is None:
                return None
            return DynamicPricingConfig.model_validate(record)

    async def save_config(self, config: DynamicPricingConfig) -> None:
        async with self._sessionmaker() as session:
            await session.merge(DynamicPricingConfigRecord(**config.model_dump()))
            await session.commit()
