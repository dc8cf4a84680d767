"""Price quotes and reservations at the quoted price."""

from __future__ import annotations

import asyncio
import datetime
import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

from campquote.core.errors import (
    ConcurrencyConflictError,
    SlotBlockedError,
    TransientReservationError,
    ValidationError,
)
from campquote.schemas.availability import AvailabilitySlot
from campquote.schemas.dynamic_pricing import DynamicPricingConfig, UpdateFrequency
from campquote.schemas.quote import BookingContext, today_utc
from campquote.services import price_composer
from campquote.services.availability_ledger import AvailabilityLedger
from campquote.services.price_composer import BreakdownItem, ComposedPrice
from campquote.services.rule_catalog import RuleCatalog
from campquote.services.rule_matcher import RuleMatcher
from campquote.stores.base import ConfigStore

logger = logging.getLogger(__name__)

MAX_CALENDAR_DAYS = 366


@dataclass(slots=True)
class Quote:
    """Price and capacity decision for one booking context."""

    camp_id: str
    date: datetime.date
    available: bool
    remaining_capacity: int
    base_price: Decimal
    final_price: Decimal
    multiplier: Decimal
    breakdown: list[BreakdownItem] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        composed = ComposedPrice(
            base_price=self.base_price,
            final_price=self.final_price,
            multiplier=self.multiplier,
            breakdown=self.breakdown,
        ).to_dict()
        return {
            "camp_id": self.camp_id,
            "date": self.date.isoformat(),
            "available": self.available,
            "remaining_capacity": self.remaining_capacity,
            **composed,
        }


@dataclass(slots=True)
class Reservation:
    """Units committed at the price computed in the same call."""

    quote: Quote
    reserved_count: int
    slot_version: int

    @property
    def charged_price(self) -> Decimal:
        return self.quote.final_price

    def to_dict(self) -> dict[str, Any]:
        return {
            "quote": self.quote.to_dict(),
            "reserved_count": self.reserved_count,
            "slot_version": self.slot_version,
            "charged_price": f"{self.charged_price:.2f}",
        }


@dataclass(slots=True)
class CalendarDay:
    """Advisory dynamic price for one day of the organizer calendar."""

    date: datetime.date
    status: str
    available: bool
    remaining_capacity: int
    base_price: Decimal
    dynamic_price: Decimal
    multiplier: Decimal


def validate_context(context: BookingContext) -> None:
    """Reject malformed booking contexts before any matching happens."""
    if not context.camp_id or not context.camp_id.strip():
        raise ValidationError("Booking context requires a camp id")
    if context.participant_count < 1:
        raise ValidationError("Participant count must be at least 1")
    if context.requested_count is not None and context.requested_count < 1:
        raise ValidationError("Requested unit count must be at least 1")
    if context.end_date is not None and context.end_date < context.date:
        raise ValidationError("Booking end date must not be before its start date")


class QuoteService:
    """Orchestrates catalog, ledger, matcher and composer for checkout."""

    def __init__(
        self,
        *,
        catalog: RuleCatalog,
        ledger: AvailabilityLedger,
        matcher: RuleMatcher,
        configs: ConfigStore,
        max_attempts: int = 3,
        retry_backoff: float = 0.05,
        default_min_multiplier: Decimal = Decimal("0.7"),
        default_max_multiplier: Decimal = Decimal("2.0"),
        default_update_frequency: UpdateFrequency = UpdateFrequency.DAILY,
    ) -> None:
        self._catalog = catalog
        self._ledger = ledger
        self._matcher = matcher
        self._configs = configs
        self._max_attempts = max(1, max_attempts)
        self._retry_backoff = retry_backoff
        self._default_min_multiplier = default_min_multiplier
        self._default_max_multiplier = default_max_multiplier
        self._default_update_frequency = default_update_frequency

    async def get_dynamic_config(self, camp_id: str) -> DynamicPricingConfig:
        config = await self._configs.load_config(camp_id)
        if config is not None:
            return config
        return DynamicPricingConfig(
            camp_id=camp_id,
            enabled=False,
            min_multiplier=self._default_min_multiplier,
            max_multiplier=self._default_max_multiplier,
            update_frequency=self._default_update_frequency,
        )

    async def set_dynamic_config(
        self, config: DynamicPricingConfig
    ) -> DynamicPricingConfig:
        if config.min_multiplier > config.max_multiplier:
            raise ValidationError("min_multiplier must not exceed max_multiplier")
        await self._configs.save_config(config)
        self._catalog.invalidate([config.camp_id])
        logger.info(
            "Dynamic pricing for %s %s (%s-%s, %s)",
            config.camp_id,
            "enabled" if config.enabled else "disabled",
            config.min_multiplier,
            config.max_multiplier,
            config.update_frequency.value,
        )
        return config

    async def get_quote(self, context: BookingContext) -> Quote:
        """Advisory quote; reads only, safe to run concurrently."""
        validate_context(context)
        slot = await self._ledger.load(context.camp_id, context.date)
        self._ensure_open(slot)
        config = await self.get_dynamic_config(context.camp_id)
        return await self._price(context, slot, config)

    async def reserve_and_quote(self, context: BookingContext) -> Reservation:
        """Quote and reserve under one serialization so the charge matches."""
        validate_context(context)
        config = await self.get_dynamic_config(context.camp_id)
        attempt = 0
        while True:
            attempt += 1
            try:
                async with self._ledger.serialized(context.camp_id, context.date):
                    slot = await self._ledger.load(context.camp_id, context.date)
                    self._ensure_open(slot)
                    quote = await self._price(context, slot, config, locked=True)
                    updated = await self._ledger.reserve(
                        context.camp_id,
                        context.date,
                        context.units,
                        expected_version=slot.version,
                        announce=False,
                    )
            except ConcurrencyConflictError as exc:
                if attempt >= self._max_attempts:
                    logger.warning(
                        "Giving up on %s %s after %s conflicting attempt(s)",
                        context.camp_id,
                        context.date.isoformat(),
                        attempt,
                    )
                    raise TransientReservationError(
                        f"Slot {context.camp_id} {context.date} kept changing;"
                        " try again",
                        attempts=attempt,
                    ) from exc
                delay = self._retry_backoff * (2 ** (attempt - 1))
                logger.warning(
                    "Retrying reservation on %s %s in %.3fs (attempt %s): %s",
                    context.camp_id,
                    context.date.isoformat(),
                    delay,
                    attempt,
                    exc,
                )
                await asyncio.sleep(delay)
                continue

            await self._ledger.announce(slot, updated)
            quote.remaining_capacity = updated.remaining
            logger.info(
                "Reserved %s unit(s) on %s %s at %s",
                context.units,
                context.camp_id,
                context.date.isoformat(),
                quote.final_price,
            )
            return Reservation(
                quote=quote,
                reserved_count=context.units,
                slot_version=updated.version,
            )

    async def release(
        self, camp_id: str, date: datetime.date, count: int
    ) -> AvailabilitySlot:
        return await self._ledger.release(camp_id, date, count)

    async def price_calendar(
        self,
        camp_id: str,
        start: datetime.date,
        end: datetime.date,
        *,
        participant_count: int = 1,
        as_of: datetime.date | None = None,
    ) -> list[CalendarDay]:
        """Advisory per-day prices for every opened date in ``[start, end]``."""
        if end < start:
            raise ValidationError("Calendar end date must not be before its start date")
        if (end - start).days >= MAX_CALENDAR_DAYS:
            raise ValidationError(f"Calendar range is limited to {MAX_CALENDAR_DAYS} days")
        slots = await self._ledger.list_slots(camp_id, start, end)
        config = await self.get_dynamic_config(camp_id)
        days: list[CalendarDay] = []
        for slot in slots:
            if not slot.is_available:
                days.append(
                    CalendarDay(
                        date=slot.date,
                        status=slot.status_label.value,
                        available=False,
                        remaining_capacity=slot.remaining,
                        base_price=slot.base_price,
                        dynamic_price=price_composer.to_money(slot.base_price),
                        multiplier=Decimal("1"),
                    )
                )
                continue
            context = BookingContext(
                camp_id=camp_id,
                date=slot.date,
                participant_count=participant_count,
                as_of=as_of or today_utc(),
            )
            validate_context(context)
            quote = await self._price(context, slot, config)
            days.append(
                CalendarDay(
                    date=slot.date,
                    status=slot.status_label.value,
                    available=quote.available,
                    remaining_capacity=quote.remaining_capacity,
                    base_price=quote.base_price,
                    dynamic_price=quote.final_price,
                    multiplier=quote.multiplier,
                )
            )
        return days

    @staticmethod
    def _ensure_open(slot: AvailabilitySlot) -> None:
        if not slot.is_available:
            raise SlotBlockedError(
                f"Slot {slot.camp_id} {slot.date} is blocked",
                camp_id=slot.camp_id,
                date=slot.date,
            )

    async def _price(
        self,
        context: BookingContext,
        slot: AvailabilitySlot,
        config: DynamicPricingConfig,
        *,
        locked: bool = False,
    ) -> Quote:
        """Price against ``slot``; under the lock occupancy comes from it too."""
        rules = await self._catalog.list_for_camp(
            context.camp_id, max_age=config.cadence_seconds
        )
        matched = await self._matcher.select(
            context,
            rules,
            snapshot=slot if locked else None,
            max_age=config.cadence_seconds,
        )
        composed = price_composer.compose(slot.base_price, matched, config)
        return Quote(
            camp_id=context.camp_id,
            date=context.date,
            available=slot.can_take(context.units),
            remaining_capacity=slot.remaining,
            base_price=slot.base_price,
            final_price=composed.final_price,
            multiplier=composed.multiplier,
            breakdown=composed.breakdown,
        )
