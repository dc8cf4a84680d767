"""Availability calendar management API."""

from __future__ import annotations

import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, Query, status

from campquote.api import deps
from campquote.api.errors import raise_http
from campquote.core.errors import QuoteEngineError
from campquote.schemas.availability import (
    SlotBulkUpdate,
    SlotOpen,
    SlotRead,
    SlotRelease,
    SlotUpdate,
)
from campquote.services.engine import PricingEngine

router = APIRouter(prefix="/camps/{camp_id}/slots")


@router.get("", response_model=list[SlotRead], summary="List slots in a date range")
async def list_slots(
    camp_id: str,
    start: Annotated[datetime.date, Query()],
    end: Annotated[datetime.date, Query()],
    engine: Annotated[PricingEngine, Depends(deps.get_engine)],
) -> list[SlotRead]:
    try:
        slots = await engine.ledger.list_slots(camp_id, start, end)
    except QuoteEngineError as exc:
        raise_http(exc)
    return [SlotRead.from_slot(slot) for slot in slots]


@router.post(
    "",
    response_model=SlotRead,
    status_code=status.HTTP_201_CREATED,
    summary="Open a date for sale",
)
async def open_slot(
    camp_id: str,
    payload: SlotOpen,
    engine: Annotated[PricingEngine, Depends(deps.get_engine)],
) -> SlotRead:
    try:
        slot = await engine.ledger.open_slot(
            camp_id,
            payload.date,
            capacity=payload.capacity,
            base_price=payload.base_price,
            notes=payload.notes,
        )
    except QuoteEngineError as exc:
        raise_http(exc)
    return SlotRead.from_slot(slot)


@router.post(
    "/bulk-update", response_model=list[SlotRead], summary="Edit several dates"
)
async def bulk_update_slots(
    camp_id: str,
    payload: SlotBulkUpdate,
    engine: Annotated[PricingEngine, Depends(deps.get_engine)],
) -> list[SlotRead]:
    try:
        slots = await engine.ledger.bulk_update(
            camp_id,
            payload.dates,
            capacity=payload.capacity,
            base_price=payload.base_price,
            notes=payload.notes,
        )
    except QuoteEngineError as exc:
        raise_http(exc)
    return [SlotRead.from_slot(slot) for slot in slots]


@router.get("/{slot_date}", response_model=SlotRead, summary="Get one slot")
async def get_slot(
    camp_id: str,
    slot_date: datetime.date,
    engine: Annotated[PricingEngine, Depends(deps.get_engine)],
) -> SlotRead:
    try:
        slot = await engine.ledger.load(camp_id, slot_date)
    except QuoteEngineError as exc:
        raise_http(exc)
    return SlotRead.from_slot(slot)


@router.patch("/{slot_date}", response_model=SlotRead, summary="Edit one slot")
async def update_slot(
    camp_id: str,
    slot_date: datetime.date,
    payload: SlotUpdate,
    engine: Annotated[PricingEngine, Depends(deps.get_engine)],
) -> SlotRead:
    try:
        slot = await engine.ledger.update_slot(
            camp_id,
            slot_date,
            capacity=payload.capacity,
            base_price=payload.base_price,
            notes=payload.notes,
        )
    except QuoteEngineError as exc:
        raise_http(exc)
    return SlotRead.from_slot(slot)


@router.post("/{slot_date}/block", response_model=SlotRead, summary="Block a date")
async def block_slot(
    camp_id: str,
    slot_date: datetime.date,
    engine: Annotated[PricingEngine, Depends(deps.get_engine)],
) -> SlotRead:
    try:
        slot = await engine.ledger.block(camp_id, slot_date)
    except QuoteEngineError as exc:
        raise_http(exc)
    return SlotRead.from_slot(slot)


@router.post(
    "/{slot_date}/unblock", response_model=SlotRead, summary="Unblock a date"
)
async def unblock_slot(
    camp_id: str,
    slot_date: datetime.date,
    engine: Annotated[PricingEngine, Depends(deps.get_engine)],
) -> SlotRead:
    try:
        slot = await engine.ledger.unblock(camp_id, slot_date)
    except QuoteEngineError as exc:
        raise_http(exc)
    return SlotRead.from_slot(slot)


@router.post(
    "/{slot_date}/release", response_model=SlotRead, summary="Release booked units"
)
async def release_units(
    camp_id: str,
    slot_date: datetime.date,
    payload: SlotRelease,
    engine: Annotated[PricingEngine, Depends(deps.get_engine)],
) -> SlotRead:
    try:
        slot = await engine.quotes.release(camp_id, slot_date, payload.count)
    except QuoteEngineError as exc:
        raise_http(exc)
    return SlotRead.from_slot(slot)
