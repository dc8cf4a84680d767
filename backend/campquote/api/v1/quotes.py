"""Checkout quote and reservation API."""

from __future__ import annotations

import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, Query, status

from campquote.api import deps
from campquote.api.errors import raise_http
from campquote.core.errors import QuoteEngineError
from campquote.schemas.quote import (
    CalendarDayRead,
    QuoteRead,
    QuoteRequest,
    ReservationRead,
)
from campquote.services.engine import PricingEngine

router = APIRouter()


@router.post("/quotes", response_model=QuoteRead, summary="Price a booking")
async def create_quote(
    payload: QuoteRequest,
    engine: Annotated[PricingEngine, Depends(deps.get_engine)],
) -> QuoteRead:
    try:
        quote = await engine.quotes.get_quote(payload.to_context())
    except QuoteEngineError as exc:
        raise_http(exc)
    return QuoteRead.model_validate(quote.to_dict())


@router.post(
    "/quotes/reserve",
    response_model=ReservationRead,
    status_code=status.HTTP_201_CREATED,
    summary="Reserve units at the quoted price",
)
async def reserve(
    payload: QuoteRequest,
    engine: Annotated[PricingEngine, Depends(deps.get_engine)],
) -> ReservationRead:
    try:
        reservation = await engine.quotes.reserve_and_quote(payload.to_context())
    except QuoteEngineError as exc:
        raise_http(exc)
    return ReservationRead.model_validate(reservation.to_dict())


@router.get(
    "/camps/{camp_id}/price-calendar",
    response_model=list[CalendarDayRead],
    summary="Advisory dynamic prices per day",
)
async def price_calendar(
    camp_id: str,
    start: Annotated[datetime.date, Query()],
    end: Annotated[datetime.date, Query()],
    engine: Annotated[PricingEngine, Depends(deps.get_engine)],
    participants: Annotated[int, Query(ge=1)] = 1,
) -> list[CalendarDayRead]:
    try:
        days = await engine.quotes.price_calendar(
            camp_id, start, end, participant_count=participants
        )
    except QuoteEngineError as exc:
        raise_http(exc)
    return [
        CalendarDayRead(
            date=day.date,
            status=day.status,
            available=day.available,
            remaining_capacity=day.remaining_capacity,
            base_price=day.base_price,
            dynamic_price=day.dynamic_price,
            multiplier=day.multiplier,
        )
        for day in days
    ]
