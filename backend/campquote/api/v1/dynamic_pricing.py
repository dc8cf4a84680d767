"""Per-camp dynamic pricing configuration API."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends

from campquote.api import deps
from campquote.api.errors import raise_http
from campquote.core.errors import QuoteEngineError
from campquote.schemas.dynamic_pricing import DynamicPricingConfig, DynamicPricingWrite
from campquote.services.engine import PricingEngine

router = APIRouter(prefix="/camps/{camp_id}/dynamic-pricing")


@router.get(
    "", response_model=DynamicPricingConfig, summary="Get dynamic pricing settings"
)
async def get_dynamic_pricing(
    camp_id: str,
    engine: Annotated[PricingEngine, Depends(deps.get_engine)],
) -> DynamicPricingConfig:
    return await engine.quotes.get_dynamic_config(camp_id)


@router.put(
    "", response_model=DynamicPricingConfig, summary="Replace dynamic pricing settings"
)
async def put_dynamic_pricing(
    camp_id: str,
    payload: DynamicPricingWrite,
    engine: Annotated[PricingEngine, Depends(deps.get_engine)],
) -> DynamicPricingConfig:
    try:
        return await engine.quotes.set_dynamic_config(payload.to_config(camp_id))
    except QuoteEngineError as exc:
        raise_http(exc)
