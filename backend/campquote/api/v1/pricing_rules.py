"""Organizer pricing rule management API."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from campquote.api import deps
from campquote.api.errors import raise_http
from campquote.core.errors import QuoteEngineError
from campquote.schemas.pricing_rule import PricingRule, PricingRuleWrite, RuleToggle
from campquote.services.engine import PricingEngine

router = APIRouter(prefix="/camps/{camp_id}/pricing-rules")


async def _get_camp_rule(
    engine: PricingEngine, camp_id: str, rule_id: str
) -> PricingRule:
    try:
        rule = await engine.catalog.get(rule_id)
    except QuoteEngineError as exc:
        raise_http(exc)
    if not rule.applies_to(camp_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Pricing rule not found"
        )
    return rule


def _ensure_camp_listed(camp_id: str, payload: PricingRuleWrite) -> None:
    if camp_id not in payload.applicable_camps:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Rule must apply to the camp in the path",
        )


@router.get("", response_model=list[PricingRule], summary="List pricing rules")
async def list_pricing_rules(
    camp_id: str,
    engine: Annotated[PricingEngine, Depends(deps.get_engine)],
) -> list[PricingRule]:
    return await engine.catalog.list_all_for_camp(camp_id)


@router.post(
    "",
    response_model=PricingRule,
    status_code=status.HTTP_201_CREATED,
    summary="Create pricing rule",
)
async def create_pricing_rule(
    camp_id: str,
    payload: PricingRuleWrite,
    engine: Annotated[PricingEngine, Depends(deps.get_engine)],
) -> PricingRule:
    _ensure_camp_listed(camp_id, payload)
    try:
        return await engine.catalog.add(payload.to_rule())
    except QuoteEngineError as exc:
        raise_http(exc)


@router.get("/{rule_id}", response_model=PricingRule, summary="Get pricing rule")
async def get_pricing_rule(
    camp_id: str,
    rule_id: str,
    engine: Annotated[PricingEngine, Depends(deps.get_engine)],
) -> PricingRule:
    return await _get_camp_rule(engine, camp_id, rule_id)


@router.put("/{rule_id}", response_model=PricingRule, summary="Replace pricing rule")
async def update_pricing_rule(
    camp_id: str,
    rule_id: str,
    payload: PricingRuleWrite,
    engine: Annotated[PricingEngine, Depends(deps.get_engine)],
) -> PricingRule:
    await _get_camp_rule(engine, camp_id, rule_id)
    if payload.id is not None and payload.id != rule_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Rule id mismatch"
        )
    try:
        return await engine.catalog.update(payload.to_rule(rule_id=rule_id))
    except QuoteEngineError as exc:
        raise_http(exc)


@router.patch(
    "/{rule_id}/status", response_model=PricingRule, summary="Enable or disable rule"
)
async def toggle_pricing_rule(
    camp_id: str,
    rule_id: str,
    payload: RuleToggle,
    engine: Annotated[PricingEngine, Depends(deps.get_engine)],
) -> PricingRule:
    await _get_camp_rule(engine, camp_id, rule_id)
    try:
        return await engine.catalog.set_active(rule_id, payload.active)
    except QuoteEngineError as exc:
        raise_http(exc)


@router.delete(
    "/{rule_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete pricing rule"
)
async def delete_pricing_rule(
    camp_id: str,
    rule_id: str,
    engine: Annotated[PricingEngine, Depends(deps.get_engine)],
) -> None:
    await _get_camp_rule(engine, camp_id, rule_id)
    try:
        await engine.catalog.remove(rule_id)
    except QuoteEngineError as exc:
        raise_http(exc)
