"""Versioned API router."""

from fastapi import APIRouter

from . import dynamic_pricing, health, pricing_rules, quotes, slots

router = APIRouter()
router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(pricing_rules.router, tags=["pricing-rules"])
router.include_router(slots.router, tags=["slots"])
router.include_router(dynamic_pricing.router, tags=["dynamic-pricing"])
router.include_router(quotes.router, tags=["quotes"])

__all__ = ["router"]
