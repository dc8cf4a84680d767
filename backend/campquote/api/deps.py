"""Common API dependencies."""

from __future__ import annotations

from fastapi import HTTPException, Request, status

from campquote.services.engine import PricingEngine


def get_engine(request: Request) -> PricingEngine:
    """Return the engine built for this application in the lifespan handler."""
    engine = getattr(request.app.state, "engine", None)
    if engine is None:  # pragma: no cover - lifespan always installs it
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Pricing engine not initialised",
        )
    return engine
