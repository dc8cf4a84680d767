"""Health check endpoints."""

from datetime import UTC, datetime

from fastapi import APIRouter, Request

from campquote.core.config import get_settings

router = APIRouter()


@router.get("", summary="Service health status")
async def healthcheck(request: Request) -> dict[str, str]:
    """Return application health metadata and whether the engine is wired."""
    settings = get_settings()
    engine = getattr(request.app.state, "engine", None)
    return {
        "status": "ok",
        "service": settings.app_name,
        "timestamp": datetime.now(UTC).isoformat(),
        "environment": settings.app_env,
        "store_backend": settings.store_backend,
        "engine": "ready" if engine is not None else "starting",
    }
