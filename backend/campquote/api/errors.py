"""Translate engine failures into HTTP responses."""

from __future__ import annotations

from typing import NoReturn

from fastapi import HTTPException, status

from campquote.core.errors import (
    BookingRejectedError,
    CapacityExceededError,
    ConcurrencyConflictError,
    LockTimeoutError,
    NotFoundError,
    QuoteEngineError,
    ValidationError,
)

RETRY_AFTER_SECONDS = "1"


def raise_http(error: QuoteEngineError) -> NoReturn:
    detail: str | dict[str, object] = str(error)
    headers: dict[str, str] | None = None
    status_code = status.HTTP_400_BAD_REQUEST
    if isinstance(error, NotFoundError):
        status_code = status.HTTP_404_NOT_FOUND
    elif isinstance(error, CapacityExceededError):
        status_code = status.HTTP_409_CONFLICT
        detail = {
            "message": str(error),
            "remaining": error.remaining,
            "requested": error.requested,
        }
    elif isinstance(error, BookingRejectedError):
        status_code = status.HTTP_409_CONFLICT
    elif isinstance(error, (ConcurrencyConflictError, LockTimeoutError)):
        status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        headers = {"Retry-After": RETRY_AFTER_SECONDS}
    elif isinstance(error, ValidationError):
        status_code = status.HTTP_400_BAD_REQUEST
    raise HTTPException(status_code=status_code, detail=detail, headers=headers) from error
