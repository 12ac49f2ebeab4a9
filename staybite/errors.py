"""
Error taxonomy for marketplace operations.

Every failure is recovered at the route that triggered it and surfaced as a
JSON ``{"detail": ...}`` body with an action-specific message. Nothing is
retried automatically.
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Status codes for known error categories
# ---------------------------------------------------------------------------

STATUS_BACKEND_UNAVAILABLE = 503
STATUS_VALIDATION = 422
STATUS_NOT_AUTHENTICATED = 401
STATUS_FORBIDDEN = 403
STATUS_NOT_FOUND = 404


class MarketplaceError(Exception):
    status_code: int = 500
    default_detail: str = "Something went wrong"

    def __init__(self, detail: str | None = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class BackendFailure(MarketplaceError):
    """A database or storage call failed."""
    status_code = STATUS_BACKEND_UNAVAILABLE
    default_detail = "Service temporarily unavailable"


class ValidationFailed(MarketplaceError):
    """Input rejected before any database or storage round trip."""
    status_code = STATUS_VALIDATION
    default_detail = "Invalid input"


class NotAuthenticated(MarketplaceError):
    status_code = STATUS_NOT_AUTHENTICATED
    default_detail = "Please sign in to continue"


class Forbidden(MarketplaceError):
    status_code = STATUS_FORBIDDEN
    default_detail = "Not authorized"


class NotFound(MarketplaceError):
    status_code = STATUS_NOT_FOUND
    default_detail = "Not found"


# Exceptions raised by collaborators that count as backend failures
BACKEND_EXCEPTIONS: tuple[type[Exception], ...] = (SQLAlchemyError, OSError)


@contextmanager
def backend_call(db: Session | None, action: str) -> Iterator[None]:
    """
    Wrap a database/storage interaction. On failure the session is rolled
    back, the error logged, and a BackendFailure with the message
    "Failed to <action>" raised in its place.
    """
    try:
        yield
    except BACKEND_EXCEPTIONS as exc:
        if db is not None:
            db.rollback()
        logger.exception("Backend call failed while trying to %s", action)
        raise BackendFailure(f"Failed to {action}") from exc


async def _marketplace_error_handler(request: Request, exc: MarketplaceError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s -> %s: %s", request.method, request.url.path, exc.status_code, exc.detail)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(MarketplaceError, _marketplace_error_handler)
