"""Domain error → HTTP response mapping, registered once on the app."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from autocrm.domain.errors import (
    ActionNotFoundError,
    ActionValidationError,
    AmbiguousMatchError,
    AuthorizationError,
    AutoCRMError,
    CustomerNotFoundError,
    ExecutionError,
    InterpretationError,
    InvalidTransitionError,
    TicketNotFoundError,
    TranscriptionError,
    UserNotFoundError,
)

logger = logging.getLogger(__name__)

# Most specific class first
STATUS_CODES: list[tuple[type[AutoCRMError], int]] = [
    (CustomerNotFoundError, 404),
    (TicketNotFoundError, 404),
    (UserNotFoundError, 404),
    (ActionNotFoundError, 404),
    (AmbiguousMatchError, 409),
    (InvalidTransitionError, 409),
    (ActionValidationError, 422),
    (AuthorizationError, 403),
    (InterpretationError, 502),
    (TranscriptionError, 502),
    (ExecutionError, 500),
]


def status_for(exc: AutoCRMError) -> int:
    for cls, status in STATUS_CODES:
        if isinstance(exc, cls):
            return status
    return 400


async def autocrm_error_handler(request: Request, exc: AutoCRMError) -> JSONResponse:
    status = status_for(exc)
    if status >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    else:
        logger.info("%s %s → %d %s", request.method, request.url.path, status, exc.code)

    content: dict = {"error": exc.message, "code": exc.code}
    if isinstance(exc, AmbiguousMatchError):
        content["candidates"] = exc.candidates
    return JSONResponse(status_code=status, content=content)


async def sqlalchemy_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.exception("Database error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=503,
        content={"error": "Database unavailable", "code": "database_error"},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AutoCRMError, autocrm_error_handler)
    app.add_exception_handler(SQLAlchemyError, sqlalchemy_error_handler)
