"""Map domain errors onto HTTP responses."""

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from protean.exceptions import ExpectedVersionError, ObjectNotFoundError, ValidationError

from fulfillment.errors import (
    ConcurrentModificationError,
    InvalidTransitionError,
    PersistenceFailure,
    UnauthorizedError,
)

logger = structlog.get_logger(__name__)


def _messages(exc: Exception):
    messages = getattr(exc, "messages", None)
    return messages if messages else str(exc)


async def _invalid_transition(request: Request, exc: InvalidTransitionError) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={
            "error": exc.message,
            "current_status": exc.current_status,
            "requested_status": exc.requested_status,
            "valid_transitions": exc.valid_transitions,
        },
    )


async def _validation_failed(request: Request, exc: ValidationError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": "Validation failed", "details": _messages(exc)})


async def _not_found(request: Request, exc: ObjectNotFoundError) -> JSONResponse:
    return JSONResponse(status_code=404, content={"error": "Not found", "details": _messages(exc)})


async def _unauthorized(request: Request, exc: UnauthorizedError) -> JSONResponse:
    return JSONResponse(status_code=403, content={"error": exc.message})


async def _concurrent_modification(request: Request, exc: ConcurrentModificationError) -> JSONResponse:
    return JSONResponse(
        status_code=409,
        content={
            "error": exc.message,
            "expected_status": exc.expected_status,
            "current_status": exc.actual_status,
        },
    )


async def _version_conflict(request: Request, exc: ExpectedVersionError) -> JSONResponse:
    # Raised when the stale write is only detected as the transaction commits
    logger.warning("Order version conflict", path=request.url.path, error=str(exc))
    return JSONResponse(
        status_code=409,
        content={"error": "Order was modified concurrently", "expected_status": None, "current_status": None},
    )


async def _persistence_failure(request: Request, exc: PersistenceFailure) -> JSONResponse:
    logger.error("Order store unavailable", path=request.url.path, error=exc.message)
    return JSONResponse(status_code=503, content={"error": "Order store unavailable, retry later"})


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(InvalidTransitionError, _invalid_transition)
    app.add_exception_handler(ValidationError, _validation_failed)
    app.add_exception_handler(ObjectNotFoundError, _not_found)
    app.add_exception_handler(UnauthorizedError, _unauthorized)
    app.add_exception_handler(ConcurrentModificationError, _concurrent_modification)
    app.add_exception_handler(ExpectedVersionError, _version_conflict)
    app.add_exception_handler(PersistenceFailure, _persistence_failure)
