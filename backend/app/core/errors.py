"""Domain error taxonomy and its HTTP rendering."""
from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class DomainError(Exception):
    """Base class for errors raised by the goal/task services."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFoundError(DomainError):
    """No matching goal, task or invite for the caller."""

    status_code = status.HTTP_404_NOT_FOUND


class ValidationError(DomainError):
    """Missing or out-of-range input."""

    status_code = status.HTTP_400_BAD_REQUEST


class ActionItemIndexError(ValidationError, IndexError):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY


class InvalidStateError(DomainError):
    """A transition was attempted on a task that is no longer pending."""

    status_code = status.HTTP_409_CONFLICT


class AlreadyProcessedError(InvalidStateError):
    """The stored status changed between read and conditional write."""


class ExternalGeneratorFailure(DomainError):
    """The plan generator errored or returned unusable content.

    Always recovered by the deterministic fallback plan; never rendered.
    """


class PersistenceFailure(DomainError):
    """A storage write failed; surfaced as an internal error."""


async def _domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("Request failed: %s", exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


async def _request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": jsonable_encoder(exc.errors())},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DomainError, _domain_error_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
