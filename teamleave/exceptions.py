from __future__ import annotations

import logging
from datetime import date
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel

logger = logging.getLogger(__name__)


class ErrorResponse(BaseModel):
    """Standard error response schema."""

    error: str
    detail: str | None = None
    status_code: int
    context: dict[str, Any] | None = None


class AppError(Exception):
    """Base application exception."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.context = context
        super().__init__(self.message)


class ValidationError(AppError):
    """Missing or malformed input."""

    status_code = status.HTTP_400_BAD_REQUEST


class InvalidRangeError(ValidationError):
    """A date range whose start falls after its end."""

    def __init__(self, start: date, end: date) -> None:
        super().__init__(
            f"Start date {start.isoformat()} is after end date {end.isoformat()}",
            context={"start_date": start.isoformat(), "end_date": end.isoformat()},
        )
        self.start = start
        self.end = end


class BlockedDateError(AppError):
    """A candidate leave date falls inside a block period."""

    status_code = status.HTTP_409_CONFLICT

    def __init__(self, blocked_date: date, reason: str) -> None:
        super().__init__(
            f"{blocked_date.isoformat()} is blocked: {reason}",
            context={"blocked_date": blocked_date.isoformat(), "reason": reason},
        )
        self.blocked_date = blocked_date
        self.reason = reason


class OverlappingRequestError(AppError):
    """The user already holds an active request on one of the candidate days."""

    status_code = status.HTTP_409_CONFLICT


class PermissionDeniedError(AppError):
    """The actor lacks a role required for the operation."""

    status_code = status.HTTP_403_FORBIDDEN


class AuthenticationError(AppError):
    """The actor could not be identified."""

    status_code = status.HTTP_401_UNAUTHORIZED


class InvalidStateError(AppError):
    """The entity is not in a state that permits the transition."""

    status_code = status.HTTP_409_CONFLICT


class InvalidRoleError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST


class RoleCountError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST


class SelfDemotionError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND


class DuplicateError(AppError):
    status_code = status.HTTP_409_CONFLICT


async def _app_exception_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        logger.error("%s on %s %s: %s", type(exc).__name__, request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(
            error=type(exc).__name__,
            detail=exc.message,
            status_code=exc.status_code,
            context=exc.context,
        ).model_dump(),
    )


async def _validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=ErrorResponse(
            error="ValidationError",
            detail=str(exc.errors()),
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        ).model_dump(),
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """Register exception handlers on the application."""
    app.add_exception_handler(AppError, _app_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)  # type: ignore[arg-type]
