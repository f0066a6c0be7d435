# File: expense_tracker/core/errors.py

"""
Domain failures and their HTTP mapping.

Services raise these; the handlers registered by ``register_exception_handlers``
turn them into JSON responses of the form ``{"detail": "..."}``.
"""

import structlog
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

logger = structlog.get_logger(__name__)


class ExpenseTrackerError(Exception):
    """Base class for failures the API knows how to report."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Internal server error"

    def __init__(self, detail: str | None = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class AuthFailure(ExpenseTrackerError):
    """Missing, malformed, expired or badly signed credentials."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Could not validate credentials"


class ValidationFailure(ExpenseTrackerError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid request"


class PersistenceFailure(ExpenseTrackerError):
    """The database rejected the operation or could not be reached."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = "Database unavailable"


class NotFoundFailure(PersistenceFailure):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Resource not found"


class ConflictFailure(PersistenceFailure):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Resource conflicts with existing data"


class MigrationError(RuntimeError):
    """Raised when the schema history cannot be reconciled with the scripts on disk."""


async def handle_expense_tracker_error(request: Request, exc: ExpenseTrackerError) -> JSONResponse:
    logger.warning(
        "request_failed",
        error=type(exc).__name__,
        detail=exc.detail,
        method=request.method,
        path=request.url.path,
        status_code=exc.status_code,
    )
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthFailure) else None
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail},
        headers=headers,
    )


async def handle_database_error(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    # Anything the services did not translate themselves.
    if isinstance(exc, IntegrityError):
        failure: ExpenseTrackerError = ConflictFailure("Operation violates a data constraint")
    else:
        logger.error("database_error", error=str(exc), path=request.url.path)
        failure = PersistenceFailure()
    return await handle_expense_tracker_error(request, failure)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ExpenseTrackerError, handle_expense_tracker_error)
    app.add_exception_handler(SQLAlchemyError, handle_database_error)
