"""Global exception handlers for the FastAPI application.

Every error leaves the API as an RFC 7807 problem details document.
Repository and pagination errors are mapped to application exceptions:

    NotFoundError                -> 404
    UniqueConstraintError        -> 409
    InvalidFilterError           -> 400
    InvalidPaginationTokenError  -> 400
    RequestValidationError       -> 422
    anything else                -> 500
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from outbox_service.core.database.exceptions import (
    InvalidFilterError,
    NotFoundError,
    UniqueConstraintError,
)
from outbox_service.core.exceptions import (
    AppException,
    BadRequestException,
    ConflictException,
    NotFoundException,
)
from outbox_service.core.pagination import InvalidPaginationTokenError
from outbox_service.core.schemas import (
    ProblemDetails,
    ValidationErrorItem,
    ValidationProblemDetails,
)
from outbox_service.core.settings import get_app_settings

logger = logging.getLogger(__name__)

PROBLEM_JSON = "application/problem+json"


def _create_problem_detail(
    status_code: int,
    detail: str,
    type_: str = "about:blank",
    title: str = "Error",
    instance: str | None = None,
    extra: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Create an RFC 7807 problem details body.

    Args:
        status_code: HTTP status code.
        detail: Human-readable error description.
        type_: Error type identifier.
        title: Short human-readable summary.
        instance: URI identifying this occurrence.
        extra: Additional context information.

    Returns:
        Dictionary representing the problem detail.
    """
    problem = ProblemDetails(
        type=type_,
        title=title,
        status=status_code,
        detail=detail,
        instance=instance,
    )

    response_data = problem.model_dump(exclude_none=True)
    if extra:
        response_data.update(extra)
    return response_data


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Render an AppException as problem details."""
    logger.warning(
        "Application exception occurred",
        extra={
            "path": request.url.path,
            "method": request.method,
            "exception_type": exc.type,
            "status_code": exc.status_code,
            "detail": exc.detail,
        },
    )

    problem_data = _create_problem_detail(
        status_code=exc.status_code,
        detail=exc.detail,
        type_=exc.type,
        title=exc.title,
        instance=exc.instance or request.url.path,
        extra=exc.extra,
    )
    return JSONResponse(status_code=exc.status_code, content=problem_data, media_type=PROBLEM_JSON)


async def not_found_error_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    return await app_exception_handler(
        request,
        NotFoundException(
            detail=exc.message,
            type=f"{exc.model_name.lower()}-not-found",
        ),
    )


async def unique_constraint_error_handler(
    request: Request, exc: UniqueConstraintError
) -> JSONResponse:
    return await app_exception_handler(
        request,
        ConflictException(detail=exc.message, type="unique-constraint"),
    )


async def bad_request_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle malformed page tokens and unknown filters."""
    type_ = "invalid-page-token" if isinstance(exc, InvalidPaginationTokenError) else "invalid-filter"
    detail = exc.message if isinstance(exc, InvalidFilterError) else str(exc)
    return await app_exception_handler(request, BadRequestException(detail=detail, type=type_))


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Convert request validation errors into problem details with field errors."""
    validation_errors = [
        ValidationErrorItem(
            field=".".join(str(loc) for loc in error["loc"]),
            message=error["msg"],
            type=error["type"],
        )
        for error in exc.errors()
    ]

    logger.warning(
        "Request validation failed",
        extra={
            "path": request.url.path,
            "method": request.method,
            "error_count": len(validation_errors),
        },
    )

    problem = ValidationProblemDetails(
        type="validation-error",
        title="Validation Error",
        status=status.HTTP_422_UNPROCESSABLE_ENTITY,
        detail=f"Request validation failed for {len(validation_errors)} field(s)",
        instance=request.url.path,
        errors=validation_errors,
    )
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=problem.model_dump(exclude_none=True),
        media_type=PROBLEM_JSON,
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all: log the traceback and return a generic 500."""
    logger.error(
        "Unexpected exception occurred",
        extra={
            "path": request.url.path,
            "method": request.method,
            "exception_type": type(exc).__name__,
            "exception_message": str(exc),
        },
        exc_info=True,
    )

    # Don't expose internal details outside debug mode
    detail = (
        str(exc)
        if get_app_settings().debug
        else "An unexpected error occurred while processing your request"
    )
    problem_data = _create_problem_detail(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=detail,
        type_="internal-error",
        title="Internal Server Error",
        instance=request.url.path,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=problem_data,
        media_type=PROBLEM_JSON,
    )


def configure_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers on ``app``.

    Example:
        app = FastAPI()
        configure_exception_handlers(app)
    """
    app.add_exception_handler(AppException, app_exception_handler)

    # Repository and pagination errors
    app.add_exception_handler(NotFoundError, not_found_error_handler)
    app.add_exception_handler(UniqueConstraintError, unique_constraint_error_handler)
    app.add_exception_handler(InvalidFilterError, bad_request_error_handler)
    app.add_exception_handler(InvalidPaginationTokenError, bad_request_error_handler)

    app.add_exception_handler(RequestValidationError, validation_exception_handler)

    # Catch-all for unexpected exceptions
    app.add_exception_handler(Exception, generic_exception_handler)

    logger.debug("Exception handlers configured")


__all__ = ["configure_exception_handlers"]
