"""Centralized error handling.

Maps the domain exception taxonomy, request validation failures and stray
database errors onto one JSON envelope:

    {"error": {"category": ..., "code": ..., "detail": ..., "suggestions"?: [...], "metadata"?: {...}}}
"""

import logging
from typing import Any
from uuid import UUID

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError, OperationalError

from progress_engine.exceptions import (
    ConflictError,
    DomainError,
    NotEnrolledError,
    ResourceNotFoundError,
    StorageUnavailableError,
    UnauthorizedError,
    ValidationError,
)


logger = logging.getLogger(__name__)


class ErrorCategory:
    """Error category constants."""

    AUTHENTICATION = "AUTHENTICATION_ERROR"
    AUTHORIZATION = "AUTHORIZATION_ERROR"
    VALIDATION = "VALIDATION_ERROR"
    DATABASE = "DATABASE_ERROR"
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"
    CONFLICT = "CONFLICT_ERROR"
    INTERNAL = "INTERNAL_ERROR"


class ErrorCode:
    """Specific error codes for better client handling."""

    UNAUTHORIZED = "UNAUTHORIZED"
    NOT_ENROLLED = "NOT_ENROLLED"
    INVALID_INPUT = "INVALID_INPUT"
    NOT_FOUND = "NOT_FOUND"
    CONCURRENT_UPDATE = "CONCURRENT_UPDATE"
    STORAGE_UNAVAILABLE = "STORAGE_UNAVAILABLE"
    INTERNAL = "INTERNAL_ERROR"


# (error type, category, code, status, suggestions); first isinstance match wins
_DOMAIN_ERROR_MAP: list[tuple[type[DomainError], str, str, int, list[str] | None]] = [
    (UnauthorizedError, ErrorCategory.AUTHENTICATION, ErrorCode.UNAUTHORIZED, status.HTTP_401_UNAUTHORIZED, None),
    (ResourceNotFoundError, ErrorCategory.RESOURCE_NOT_FOUND, ErrorCode.NOT_FOUND, status.HTTP_404_NOT_FOUND, None),
    (
        NotEnrolledError,
        ErrorCategory.AUTHORIZATION,
        ErrorCode.NOT_ENROLLED,
        status.HTTP_403_FORBIDDEN,
        ["Enroll in the course first"],
    ),
    (ValidationError, ErrorCategory.VALIDATION, ErrorCode.INVALID_INPUT, status.HTTP_400_BAD_REQUEST, None),
    (
        ConflictError,
        ErrorCategory.CONFLICT,
        ErrorCode.CONCURRENT_UPDATE,
        status.HTTP_409_CONFLICT,
        ["Retry the request"],
    ),
    (
        StorageUnavailableError,
        ErrorCategory.DATABASE,
        ErrorCode.STORAGE_UNAVAILABLE,
        status.HTTP_503_SERVICE_UNAVAILABLE,
        ["Please try again later"],
    ),
]


def format_error_response(
    category: str,
    code: str,
    detail: str,
    status_code: int,
    suggestions: list[str] | None = None,
    metadata: dict[str, Any] | None = None,
) -> JSONResponse:
    """Build the error envelope; empty suggestions/metadata are left out."""
    body: dict[str, Any] = {"category": category, "code": code, "detail": detail}
    if suggestions:
        body["suggestions"] = suggestions
    if metadata:
        body["metadata"] = metadata
    return JSONResponse(status_code=status_code, content={"error": body})


def _where(request: Request) -> str:
    return f"{request.method} {request.url.path}"


async def handle_domain_errors(request: Request, exc: Exception) -> JSONResponse:
    """Map a ``DomainError`` subclass to its status and error code."""
    for error_type, category, code, status_code, suggestions in _DOMAIN_ERROR_MAP:
        if not isinstance(exc, error_type):
            continue
        level = logging.WARNING if status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR else logging.INFO
        logger.log(level, "%s on %s: %s", type(exc).__name__, _where(request), exc)
        return format_error_response(
            category=category,
            code=code,
            detail=str(exc),
            status_code=status_code,
            suggestions=suggestions,
        )

    logger.error("No mapping for %r on %s", exc, _where(request))
    return format_error_response(
        category=ErrorCategory.INTERNAL,
        code=ErrorCode.INTERNAL,
        detail=str(exc),
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


async def handle_validation_errors(request: Request, exc: Exception) -> JSONResponse:
    """422 for malformed requests, with one entry per offending field."""
    fields: list[dict[str, str]] = []
    if isinstance(exc, RequestValidationError):
        fields = [
            {"field": ".".join(str(part) for part in err["loc"]), "message": err["msg"], "type": err["type"]}
            for err in exc.errors()
        ]
    logger.info("Rejected request on %s: %d invalid field(s)", _where(request), len(fields))

    return format_error_response(
        category=ErrorCategory.VALIDATION,
        code=ErrorCode.INVALID_INPUT,
        detail="Request failed validation",
        status_code=422,
        metadata={"errors": fields} if fields else None,
    )


async def handle_database_errors(request: Request, exc: Exception) -> JSONResponse:
    """Handle database errors that escaped a unit of work."""
    logger.error("Database error on %s", _where(request), exc_info=exc, extra={"error_type": type(exc).__name__})

    if isinstance(exc, IntegrityError):
        return format_error_response(
            category=ErrorCategory.CONFLICT,
            code=ErrorCode.CONCURRENT_UPDATE,
            detail="The resource was modified concurrently",
            status_code=status.HTTP_409_CONFLICT,
            suggestions=["Retry the request"],
        )
    if isinstance(exc, OperationalError):
        return format_error_response(
            category=ErrorCategory.DATABASE,
            code=ErrorCode.STORAGE_UNAVAILABLE,
            detail="Progress store unreachable",
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            suggestions=["Retry after a short delay"],
        )
    return format_error_response(
        category=ErrorCategory.DATABASE,
        code=ErrorCode.INTERNAL,
        detail="Progress store error",
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


_REDACTED_HEADERS = frozenset({"authorization", "cookie", "x-api-key"})


def log_error_context(request: Request, exc: Exception, error_id: UUID | None = None) -> None:
    """Log an unexpected failure with enough request context to find it again by ``error_id``."""
    logger.error(
        "Unhandled %s on %s (error_id=%s)",
        type(exc).__name__,
        _where(request),
        error_id,
        exc_info=exc,
        extra={
            "error_id": str(error_id) if error_id else None,
            "query_params": dict(request.query_params),
            "client_host": request.client.host if request.client else None,
            "user_id": str(getattr(request.state, "user_id", None)),
            "headers": {k: v for k, v in request.headers.items() if k.lower() not in _REDACTED_HEADERS},
        },
    )
