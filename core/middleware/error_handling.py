"""
Error handling with sanitized, uniform error bodies.

Every failure is rendered as::

    {"error": {"code": ..., "message": ..., "path": ..., "method": ...}}

Domain exceptions (storage constraint violations, policy denials,
authentication failures, storage limits) carry their own ``status_code``
and ``code``; everything unexpected becomes a 500 with a generic message.
"""

import logging
import traceback
import re
from typing import Any, Callable, Optional
from fastapi import Request, Response, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from sqlalchemy.exc import SQLAlchemyError, IntegrityError, OperationalError

from database.errors import StoreError, classify_integrity_error
from core.middleware.authentication import AuthenticationError
from core.middleware.authorization import AuthorizationError
from core.storage.base import StorageError

logger = logging.getLogger(__name__)

# Patterns for sensitive data that should never be echoed back or logged
SENSITIVE_PATTERNS = [
    re.compile(r'password["\s:=]+[^"\s,}]+', re.IGNORECASE),
    re.compile(r'token["\s:=]+[^"\s,}]+', re.IGNORECASE),
    re.compile(r'secret["\s:=]+[^"\s,}]+', re.IGNORECASE),
    re.compile(r'authorization["\s:]+[^"\s,}]+', re.IGNORECASE),
    re.compile(r'bearer\s+[A-Za-z0-9._-]+', re.IGNORECASE),
]

DOMAIN_ERRORS = (StoreError, AuthorizationError, AuthenticationError, StorageError)


def sanitize_error_message(message: Any) -> str:
    """
    Remove sensitive information from error messages.

    Args:
        message: Original error message

    Returns:
        Sanitized error message
    """
    sanitized = str(message)
    for pattern in SENSITIVE_PATTERNS:
        sanitized = pattern.sub('[REDACTED]', sanitized)
    return sanitized


def error_body(
    code: str,
    message: str,
    path: str,
    method: str,
    details: Any = None,
    request_id: Optional[str] = None,
) -> dict:
    error = {
        "code": code,
        "message": sanitize_error_message(message),
        "path": path,
        "method": method,
    }
    if details is not None:
        error["details"] = details
    if request_id:
        error["request_id"] = request_id
    return {"error": error}


def format_validation_errors(exc: RequestValidationError) -> list[dict[str, Any]]:
    """Flatten pydantic errors into field/message/type triples."""
    return [
        {
            "field": ".".join(str(loc) for loc in error["loc"]),
            "message": sanitize_error_message(error["msg"]),
            "type": error["type"],
        }
        for error in exc.errors()
    ]


def _domain_response(exc: Exception, path: str, method: str, request_id=None) -> JSONResponse:
    headers = None
    if isinstance(exc, AuthenticationError):
        headers = {"WWW-Authenticate": "Bearer"}
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.code, exc.message, path, method, request_id=request_id),
        headers=headers,
    )


class ErrorHandlingMiddleware:
    """
    Last line of defence for exceptions that escape the route handlers.

    Handlers registered by ``setup_error_handlers`` cover the expected
    cases; this catches whatever slips past them (database outages,
    bugs) and still answers with the standard error body.
    """

    def __init__(self, app: Callable, debug: bool = False):
        self.app = app
        self.debug = debug

    async def __call__(self, scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        try:
            await self.app(scope, receive, send)
        except Exception as exc:
            response = self._handle_exception(exc, scope)
            await response(scope, receive, send)

    def _handle_exception(self, exc: Exception, scope: dict) -> Response:
        path = scope.get("path", "unknown")
        method = scope.get("method", "unknown")

        if isinstance(exc, IntegrityError):
            exc = classify_integrity_error(exc)

        if isinstance(exc, DOMAIN_ERRORS):
            return _domain_response(exc, path, method)

        details = None
        if isinstance(exc, OperationalError):
            status_code = status.HTTP_503_SERVICE_UNAVAILABLE
            code = "DATABASE_ERROR"
            message = "Database service temporarily unavailable"
        elif isinstance(exc, SQLAlchemyError):
            status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
            code = "DATABASE_ERROR"
            message = "A database error occurred"
        else:
            status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
            code = "INTERNAL_SERVER_ERROR"
            message = "An unexpected error occurred"

        logger.error(
            f"Unhandled exception: {method} {path} - "
            f"{type(exc).__name__}: {sanitize_error_message(str(exc))}",
            exc_info=exc,
        )
        if self.debug:
            details = {
                "type": type(exc).__name__,
                "traceback": traceback.format_exception(exc),
            }

        return JSONResponse(
            status_code=status_code,
            content=error_body(code, message, path, method, details=details),
        )


def setup_error_handlers(app):
    """
    Set up exception handlers for FastAPI application.

    Args:
        app: FastAPI application instance
    """

    def _request_id(request: Request) -> Optional[str]:
        return getattr(request.state, "request_id", None)

    async def domain_exception_handler(request: Request, exc: Exception):
        if exc.status_code >= 500:
            logger.error(f"{type(exc).__name__} on {request.method} {request.url.path}")
        else:
            logger.info(
                f"{exc.code} on {request.method} {request.url.path}: "
                f"{sanitize_error_message(exc.message)}"
            )
        return _domain_response(exc, request.url.path, request.method, _request_id(request))

    for error_class in DOMAIN_ERRORS:
        app.add_exception_handler(error_class, domain_exception_handler)

    @app.exception_handler(IntegrityError)
    async def integrity_exception_handler(request: Request, exc: IntegrityError):
        """Constraint violations the service layer did not translate itself."""
        violation = classify_integrity_error(exc)
        logger.warning(
            f"Unclassified integrity error on {request.method} {request.url.path}: "
            f"{violation.code}"
        )
        return _domain_response(
            violation, request.url.path, request.method, _request_id(request)
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(
                "HTTP_EXCEPTION",
                exc.detail,
                request.url.path,
                request.method,
                request_id=_request_id(request),
            ),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content=error_body(
                "VALIDATION_ERROR",
                "Request validation failed",
                request.url.path,
                request.method,
                details=format_validation_errors(exc),
                request_id=_request_id(request),
            ),
        )
