"""
Custom exceptions and error handlers for consistent error responses.

Every error leaves the API with the same body shape:

    {"error": "<message>", "error_code": "<code>", "details": {...}}
"""

import logging
from fastapi import HTTPException, Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from typing import Any, Dict, Optional

logger = logging.getLogger("shippro.errors")

# Fallback codes for framework-raised HTTP errors (unknown routes, bad methods)
HTTP_ERROR_CODES = {
    400: "ERR_BAD_REQUEST",
    401: "ERR_UNAUTHORIZED",
    403: "ERR_FORBIDDEN",
    404: "ERR_NOT_FOUND",
    405: "ERR_METHOD_NOT_ALLOWED",
    500: "ERR_INTERNAL_SERVER",
}


class AppException(Exception):
    """Base application exception."""

    def __init__(self, message: str, error_code: str, status_code: int = 500, details: Dict[str, Any] = None):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)


class AuthenticationError(AppException):
    """No valid session accompanies the request."""

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message, "ERR_AUTH_001", status.HTTP_401_UNAUTHORIZED)


class InsufficientPermissionsError(AppException):
    """Signed in, but without the role the route demands."""

    def __init__(self, message: str = "Forbidden", details: Dict[str, Any] = None):
        super().__init__(message, "ERR_PERM_001", status.HTTP_403_FORBIDDEN, details)


class ValidationError(AppException):
    """A request is missing a required field or carries a bad value."""

    def __init__(self, message: str, field: str = None):
        super().__init__(
            message,
            "ERR_VALIDATION",
            status.HTTP_400_BAD_REQUEST,
            {"field": field} if field else None,
        )


class ResourceNotFoundError(AppException):
    """Shipment, service, preferences record etc. does not exist."""

    def __init__(self, resource: str, resource_id: Any = None):
        super().__init__(
            f"{resource} not found",
            "ERR_NOT_FOUND_001",
            status.HTTP_404_NOT_FOUND,
            {"resource": resource, "id": resource_id},
        )


def error_response(
    status_code: int,
    message: str,
    error_code: str,
    details: Optional[Dict[str, Any]] = None,
    headers: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": message, "error_code": error_code, "details": details or {}},
        headers=headers,
    )


def _describe_validation_error(error: Dict[str, Any]) -> str:
    """Turn the first pydantic error into a field-naming message."""
    field = ".".join(str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path"))
    if error.get("type") == "missing":
        return f"Missing required field: {field}" if field else "Missing required fields"
    if field:
        return f"Invalid value for {field}: {error.get('msg', 'invalid')}"
    return error.get("msg", "Invalid request")


# Global Exception Handlers

async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.details)
    return error_response(exc.status_code, exc.message, exc.error_code, exc.details)


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    return error_response(
        exc.status_code,
        exc.detail,
        HTTP_ERROR_CODES.get(exc.status_code, "ERR_UNKNOWN"),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Request validation failures are 400s naming the first bad field."""
    errors = exc.errors()
    message = _describe_validation_error(errors[0]) if errors else "Invalid request"
    return error_response(
        status.HTTP_400_BAD_REQUEST,
        message,
        "ERR_VALIDATION",
        {
            "errors": [
                {"loc": list(e.get("loc", ())), "msg": e.get("msg"), "type": e.get("type")}
                for e in errors
            ]
        },
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log with traceback; the client only sees a generic 500."""
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error", "ERR_INTERNAL_SERVER")
