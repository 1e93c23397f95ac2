from typing import Any, Dict, Optional, Union

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from remedial_attendance.core.logging import logger


class BaseAPIError(Exception):
    """Base exception class for API errors"""
    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        error_code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        self.details = details or {}
        super().__init__(message)


class ValidationError(BaseAPIError):
    """Raised when request input is rejected before any work starts"""
    def __init__(
        self,
        message: str = "Validation error",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            status_code=status.HTTP_400_BAD_REQUEST,
            error_code="VALIDATION_ERROR",
            details=details
        )


class AuthenticationError(BaseAPIError):
    """Raised when the caller cannot be identified"""
    def __init__(
        self,
        message: str = "Not authenticated",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            status_code=status.HTTP_401_UNAUTHORIZED,
            error_code="AUTH_ERROR",
            details=details
        )


class PermissionDenied(BaseAPIError):
    """Raised when user doesn't have required permissions"""
    def __init__(
        self,
        message: str = "Permission denied",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            status_code=status.HTTP_403_FORBIDDEN,
            error_code="PERMISSION_DENIED",
            details=details
        )


class ConfigurationError(BaseAPIError):
    """Raised when the caller's assignment or schedule data is incomplete"""
    def __init__(
        self,
        message: str = "Configuration error",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            status_code=status.HTTP_400_BAD_REQUEST,
            error_code="CONFIG_ERROR",
            details=details
        )


class DatabaseError(BaseAPIError):
    """Raised when there's a database-related error"""
    def __init__(
        self,
        message: str = "Database error occurred",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            error_code="DB_ERROR",
            details=details
        )


def get_error_message(
    error: Union[Exception, HTTPException, str],
    default_message: str = "An unexpected error occurred",
) -> Dict[str, Any]:
    """
    Formats any error into the service's response envelope.

    Args:
        error: The exception that was raised or an error message string
        default_message: Fallback message if error type is not recognized

    Returns:
        Dict with success flag, error message, error code and status code
    """
    error_response = {
        "success": False,
        "error": default_message,
        "error_code": "INTERNAL_ERROR",
        "status_code": status.HTTP_500_INTERNAL_SERVER_ERROR
    }

    if isinstance(error, str):
        error_response.update({
            "error": error,
            "error_code": "GENERAL_ERROR"
        })
    elif isinstance(error, BaseAPIError):
        error_response.update({
            "error": error.message,
            "error_code": error.error_code,
            "status_code": error.status_code
        })
        if error.details:
            error_response["details"] = error.details
    elif isinstance(error, HTTPException):
        error_response.update({
            "error": str(error.detail),
            "error_code": "HTTP_ERROR",
            "status_code": error.status_code
        })
    elif isinstance(error, SQLAlchemyError):
        error_response.update({
            "error": "Database error occurred",
            "error_code": "DB_ERROR"
        })

    return error_response


def _envelope(error: Union[Exception, str], status_code: Optional[int] = None) -> JSONResponse:
    body = get_error_message(error)
    code = status_code or body.pop("status_code")
    body.pop("status_code", None)
    return JSONResponse(status_code=code, content=body)


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(BaseAPIError)
    async def api_error_handler(request: Request, exc: BaseAPIError):
        if exc.status_code >= 500:
            logger.error(f"{exc.error_code} on {request.url.path}: {exc.message}")
        return _envelope(exc)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        logger.debug(f"Rejected payload on {request.url.path}: {exc.errors()}")
        return _envelope("Invalid payload.", status.HTTP_400_BAD_REQUEST)

    @app.exception_handler(SQLAlchemyError)
    async def database_error_handler(request: Request, exc: SQLAlchemyError):
        logger.exception(f"Unhandled database error on {request.url.path}")
        return _envelope(exc)

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.url.path}")
        return _envelope(exc)
