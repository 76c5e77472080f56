"""
Error taxonomy and the FastAPI handlers that render it.

Every failure leaves the API as the error envelope from ``file_manager.responses``.
Each ``ErrorCode`` maps to exactly one HTTP status.
"""

import logging
from enum import Enum
from typing import Any, Optional, Tuple

import pydantic
from botocore.exceptions import ClientError
from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from file_manager.responses import error_response

logger = logging.getLogger(__name__)


class ErrorCode(str, Enum):
    # 400
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_FILE_TYPE = "INVALID_FILE_TYPE"
    FILE_TOO_LARGE = "FILE_TOO_LARGE"
    MISSING_REQUIRED_FIELD = "MISSING_REQUIRED_FIELD"
    # 401
    UNAUTHORIZED = "UNAUTHORIZED"
    INVALID_TOKEN = "INVALID_TOKEN"
    TOKEN_EXPIRED = "TOKEN_EXPIRED"
    # 403
    FORBIDDEN = "FORBIDDEN"
    ACCESS_DENIED = "ACCESS_DENIED"
    # 404
    NOT_FOUND = "NOT_FOUND"
    FILE_NOT_FOUND = "FILE_NOT_FOUND"
    PROJECT_NOT_FOUND = "PROJECT_NOT_FOUND"
    # 409
    CONFLICT = "CONFLICT"
    FILE_ALREADY_EXISTS = "FILE_ALREADY_EXISTS"
    PROJECT_ALREADY_EXISTS = "PROJECT_ALREADY_EXISTS"
    # 500
    INTERNAL_ERROR = "INTERNAL_ERROR"
    S3_ERROR = "S3_ERROR"
    DATABASE_ERROR = "DATABASE_ERROR"
    # 503
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"


ERROR_STATUS_CODES = {
    ErrorCode.VALIDATION_ERROR: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_FILE_TYPE: status.HTTP_400_BAD_REQUEST,
    ErrorCode.FILE_TOO_LARGE: status.HTTP_400_BAD_REQUEST,
    ErrorCode.MISSING_REQUIRED_FIELD: status.HTTP_400_BAD_REQUEST,
    ErrorCode.UNAUTHORIZED: status.HTTP_401_UNAUTHORIZED,
    ErrorCode.INVALID_TOKEN: status.HTTP_401_UNAUTHORIZED,
    ErrorCode.TOKEN_EXPIRED: status.HTTP_401_UNAUTHORIZED,
    ErrorCode.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    ErrorCode.ACCESS_DENIED: status.HTTP_403_FORBIDDEN,
    ErrorCode.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.FILE_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.PROJECT_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorCode.FILE_ALREADY_EXISTS: status.HTTP_409_CONFLICT,
    ErrorCode.PROJECT_ALREADY_EXISTS: status.HTTP_409_CONFLICT,
    ErrorCode.INTERNAL_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorCode.S3_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorCode.DATABASE_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorCode.SERVICE_UNAVAILABLE: status.HTTP_503_SERVICE_UNAVAILABLE,
}

# DynamoDB operations; every other ClientError is attributed to S3
DYNAMODB_OPERATIONS = {
    "PutItem", "GetItem", "UpdateItem", "DeleteItem", "Query", "Scan",
    "BatchGetItem", "BatchWriteItem", "DescribeTable", "CreateTable",
}

THROTTLING_MARKERS = ("Throttl", "ProvisionedThroughputExceeded", "RequestLimitExceeded", "SlowDown")


class ApiError(Exception):
    """Base class for errors that carry their own envelope code."""

    default_code = ErrorCode.INTERNAL_ERROR
    default_message = "An unexpected error occurred"

    def __init__(
        self,
        message: Optional[str] = None,
        code: Optional[ErrorCode] = None,
        details: Optional[Any] = None,
    ):
        self.code = code or self.default_code
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)

    @property
    def status_code(self) -> int:
        return ERROR_STATUS_CODES[self.code]


class RequestValidationFailed(ApiError):
    default_code = ErrorCode.VALIDATION_ERROR
    default_message = "Validation failed"


class UnauthorizedError(ApiError):
    default_code = ErrorCode.UNAUTHORIZED
    default_message = "Authentication required"


class AccessDeniedError(ApiError):
    default_code = ErrorCode.ACCESS_DENIED
    default_message = "Access denied"


class NotFoundError(ApiError):
    default_code = ErrorCode.NOT_FOUND
    default_message = "Resource not found"


class ConflictError(ApiError):
    default_code = ErrorCode.CONFLICT
    default_message = "Resource already exists"


class AlreadyExistsError(ConflictError):
    """A conditional create found an existing row with the same identity."""


class ServiceUnavailableError(ApiError):
    default_code = ErrorCode.SERVICE_UNAVAILABLE
    default_message = "Service temporarily unavailable"


def map_client_error(err: ClientError) -> Tuple[ErrorCode, str]:
    """Translate a botocore ClientError into an envelope code and a safe message."""
    error_code = err.response.get("Error", {}).get("Code", "")

    if any(marker in error_code for marker in THROTTLING_MARKERS):
        return ErrorCode.SERVICE_UNAVAILABLE, "Service temporarily unavailable"
    if "NotFound" in error_code or error_code in ("404", "NoSuchKey", "NoSuchBucket"):
        return ErrorCode.NOT_FOUND, "Resource not found"
    if "AccessDenied" in error_code or "Forbidden" in error_code or error_code == "403":
        return ErrorCode.ACCESS_DENIED, "Access denied"
    if "ConditionalCheckFailed" in error_code:
        return ErrorCode.CONFLICT, "Resource already exists"
    if getattr(err, "operation_name", None) in DYNAMODB_OPERATIONS:
        return ErrorCode.DATABASE_ERROR, "Database request failed"
    return ErrorCode.S3_ERROR, "Storage request failed"


def _is_production(request: Request) -> bool:
    settings = getattr(request.app.state, "settings", None)
    return bool(settings and settings.is_production)


def _validation_details(errors) -> list:
    return [
        {"path": ".".join(str(part) for part in error["loc"]), "message": error["msg"]}
        for error in errors
    ]


async def handle_api_error(request: Request, exc: ApiError) -> JSONResponse:
    return error_response(exc.code.value, exc.message, exc.status_code, exc.details)


async def handle_request_validation_errors(request: Request, exc: RequestValidationError) -> JSONResponse:
    return error_response(
        ErrorCode.VALIDATION_ERROR.value,
        "Invalid request",
        status.HTTP_400_BAD_REQUEST,
        _validation_details(exc.errors()),
    )


async def handle_pydantic_validation_errors(request: Request, exc: pydantic.ValidationError) -> JSONResponse:
    return error_response(
        ErrorCode.VALIDATION_ERROR.value,
        "Validation failed",
        status.HTTP_400_BAD_REQUEST,
        _validation_details(exc.errors()),
    )


async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == status.HTTP_404_NOT_FOUND:
        return error_response(
            ErrorCode.NOT_FOUND.value,
            f"Route {request.method} {request.url.path} not found",
            status.HTTP_404_NOT_FOUND,
        )
    code = {
        status.HTTP_401_UNAUTHORIZED: ErrorCode.UNAUTHORIZED,
        status.HTTP_403_FORBIDDEN: ErrorCode.FORBIDDEN,
        status.HTTP_409_CONFLICT: ErrorCode.CONFLICT,
    }.get(exc.status_code)
    if code is None:
        code = ErrorCode.INTERNAL_ERROR if exc.status_code >= 500 else ErrorCode.VALIDATION_ERROR
    return error_response(code.value, str(exc.detail), exc.status_code)


async def handle_client_error(request: Request, exc: ClientError) -> JSONResponse:
    code, message = map_client_error(exc)
    status_code = ERROR_STATUS_CODES[code]
    if status_code >= 500:
        logger.error(f"AWS error during {request.method} {request.url.path}: {exc}")
        if not _is_production(request):
            message = str(exc)
    else:
        logger.warning(f"AWS error during {request.method} {request.url.path}: {exc}")
    return error_response(code.value, message, status_code)


async def handle_broad_exceptions(request: Request, call_next):
    """Handle any exception that goes unhandled by a more specific exception handler."""
    try:
        return await call_next(request)
    except Exception as err:  # pylint: disable=broad-except
        logger.exception(err)
        message = "An unexpected error occurred" if _is_production(request) else str(err)
        return error_response(
            ErrorCode.INTERNAL_ERROR.value,
            message,
            status.HTTP_500_INTERNAL_SERVER_ERROR,
        )


def register_error_handlers(app) -> None:
    app.add_exception_handler(ApiError, handle_api_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation_errors)
    app.add_exception_handler(pydantic.ValidationError, handle_pydantic_validation_errors)
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(ClientError, handle_client_error)
