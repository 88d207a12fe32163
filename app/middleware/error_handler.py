"""
Error handling for the booking and search services.

Provides:
- A structured AppError hierarchy for business-rule and dependency failures
- FastAPI exception handlers that render a uniform error body
- Generic messages for anything unexpected (internal details are never exposed)
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class ErrorCategory:
    """Error categories for structured error handling"""
    VALIDATION = "validation_error"
    AUTHORIZATION = "authorization_error"
    NOT_FOUND = "not_found_error"
    CONFLICT = "conflict_error"
    EXTERNAL_SERVICE = "external_service_error"
    TIMEOUT = "timeout_error"
    INTERNAL = "internal_error"


class AppError(Exception):
    """Base application error with structured information"""

    def __init__(
        self,
        message: str,
        category: str = ErrorCategory.INTERNAL,
        status_code: int = 500,
        details: Optional[dict] = None,
    ):
        self.message = message
        self.category = category
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(AppError):
    """Malformed identifiers or missing required fields"""
    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else {}
        super().__init__(
            message=message,
            category=ErrorCategory.VALIDATION,
            status_code=400,
            details=details,
        )


class OwnerNotFoundError(ValidationError):
    """The owner referenced by an activity does not exist in the users service"""
    def __init__(self, user_id: str):
        super().__init__("Owner user does not exist", field="owner_user_id")
        self.user_id = user_id


class NotFoundError(AppError):
    """Requested resource does not exist"""
    def __init__(self, resource: str, resource_id: str):
        super().__init__(
            message=f"{resource} not found",
            category=ErrorCategory.NOT_FOUND,
            status_code=404,
        )
        self.resource = resource
        self.resource_id = resource_id


class ForbiddenError(AppError):
    """Requester is neither the owner nor an admin"""
    def __init__(self, message: str = "Not authorized"):
        super().__init__(
            message=message,
            category=ErrorCategory.AUTHORIZATION,
            status_code=403,
        )


class ConflictError(AppError):
    """Business-rule violation surfaced as a conflict"""
    def __init__(self, message: str):
        super().__init__(
            message=message,
            category=ErrorCategory.CONFLICT,
            status_code=409,
        )


class DuplicateEnrollmentError(ConflictError):
    def __init__(self):
        super().__init__("User is already enrolled in this session")


class NoCapacityError(ConflictError):
    def __init__(self):
        super().__init__("This session has reached its maximum capacity")


class EnrollmentNotActiveError(ConflictError):
    def __init__(self):
        super().__init__("Only confirmed enrollments can be cancelled")


class ExternalServiceError(AppError):
    """A collaborating service failed or returned an unexpected response"""
    def __init__(self, message: str, service: str):
        super().__init__(
            message=message,
            category=ErrorCategory.EXTERNAL_SERVICE,
            status_code=502,
            details={"service": service},
        )


class FanOutTimeoutError(AppError):
    """A concurrent enrollment branch did not finish within its deadline"""
    def __init__(self, branch: str):
        super().__init__(
            message="Enrollment could not be completed in time. Please try again.",
            category=ErrorCategory.TIMEOUT,
            status_code=504,
        )
        self.branch = branch


def _error_body(category: str, message: str, request: Request, **extra) -> dict:
    return {
        "error": {
            "category": category,
            "message": message,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "path": request.url.path,
            **extra,
        }
    }


def handle_app_error(error: AppError, request: Request) -> JSONResponse:
    """Handle structured application errors"""
    log = logger.error if error.status_code >= 500 else logger.info
    log(
        f"Application error: {error.category} ({type(error).__name__}) "
        f"on {request.method} {request.url.path}"
    )
    return JSONResponse(
        status_code=error.status_code,
        content=_error_body(error.category, error.message, request, **error.details),
    )


def handle_validation_error(error: RequestValidationError, request: Request) -> JSONResponse:
    """Handle FastAPI validation errors with a generic message"""
    logger.warning(
        f"Validation error on {request.method} {request.url.path}: {len(error.errors())} error(s)"
    )
    return JSONResponse(
        status_code=400,
        content=_error_body(ErrorCategory.VALIDATION, "Invalid request", request),
    )


def handle_unexpected_error(error: Exception, request: Request) -> JSONResponse:
    """Handle unexpected errors"""
    logger.critical(
        f"Unexpected error: {type(error).__name__} on {request.method} {request.url.path}",
        exc_info=error,
    )
    # Don't expose internal details
    return JSONResponse(
        status_code=500,
        content=_error_body(
            ErrorCategory.INTERNAL, "An unexpected error occurred.", request
        ),
    )


# Exception handlers for FastAPI
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """FastAPI exception handler for AppError"""
    return handle_app_error(exc, request)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """FastAPI exception handler for validation errors"""
    return handle_validation_error(exc, request)


async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """FastAPI exception handler for everything else"""
    return handle_unexpected_error(exc, request)


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unexpected_error_handler)
