"""Middleware module"""

from app.middleware.error_handler import (
    register_error_handlers,
    app_error_handler,
    validation_error_handler,
    AppError,
    ErrorCategory,
    ValidationError,
    OwnerNotFoundError,
    NotFoundError,
    ForbiddenError,
    ConflictError,
    DuplicateEnrollmentError,
    NoCapacityError,
    EnrollmentNotActiveError,
    ExternalServiceError,
    FanOutTimeoutError,
)

__all__ = [
    "register_error_handlers",
    "app_error_handler",
    "validation_error_handler",
    "AppError",
    "ErrorCategory",
    "ValidationError",
    "OwnerNotFoundError",
    "NotFoundError",
    "ForbiddenError",
    "ConflictError",
    "DuplicateEnrollmentError",
    "NoCapacityError",
    "EnrollmentNotActiveError",
    "ExternalServiceError",
    "FanOutTimeoutError",
]
