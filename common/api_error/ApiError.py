# common/api_error/ApiError.py
from typing import Optional


class AppError(Exception):
    """Base error for all application-specific issues."""

    def __init__(
        self,
        message: str,
        status_code: int = 400,
        code: str = "INTERNAL_ERROR",
        cause: Optional[str] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.code = code
        self.cause = cause
        super().__init__(self.message)


class ValidationFailureError(AppError, ValueError):
    """
    Malformed or missing input.

    Also a ValueError so normalisers can be reused inside pydantic
    validators, where it surfaces as a regular 422 validation error.
    """

    def __init__(self, message: str):
        super().__init__(message, status_code=422, code="VALIDATION_FAILURE")


class DuplicateIdentityError(AppError):
    def __init__(self, message: str = "ID card already registered"):
        super().__init__(message, status_code=409, code="DUPLICATE_IDENTITY")


class AuthFailureError(AppError):
    """Unknown identity number or wrong password. Never says which."""

    def __init__(self) -> None:
        super().__init__(
            "Invalid ID Card or Password", status_code=401, code="AUTH_FAILURE"
        )


class NotFoundError(AppError):
    def __init__(self, message: str = "Resource not found"):
        super().__init__(message, status_code=404, code="NOT_FOUND")


class InternalFailureError(AppError):
    """Storage or hashing failure; the cause is kept as an opaque string."""

    def __init__(self, cause: Optional[str] = None):
        super().__init__(
            "Internal Server Error",
            status_code=500,
            code="INTERNAL_FAILURE",
            cause=cause,
        )


class DatabaseError(InternalFailureError):
    """Specific for DB issues."""

    pass


__all__ = [
    "AppError",
    "ValidationFailureError",
    "DuplicateIdentityError",
    "AuthFailureError",
    "NotFoundError",
    "InternalFailureError",
    "DatabaseError",
]
