from __future__ import annotations

from typing import Any


class DomainError(Exception):
    def __init__(
        self,
        message: str,
        status_code: int = 400,
        error_code: str = "DOMAIN_ERROR",
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        self.details = details
        super().__init__(self.message)


class ValidationError(DomainError):
    """Caller error; retrying with the same input fails the same way."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(
            message=message,
            status_code=400,
            error_code="VALIDATION_ERROR",
            details=details,
        )


class AuthorizationError(ValidationError):
    def __init__(self, message: str = "Actor is not allowed to perform this action"):
        super().__init__(message)
        self.status_code = 403
        self.error_code = "PERMISSION_DENIED"


class NotFoundError(DomainError):
    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(
            message=message,
            status_code=404,
            error_code="NOT_FOUND",
            details=details,
        )


class ConflictError(DomainError):
    """Concurrent modification of the same balance row."""

    def __init__(self, message: str = "Balance was modified concurrently"):
        super().__init__(
            message=message,
            status_code=409,
            error_code="CONFLICT",
        )


class StorageError(DomainError):
    def __init__(self, message: str = "Storage failure, nothing was written"):
        super().__init__(
            message=message,
            status_code=503,
            error_code="STORAGE_ERROR",
        )
