"""
Custom domain exceptions for consistent error handling.

These exceptions are mapped to the response envelope by the exception handlers
in main.py.
"""
from fastapi import HTTPException, status


class DomainError(HTTPException):
    """Base class for all domain-specific errors."""
    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_400_BAD_REQUEST,
        error: str | None = None,
        errors: list[dict] | None = None,
    ):
        super().__init__(status_code=status_code, detail=message)
        self.message = message
        self.error = error
        self.errors = errors


class ValidationError(DomainError):
    """Malformed or missing input fields (400). Carries one entry per failing field."""
    def __init__(self, errors: list[dict], message: str = "Validation failed"):
        super().__init__(message, status_code=status.HTTP_400_BAD_REQUEST, errors=errors)

    @property
    def fields(self) -> list[str]:
        return [e["field"] for e in self.errors]


class NotFoundError(DomainError):
    """Resource not found (404)."""
    def __init__(self, resource_type: str, identifier):
        self.resource_type = resource_type
        self.identifier = identifier
        super().__init__(f"{resource_type} not found", status_code=status.HTTP_404_NOT_FOUND)


class ConflictError(DomainError):
    """Request conflicts with current resource state. Reported as 400, not 409."""
    def __init__(self, message: str):
        super().__init__(message, status_code=status.HTTP_400_BAD_REQUEST)


class InternalError(DomainError):
    """Unexpected failure during an operation (500)."""
    def __init__(self, message: str, error: str | None = None):
        super().__init__(message, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, error=error)
