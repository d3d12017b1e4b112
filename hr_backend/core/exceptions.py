"""Custom exception classes for the HR platform.

Every operational error carries the HTTP status it maps to; the handler in
``main.py`` serializes them uniformly.
"""

from typing import List, Optional


class HRPlatformError(Exception):
    """Base exception for the HR platform."""

    status_code = 500

    def __init__(self, message: str = "An error occurred"):
        self.message = message
        super().__init__(self.message)


class AuthenticationError(HRPlatformError):
    """Raised when credentials or the bearer token are missing or invalid."""
    status_code = 401


class InvalidTokenError(AuthenticationError):
    """Raised when a token fails signature, structure or expiry checks."""
    pass


class AuthorizationError(HRPlatformError):
    """Raised when the identity lacks permission for the action."""
    status_code = 403


class ResourceNotFoundError(HRPlatformError):
    """Raised when a requested resource is not found."""
    status_code = 404


class ResourceConflictError(HRPlatformError):
    """Raised when a resource already exists."""
    status_code = 409


class ValidationError(HRPlatformError):
    """Raised when input validation fails."""
    status_code = 400

    def __init__(self, message: str = "Erro de validação.", errors: Optional[List[str]] = None):
        super().__init__(message)
        self.errors = errors or []


class RateLimitError(HRPlatformError):
    """Raised when a client exceeds a request rate limit."""
    status_code = 429


class StorageError(HRPlatformError):
    """Raised when a file storage operation fails."""
    pass


class AuditContractError(HRPlatformError):
    """Raised when a tracked mutation is attempted without an acting identity."""
    pass
