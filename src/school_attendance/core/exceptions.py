class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or references unknown records."""


class ConflictError(DomainError):
    """Raised when a write would duplicate an existing record."""


class NotFoundError(DomainError):
    """Raised when a token or record does not exist."""


class AuthorizationError(DomainError):
    """Raised when a caller may not act on a record."""


class StoreError(DomainError):
    """Raised when the underlying persistence layer fails."""
