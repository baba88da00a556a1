class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class QRCodeRejected(ValidationError):
    """Raised when a scanned code is not today's code for this facility."""

    def __init__(self, message: str, reason=None):
        super().__init__(message)
        self.reason = reason


class AuthenticationError(DomainError):
    """Raised when no authenticated identity was handed over."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class ConflictError(DomainError):
    """Raised when a child cannot transition (terminal status, lost race, no open record)."""


class DependencyError(DomainError):
    """Raised when the record store or another collaborator is unavailable."""
