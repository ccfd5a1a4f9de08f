class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthenticationError(DomainError):
    """Raised when the request carries no valid session."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class NotFoundError(DomainError):
    """Raised when the addressed row or record does not exist."""


class ConflictError(DomainError):
    """Raised when a write collides with existing state (double booking, duplicate ballot)."""


class IdentityProviderError(DomainError):
    """Raised when the identity provider rejects or fails a call."""

    def __init__(self, message: str, *, status_code: int = 0):
        super().__init__(message)
        self.status_code = status_code
