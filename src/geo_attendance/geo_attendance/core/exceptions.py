class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class LocationUnavailable(DomainError):
    """Raised when no geolocation fix can be obtained.

    ``reason`` is one of ``unsupported``, ``denied``, ``unavailable``,
    ``timeout`` or ``invalid`` so callers can show a specific message.
    """

    def __init__(self, message: str, *, reason: str = "unavailable"):
        super().__init__(message)
        self.reason = reason


class RemoteUnavailable(DomainError):
    """Raised when the remote backend fails (network, HTTP status, bad body)."""

    def __init__(self, message: str, *, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class EmailExists(DomainError):
    """Raised on signup when the email is already registered."""


class MalformedCache(DomainError):
    """Raised internally when a cached value cannot be decoded."""
