class DomainError(Exception):
    """Base exception for business rule violations."""

    status_code = 400


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    status_code = 400


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid."""

    status_code = 401


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""

    status_code = 403


class NotFoundError(DomainError):
    """Raised when a student, course, session or record does not exist."""

    status_code = 404


class ConflictError(DomainError):
    """Raised on duplicate identifiers or double-booked rooms."""

    status_code = 409


class InvalidCodeError(NotFoundError):
    """Raised when a session code does not match any session."""


class WrongDateError(ValidationError):
    """Raised when a session code is redeemed on a day other than its own."""
