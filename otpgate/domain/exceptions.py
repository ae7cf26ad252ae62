"""
Domain exceptions - Semantic error types for registration and login.

This module defines domain-specific exceptions that communicate
business rule violations without leaking infrastructure details.
"""


class AuthError(Exception):
    """Base class for otpgate domain errors."""

    pass


class ValidationError(AuthError):
    """Missing or malformed input. No state was changed."""

    pass


class ConflictError(AuthError):
    """A user with this normalized email already exists."""

    pass


class InvalidChallengeError(AuthError):
    """No live challenge matches the submitted email and code."""

    pass


class NotFoundError(AuthError):
    """No user is registered under this email."""

    pass


class InvalidCredentialsError(AuthError):
    """Password does not match the stored hash."""

    pass


class NotificationError(AuthError):
    """The notifier failed to deliver the passcode."""

    pass


class StoreUnavailableError(AuthError):
    """Underlying persistence is unreachable."""

    pass
