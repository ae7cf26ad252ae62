"""
Domain layer - Pure business logic with zero framework imports.

This package contains the OTP-gated registration protocol and the login
check. It defines its own port interfaces for infrastructure abstraction,
so stores and notifiers can be swapped without touching the services.
"""

from .exceptions import (
    AuthError,
    ConflictError,
    InvalidChallengeError,
    InvalidCredentialsError,
    NotFoundError,
    NotificationError,
    StoreUnavailableError,
    ValidationError,
)
from .login import LoginService
from .ports import (
    Challenge,
    ChallengeStore,
    CredentialStore,
    Notifier,
    UserProfile,
    UserRecord,
)
from .registration import RegistrationService

__all__ = [
    "AuthError",
    "Challenge",
    "ChallengeStore",
    "ConflictError",
    "CredentialStore",
    "InvalidChallengeError",
    "InvalidCredentialsError",
    "LoginService",
    "NotFoundError",
    "NotificationError",
    "Notifier",
    "RegistrationService",
    "StoreUnavailableError",
    "UserProfile",
    "UserRecord",
    "ValidationError",
]
