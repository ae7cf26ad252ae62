"""
Login domain service - password check against registered users.
"""

import logging
from dataclasses import dataclass

from .credentials import DEFAULT_BCRYPT_COST, normalize_email, require_fields, verify_password
from .exceptions import InvalidCredentialsError, NotFoundError
from .ports import CredentialStore, UserProfile

logger = logging.getLogger(__name__)


@dataclass
class LoginService:
    """Authenticates an email/password pair. Issues no session or token."""

    credentials: CredentialStore
    bcrypt_cost: int = DEFAULT_BCRYPT_COST

    def authenticate(self, email: str, password: str) -> UserProfile:
        """
        Check password for the user registered under email.

        bcrypt runs whether or not the user exists, against a dummy hash of
        bcrypt_cost for an unknown email, so both failures take comparable
        time. Whether they are distinguishable to the outside
        is left to the API layer.

        Returns:
            Public profile of the user

        Raises:
            ValidationError: If a field is missing or blank
            NotFoundError: If no user has this email
            InvalidCredentialsError: If the password does not match
        """
        require_fields(email=email, password=password)
        normalized_email = normalize_email(email)

        user = self.credentials.find_by_email(normalized_email)
        password_valid = verify_password(
            password, user.password_hash if user else None, rounds=self.bcrypt_cost
        )

        if user is None:
            logger.info("Login for unknown email %s", normalized_email)
            raise NotFoundError(normalized_email)
        if not password_valid:
            logger.warning("Invalid password for user %s", user.id)
            raise InvalidCredentialsError(normalized_email)

        return user.profile()
