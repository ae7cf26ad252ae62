"""
Registration domain service - OTP-gated account creation.

This module contains the core business logic for user registration:
a short-lived challenge proves control of an email address, and a
verified challenge is promoted into a permanent user record.

Challenge lifecycle (per normalized email)
==========================================

    absent -> live       issue_challenge()
    live   -> consumed   complete_registration() succeeded or lost the race
    live   -> expired    TTL elapsed (find() treats it as absent)
    live   -> replaced   a newer issue_challenge()

consumed, expired and replaced all collapse back to absent. Only a fresh
issue_challenge() makes a challenge live again.

The service holds no state of its own. Atomicity lives in the stores:
CredentialStore.create() enforces email uniqueness and
ChallengeStore.replace() guarantees a single live challenge per email.
"""

import logging
import secrets
from dataclasses import dataclass

from .credentials import (
    DEFAULT_BCRYPT_COST,
    check_password_length,
    hash_password,
    normalize_email,
    require_fields,
)
from .exceptions import ConflictError, InvalidChallengeError, NotificationError
from .ports import ChallengeStore, CredentialStore, Notifier, UserProfile

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 600


@dataclass
class RegistrationService:
    """
    Domain service for user registration.

    Orchestrates challenge issuance, verification, and promotion of a
    verified challenge into a permanent credential.
    """

    credentials: CredentialStore
    challenges: ChallengeStore
    notifier: Notifier
    bcrypt_cost: int = DEFAULT_BCRYPT_COST
    ttl_seconds: int = DEFAULT_TTL_SECONDS
    subject: str = "Your OTP Code"

    def issue_challenge(self, name: str, email: str, password: str) -> str:
        """
        Issue a fresh passcode for email and deliver it.

        Any earlier challenge for the same email stops being valid. If the
        notifier fails, the new challenge is left in place: retrying the
        issuance replaces it anyway.

        Args:
            name: Display name
            email: User's email address (will be normalized)
            password: Chosen password (only validated here, not stored)

        Returns:
            Normalized email address. Never the code.

        Raises:
            ValidationError: If a field is missing or blank
            ConflictError: If a user already exists for this email
            NotificationError: If the passcode could not be delivered
        """
        require_fields(name=name, email=email, password=password)
        check_password_length(password)
        normalized_email = normalize_email(email)

        if self.credentials.find_by_email(normalized_email) is not None:
            raise ConflictError(normalized_email)

        code = self._generate_code()
        self.challenges.replace(normalized_email, code)

        if not self.notifier.send(normalized_email, self.subject, self._message_body(code)):
            logger.warning("Passcode delivery failed for %s", normalized_email)
            raise NotificationError(normalized_email)

        logger.info("Challenge issued for %s", normalized_email)
        return normalized_email

    def complete_registration(
        self, name: str, email: str, password: str, code: str
    ) -> UserProfile:
        """
        Verify the passcode and create the user.

        Once the challenge is found it is consumed no matter how user
        creation ends, so a used or race-lost code can never be replayed.

        Args:
            name: Display name
            email: User's email (will be normalized)
            password: User's password (will be hashed)
            code: Passcode received by email

        Returns:
            Public profile of the created user

        Raises:
            ValidationError: If a field is missing or blank
            InvalidChallengeError: If no live challenge matches
            ConflictError: If another registration for this email won
        """
        require_fields(name=name, email=email, password=password, code=code)
        check_password_length(password)
        normalized_email = normalize_email(email)

        challenge = self.challenges.find(normalized_email, code.strip())
        if challenge is None:
            raise InvalidChallengeError(normalized_email)

        try:
            password_hash = hash_password(password, rounds=self.bcrypt_cost)
            user = self.credentials.create(name.strip(), normalized_email, password_hash)
        finally:
            self.challenges.consume(normalized_email)

        logger.info("User %s registered", user.id)
        return user.profile()

    def _generate_code(self) -> str:
        """
        Generate a cryptographically secure 6-digit code in 100000-999999.

        Returned as a string so the value is never reinterpreted as an int.
        """
        return str(100000 + secrets.randbelow(900000))

    def _message_body(self, code: str) -> str:
        minutes = self.ttl_seconds // 60
        if minutes and self.ttl_seconds % 60 == 0:
            window = f"{minutes} minute" + ("s" if minutes != 1 else "")
        else:
            window = f"{self.ttl_seconds} seconds"
        return f"Your OTP is {code}. Valid for {window}."
