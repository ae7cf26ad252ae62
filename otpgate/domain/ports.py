"""
Port interfaces - Protocol definitions for infrastructure abstraction.

This module defines the value types exchanged with infrastructure and the
interfaces (ports) the domain requires from it. Adapters implement these
protocols structurally, without inheriting from them.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol


@dataclass(frozen=True)
class UserProfile:
    """Public projection of a user. The only user shape returned to callers."""

    id: str
    name: str
    email: str


@dataclass(frozen=True)
class UserRecord:
    """Stored user, including the bcrypt password hash."""

    id: str
    name: str
    email: str
    password_hash: str

    def profile(self) -> UserProfile:
        """Drop the password hash."""
        return UserProfile(id=self.id, name=self.name, email=self.email)


@dataclass(frozen=True)
class Challenge:
    """
    One outstanding proof-of-email-ownership attempt.

    Lifecycle (per email):
        absent -> live      (issue_challenge)
        live   -> consumed  (complete_registration, success or lost race)
        live   -> expired   (expires_at reached)
        live   -> replaced  (a newer issue_challenge)

    Every right-hand state is equivalent to absent. There is no way back
    to live without a fresh issuance.
    """

    email: str
    code: str
    issued_at: datetime
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at


class CredentialStore(Protocol):
    """Port interface for permanent user records."""

    def find_by_email(self, email: str) -> UserRecord | None:
        """
        Look up a user by normalized email.

        Returns:
            The stored record, or None if no user has this email
        """
        ...

    def create(self, name: str, email: str, password_hash: str) -> UserRecord:
        """
        Atomically create a user.

        Two concurrent calls for the same email must result in exactly
        one record; the loser raises.

        Args:
            name: Display name
            email: Normalized email address
            password_hash: bcrypt hashed password

        Returns:
            The created record with its assigned id

        Raises:
            ConflictError: If a user with this email already exists
        """
        ...


class ChallengeStore(Protocol):
    """Port interface for short-lived OTP challenges."""

    def replace(self, email: str, code: str) -> Challenge:
        """
        Atomically drop every challenge for email and insert a fresh one.

        No concurrent reader may ever observe two live challenges for the
        same email. Last write wins.
        """
        ...

    def find(self, email: str, code: str) -> Challenge | None:
        """
        Return the live challenge matching both email and code.

        Returns None if nothing matches or the match has expired,
        whether or not the expired record is still physically stored.
        """
        ...

    def consume(self, email: str) -> None:
        """Delete all challenges for email. No-op if there are none."""
        ...

    def purge_expired(self) -> int:
        """
        Physically delete expired challenges.

        Optional cleanup; find() never depends on it having run.

        Returns:
            Number of records removed
        """
        ...


class Notifier(Protocol):
    """Port interface for out-of-band message delivery."""

    def send(self, to: str, subject: str, body: str) -> bool:
        """
        Deliver a message.

        Args:
            to: Recipient email address (normalized by domain layer)
            subject: Message subject line
            body: Plain text body

        Returns:
            True on success, False if delivery failed
        """
        ...
