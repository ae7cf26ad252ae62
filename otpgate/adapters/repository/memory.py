"""
In-memory repository adapters - Implement CredentialStore and ChallengeStore.

Process-local stores guarded by a lock, for development and tests.
State is lost on restart.
"""

import secrets
import threading
import uuid
from collections.abc import Callable
from datetime import datetime, timedelta, timezone

from otpgate.domain.exceptions import ConflictError
from otpgate.domain.ports import Challenge, UserRecord


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class InMemoryCredentialStore:
    """
    Implements CredentialStore protocol with a dict keyed by email.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def __init__(self) -> None:
        self._users: dict[str, UserRecord] = {}
        self._lock = threading.Lock()

    def find_by_email(self, email: str) -> UserRecord | None:
        with self._lock:
            return self._users.get(email)

    def create(self, name: str, email: str, password_hash: str) -> UserRecord:
        """
        Create a user if the email is free.

        The membership check and the insert happen under one lock, so
        concurrent creates for one email yield exactly one record.
        """
        with self._lock:
            if email in self._users:
                raise ConflictError(email)
            user = UserRecord(
                id=str(uuid.uuid4()),
                name=name,
                email=email,
                password_hash=password_hash,
            )
            self._users[email] = user
            return user

    def __len__(self) -> int:
        with self._lock:
            return len(self._users)


class InMemoryChallengeStore:
    """
    Implements ChallengeStore protocol with one slot per email.

    Holding a single challenge per key makes replace() a plain overwrite,
    so two live challenges for one email cannot exist.
    """

    def __init__(
        self,
        ttl_seconds: int = 600,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        """
        Args:
            ttl_seconds: Validity window of each challenge
            clock: Returns the current aware datetime (injectable for tests)
        """
        self._ttl = timedelta(seconds=ttl_seconds)
        self._clock = clock
        self._challenges: dict[str, Challenge] = {}
        self._lock = threading.Lock()

    def replace(self, email: str, code: str) -> Challenge:
        issued_at = self._clock()
        challenge = Challenge(
            email=email,
            code=code,
            issued_at=issued_at,
            expires_at=issued_at + self._ttl,
        )
        with self._lock:
            self._challenges[email] = challenge
        return challenge

    def find(self, email: str, code: str) -> Challenge | None:
        with self._lock:
            challenge = self._challenges.get(email)
        if challenge is None:
            return None
        if not secrets.compare_digest(challenge.code.encode(), code.encode()):
            return None
        if challenge.is_expired(self._clock()):
            return None
        return challenge

    def consume(self, email: str) -> None:
        with self._lock:
            self._challenges.pop(email, None)

    def purge_expired(self) -> int:
        now = self._clock()
        with self._lock:
            expired = [email for email, c in self._challenges.items() if c.is_expired(now)]
            for email in expired:
                del self._challenges[email]
        return len(expired)

    def __len__(self) -> int:
        """Physically stored challenges, expired ones included."""
        with self._lock:
            return len(self._challenges)
