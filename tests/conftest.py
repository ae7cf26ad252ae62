"""
Shared test fixtures and configuration.

This module provides pytest fixtures for:
- A controllable clock for challenge expiry
- In-memory stores and a recording notifier
- Domain services wired over them
"""

import re
from datetime import datetime, timedelta, timezone

import pytest

from otpgate.adapters.repository.memory import InMemoryChallengeStore, InMemoryCredentialStore
from otpgate.domain.login import LoginService
from otpgate.domain.registration import RegistrationService

# Lowest bcrypt cost keeps the suite fast; cost is asserted separately.
FAST_BCRYPT_COST = 4


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self) -> None:
        self.now = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


class RecordingNotifier:
    """Notifier double that keeps every message and can be told to fail."""

    def __init__(self) -> None:
        self.messages: list[tuple[str, str, str]] = []
        self.fail = False

    def send(self, to: str, subject: str, body: str) -> bool:
        if self.fail:
            return False
        self.messages.append((to, subject, body))
        return True

    def last_code(self, to: str | None = None) -> str:
        """Extract the passcode from the most recent message (optionally for one recipient)."""
        for recipient, _subject, body in reversed(self.messages):
            if to is None or recipient == to:
                match = re.search(r"\b(\d{6})\b", body)
                assert match is not None, f"no code in message body: {body!r}"
                return match.group(1)
        raise AssertionError(f"no message sent to {to}")


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def credential_store() -> InMemoryCredentialStore:
    return InMemoryCredentialStore()


@pytest.fixture
def challenge_store(clock: FakeClock) -> InMemoryChallengeStore:
    return InMemoryChallengeStore(ttl_seconds=600, clock=clock)


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def registration_service(
    credential_store: InMemoryCredentialStore,
    challenge_store: InMemoryChallengeStore,
    notifier: RecordingNotifier,
) -> RegistrationService:
    return RegistrationService(
        credentials=credential_store,
        challenges=challenge_store,
        notifier=notifier,
        bcrypt_cost=FAST_BCRYPT_COST,
    )


@pytest.fixture
def login_service(credential_store: InMemoryCredentialStore) -> LoginService:
    return LoginService(credentials=credential_store, bcrypt_cost=FAST_BCRYPT_COST)
