"""
Fixtures for end-to-end tests over the real app with in-memory adapters.
"""

from collections.abc import Generator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from otpgate.api.main import create_app
from otpgate.config.settings import Settings


@pytest.fixture
def app_settings() -> Settings:
    return Settings(
        storage_backend="memory",
        notifier_backend="console",
        bcrypt_cost=10,
        otp_ttl_seconds=600,
        challenge_purge_interval_seconds=0,
    )


@pytest.fixture
def app(app_settings: Settings) -> FastAPI:
    return create_app(app_settings)


@pytest.fixture
def client(app, challenge_store, credential_store, notifier) -> Generator[TestClient, None, None]:
    """
    Started app whose stores and notifier are the shared test doubles.

    Swapping state after startup lets tests drive the challenge clock and
    read the mailed passcode.
    """
    with TestClient(app) as test_client:
        app.state.credential_store = credential_store
        app.state.challenge_store = challenge_store
        app.state.notifier = notifier
        yield test_client
