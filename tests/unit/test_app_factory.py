"""
Unit tests for application wiring: settings, adapter selection, lifespan, reaper.
"""

import asyncio
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient
from pydantic import ValidationError

from otpgate.adapters.repository.memory import InMemoryChallengeStore, InMemoryCredentialStore
from otpgate.adapters.smtp.console import ConsoleNotifier
from otpgate.adapters.smtp.relay import SmtpNotifier
from otpgate.api.dependencies import get_login_service, get_registration_service
from otpgate.api.main import build_notifier, create_app, purge_expired_challenges
from otpgate.config.settings import Settings
from otpgate.domain.exceptions import StoreUnavailableError


class TestBcryptCostSetting:
    def test_default_is_10(self) -> None:
        assert Settings().bcrypt_cost == 10

    @pytest.mark.parametrize("cost", [4, 9])
    def test_below_10_rejected(self, cost: int) -> None:
        with pytest.raises(ValidationError):
            Settings(bcrypt_cost=cost)

    def test_cost_reaches_both_services(self) -> None:
        settings = Settings(bcrypt_cost=12)
        credentials = InMemoryCredentialStore()

        login = get_login_service(credentials=credentials, settings=settings)
        registration = get_registration_service(
            credentials=credentials,
            challenges=InMemoryChallengeStore(),
            notifier=ConsoleNotifier(),
            settings=settings,
        )

        assert login.bcrypt_cost == 12
        assert registration.bcrypt_cost == 12


class TestBuildNotifier:
    def test_console_by_default(self) -> None:
        assert isinstance(build_notifier(Settings()), ConsoleNotifier)

    def test_smtp_when_configured(self) -> None:
        notifier = build_notifier(
            Settings(notifier_backend="smtp", smtp_host="mail.example.com", smtp_username="u")
        )
        assert isinstance(notifier, SmtpNotifier)


class TestLifespan:
    def test_memory_backend_wires_state(self) -> None:
        app = create_app(Settings(storage_backend="memory", challenge_purge_interval_seconds=0))

        with TestClient(app):
            assert isinstance(app.state.credential_store, InMemoryCredentialStore)
            assert isinstance(app.state.challenge_store, InMemoryChallengeStore)
            assert isinstance(app.state.notifier, ConsoleNotifier)
            assert app.state.pool is None

    def test_reaper_runs_and_stops(self) -> None:
        app = create_app(Settings(storage_backend="memory", challenge_purge_interval_seconds=1))

        with TestClient(app) as client:
            assert client.get("/health").status_code == 200


class TestPurgeExpiredChallenges:
    def test_purges_then_keeps_running_after_outage(self) -> None:
        store = MagicMock()

        def purge() -> int:
            if store.purge_expired.call_count == 1:
                raise StoreUnavailableError("down")
            return 3

        store.purge_expired.side_effect = purge

        async def run() -> None:
            task = asyncio.create_task(purge_expired_challenges(store, 0.01))
            while store.purge_expired.call_count < 3:
                await asyncio.sleep(0.01)
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass

        asyncio.run(run())

        assert store.purge_expired.call_count >= 3
