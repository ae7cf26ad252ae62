"""
FastAPI dependencies - Dependency injection factories.

This module provides Depends() factories for injecting
domain services and infrastructure adapters into routes.
Adapters are built once during lifespan startup and kept in app.state.
"""

from fastapi import Depends, Request

from otpgate.config.settings import Settings, get_settings
from otpgate.domain.login import LoginService
from otpgate.domain.ports import ChallengeStore, CredentialStore, Notifier
from otpgate.domain.registration import RegistrationService


def get_credential_store(request: Request) -> CredentialStore:
    """Get the credential store created at startup."""
    return request.app.state.credential_store


def get_challenge_store(request: Request) -> ChallengeStore:
    """Get the challenge store created at startup."""
    return request.app.state.challenge_store


def get_notifier(request: Request) -> Notifier:
    """Get the notifier created at startup."""
    return request.app.state.notifier


def get_registration_service(
    credentials: CredentialStore = Depends(get_credential_store),
    challenges: ChallengeStore = Depends(get_challenge_store),
    notifier: Notifier = Depends(get_notifier),
    settings: Settings = Depends(get_settings),
) -> RegistrationService:
    """
    Create registration service with injected dependencies.

    Wires together both stores and the notifier for the domain service.
    """
    return RegistrationService(
        credentials=credentials,
        challenges=challenges,
        notifier=notifier,
        bcrypt_cost=settings.bcrypt_cost,
        ttl_seconds=settings.otp_ttl_seconds,
        subject=settings.otp_email_subject,
    )


def get_login_service(
    credentials: CredentialStore = Depends(get_credential_store),
    settings: Settings = Depends(get_settings),
) -> LoginService:
    """Create login service over the credential store."""
    return LoginService(credentials=credentials, bcrypt_cost=settings.bcrypt_cost)
