"""Repository adapters - Store implementations."""

from .memory import InMemoryChallengeStore, InMemoryCredentialStore
from .postgres import PostgresChallengeStore, PostgresCredentialStore, run_migrations

__all__ = [
    "InMemoryChallengeStore",
    "InMemoryCredentialStore",
    "PostgresChallengeStore",
    "PostgresCredentialStore",
    "run_migrations",
]
