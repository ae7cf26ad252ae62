"""
Credential helpers - email normalization and bcrypt password handling.

Shared by the registration and login services so that both sides of the
password check use the same primitive and the same email rule.
"""

from functools import lru_cache

import bcrypt

from .exceptions import ValidationError

# bcrypt only reads the first 72 bytes of its input.
MAX_PASSWORD_BYTES = 72

DEFAULT_BCRYPT_COST = 10


def normalize_email(email: str) -> str:
    """
    Normalize email address for consistent storage and lookup.

    Applies: strip whitespace + lowercase
    """
    return email.strip().lower()


def require_fields(**fields: str | None) -> None:
    """
    Reject missing or blank fields.

    Raises:
        ValidationError: Naming the first offending field
    """
    for field_name, value in fields.items():
        if value is None or not str(value).strip():
            raise ValidationError(f"{field_name} is required")


def check_password_length(password: str) -> None:
    if len(password.encode()) > MAX_PASSWORD_BYTES:
        raise ValidationError(f"password must be at most {MAX_PASSWORD_BYTES} bytes")


def hash_password(password: str, rounds: int = DEFAULT_BCRYPT_COST) -> str:
    """
    Hash password using bcrypt with a per-password salt.

    Args:
        password: Plaintext password
        rounds: bcrypt cost factor (>= 10 in production)

    Returns:
        bcrypt hash as text ($2b$...)
    """
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt(rounds=rounds)).decode()


@lru_cache(maxsize=None)
def dummy_hash(rounds: int) -> bytes:
    """
    Hash compared against when the email is unknown, so bcrypt still runs.

    Built once per cost factor. It must share the cost of real hashes or
    the unknown-user path becomes measurably faster.
    """
    return bcrypt.hashpw(b"dummy_password_for_timing_safety", bcrypt.gensalt(rounds=rounds))


def verify_password(
    password: str, password_hash: str | None, rounds: int = DEFAULT_BCRYPT_COST
) -> bool:
    """
    Constant-time bcrypt comparison.

    A None hash is compared against a dummy hash of cost rounds and always
    fails, keeping the cost of an unknown-user check equal to a
    wrong-password check.
    """
    if len(password.encode()) > MAX_PASSWORD_BYTES:
        return False
    if password_hash is None:
        bcrypt.checkpw(password.encode(), dummy_hash(rounds))
        return False
    return bcrypt.checkpw(password.encode(), password_hash.encode())
