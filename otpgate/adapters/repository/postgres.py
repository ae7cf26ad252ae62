"""
PostgreSQL repository adapters - Implement CredentialStore and ChallengeStore.

This module provides the PostgreSQL implementation of the domain's
store ports using psycopg3 with raw SQL.

Atomicity Design:
-----------------
1. **users.email UNIQUE**: create() is a plain INSERT. When two
   registrations race, the database rejects the second with
   UniqueViolation, translated to ConflictError.

2. **challenges.email PRIMARY KEY**: replace() is a single
   INSERT ... ON CONFLICT DO UPDATE, so a reader never sees two rows
   for one email. Concurrent replaces serialize on the row; last wins.

3. **Expiry in the query**: find() filters on expires_at > NOW() using
   database time. Expired rows are logically absent even if no purge
   has run.

Connection failures (OperationalError, PoolTimeout) surface as
StoreUnavailableError.
"""

import logging
import secrets
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import psycopg
from psycopg import errors
from psycopg_pool import ConnectionPool, PoolTimeout

from otpgate.domain.exceptions import ConflictError, StoreUnavailableError
from otpgate.domain.ports import Challenge, UserRecord

logger = logging.getLogger(__name__)

MIGRATIONS_DIR = Path(__file__).parent.parent.parent / "migrations"


@contextmanager
def _connection(pool: ConnectionPool) -> Iterator[psycopg.Connection]:
    """Borrow a pooled connection, translating outages to StoreUnavailableError."""
    try:
        with pool.connection() as conn:
            yield conn
    except (psycopg.OperationalError, PoolTimeout) as e:
        logger.error(f"Database unavailable: {e}")
        raise StoreUnavailableError("database unavailable") from e


class PostgresCredentialStore:
    """
    Implements CredentialStore protocol via psycopg3.

    Uses structural subtyping - no explicit inheritance from Protocol.
    All SQL uses parameterized queries for security.
    """

    def __init__(self, pool: ConnectionPool) -> None:
        """
        Initialize store with connection pool.

        Args:
            pool: psycopg3 ConnectionPool for database connections
        """
        self._pool = pool

    def find_by_email(self, email: str) -> UserRecord | None:
        sql = """
            SELECT id, name, email, password_hash
            FROM users
            WHERE email = %s
        """

        with _connection(self._pool) as conn, conn.cursor() as cursor:
            cursor.execute(sql, (email,))
            row = cursor.fetchone()

        if row is None:
            return None
        return UserRecord(id=str(row[0]), name=row[1], email=row[2], password_hash=row[3])

    def create(self, name: str, email: str, password_hash: str) -> UserRecord:
        """
        Insert a new user.

        The UNIQUE constraint on email decides concurrent registrations:
        exactly one INSERT commits, the others raise ConflictError.

        Args:
            name: Display name
            email: Normalized email address (lowercase, stripped)
            password_hash: bcrypt-hashed password from domain layer

        Returns:
            The created record
        """
        sql = """
            INSERT INTO users (id, name, email, password_hash, created_at)
            VALUES (%s, %s, %s, %s, NOW())
        """
        user_id = str(uuid.uuid4())

        try:
            with _connection(self._pool) as conn, conn.cursor() as cursor:
                cursor.execute(sql, (user_id, name, email, password_hash))
                conn.commit()
        except errors.UniqueViolation as e:
            raise ConflictError(email) from e

        return UserRecord(id=user_id, name=name, email=email, password_hash=password_hash)


class PostgresChallengeStore:
    """
    Implements ChallengeStore protocol via psycopg3.

    One row per email; the primary key is what keeps a single live
    challenge per address.
    """

    def __init__(self, pool: ConnectionPool, ttl_seconds: int = 600) -> None:
        """
        Args:
            pool: psycopg3 ConnectionPool for database connections
            ttl_seconds: Validity window applied at insert time
        """
        self._pool = pool
        self._ttl_seconds = ttl_seconds

    def replace(self, email: str, code: str) -> Challenge:
        sql = """
            INSERT INTO challenges (email, code, issued_at, expires_at)
            VALUES (%s, %s, NOW(), NOW() + %s * INTERVAL '1 second')
            ON CONFLICT (email) DO UPDATE
            SET code = EXCLUDED.code,
                issued_at = EXCLUDED.issued_at,
                expires_at = EXCLUDED.expires_at
            RETURNING issued_at, expires_at
        """

        with _connection(self._pool) as conn, conn.cursor() as cursor:
            cursor.execute(sql, (email, code, self._ttl_seconds))
            issued_at, expires_at = cursor.fetchone()
            conn.commit()

        return Challenge(email=email, code=code, issued_at=issued_at, expires_at=expires_at)

    def find(self, email: str, code: str) -> Challenge | None:
        """
        Fetch the live challenge for email and compare codes.

        Code comparison uses secrets.compare_digest() so a mismatch takes
        the same time wherever the first differing digit is.
        """
        sql = """
            SELECT code, issued_at, expires_at
            FROM challenges
            WHERE email = %s
              AND expires_at > NOW()
        """

        with _connection(self._pool) as conn, conn.cursor() as cursor:
            cursor.execute(sql, (email,))
            row = cursor.fetchone()

        if row is None:
            return None
        stored_code, issued_at, expires_at = row
        if not secrets.compare_digest(stored_code.encode(), code.encode()):
            return None
        return Challenge(email=email, code=stored_code, issued_at=issued_at, expires_at=expires_at)

    def consume(self, email: str) -> None:
        with _connection(self._pool) as conn:
            conn.execute("DELETE FROM challenges WHERE email = %s", (email,))
            conn.commit()

    def purge_expired(self) -> int:
        with _connection(self._pool) as conn, conn.cursor() as cursor:
            cursor.execute("DELETE FROM challenges WHERE expires_at <= NOW()")
            removed = cursor.rowcount
            conn.commit()
        return removed


def run_migrations(pool: ConnectionPool) -> None:
    """
    Execute all SQL migration files from the migrations directory.

    Migrations are executed in sorted order (alphabetically by filename).
    Each migration should be idempotent (use IF NOT EXISTS, etc.).

    Args:
        pool: psycopg3 ConnectionPool instance

    Raises:
        StoreUnavailableError: If the database cannot be reached
        RuntimeError: If a migration fails to apply
    """
    if not MIGRATIONS_DIR.exists():
        logger.warning(f"Migrations directory not found: {MIGRATIONS_DIR}")
        return

    sql_files = sorted(MIGRATIONS_DIR.glob("*.sql"))

    if not sql_files:
        logger.info("No migration files found")
        return

    logger.info(f"Running {len(sql_files)} migration(s)")

    for sql_file in sql_files:
        logger.info(f"Executing migration: {sql_file.name}")
        sql_content = sql_file.read_text()
        try:
            with _connection(pool) as conn:
                conn.execute(sql_content)
                conn.commit()
        except StoreUnavailableError:
            raise
        except psycopg.Error as e:
            logger.error(f"Migration failed: {sql_file.name} - {e}")
            raise RuntimeError(f"Database migration failed: {sql_file.name}") from e

        logger.info(f"Migration complete: {sql_file.name}")
