"""
FastAPI application factory and configuration.

This module creates the FastAPI application instance,
configures middleware, exception handlers, and lifespan events.
"""

import asyncio
import contextlib
import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import psycopg
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from psycopg_pool import ConnectionPool, PoolTimeout

from otpgate import __version__
from otpgate.adapters.repository.memory import InMemoryChallengeStore, InMemoryCredentialStore
from otpgate.adapters.repository.postgres import (
    PostgresChallengeStore,
    PostgresCredentialStore,
    run_migrations,
)
from otpgate.adapters.smtp.console import ConsoleNotifier
from otpgate.adapters.smtp.relay import SmtpNotifier
from otpgate.api.v1 import router as v1_router
from otpgate.config.settings import Settings, get_settings
from otpgate.domain.exceptions import StoreUnavailableError
from otpgate.domain.ports import ChallengeStore, Notifier

logger = logging.getLogger(__name__)

# OpenAPI tags for documentation grouping
tags_metadata = [
    {
        "name": "v1",
        "description": "OTP registration and password login",
    },
]


def build_notifier(settings: Settings) -> Notifier:
    """Select the notifier adapter named by settings."""
    if settings.notifier_backend == "smtp":
        return SmtpNotifier(
            host=settings.smtp_host,
            port=settings.smtp_port,
            username=settings.smtp_username,
            password=settings.smtp_password,
            sender=settings.smtp_from,
            use_tls=settings.smtp_use_tls,
            timeout=settings.smtp_timeout_seconds,
        )
    return ConsoleNotifier()


async def purge_expired_challenges(store: ChallengeStore, interval: float) -> None:
    """
    Periodically delete expired challenges.

    Only reclaims space. Expired challenges are already rejected by find().
    """
    while True:
        await asyncio.sleep(interval)
        try:
            removed = await asyncio.to_thread(store.purge_expired)
        except StoreUnavailableError:
            logger.warning("Challenge purge skipped: store unavailable")
            continue
        if removed:
            logger.info("Purged %d expired challenge(s)", removed)


def create_app(settings: Settings | None = None) -> FastAPI:
    """
    Build the application.

    Args:
        settings: Explicit settings; defaults to the cached environment settings.
            When given, they also replace get_settings() for every route.
    """
    app_settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """
        FastAPI lifespan context manager.

        Manages application startup and shutdown:
        - Creates stores (and the connection pool for postgres) on startup
        - Runs migrations on startup
        - Starts the expired-challenge reaper
        - Closes connection pool on shutdown
        """
        logger.info("Starting application...")
        pool: ConnectionPool | None = None

        if app_settings.storage_backend == "postgres":
            logger.info("Connecting to database...")
            # Create connection pool with explicit sizing
            pool = ConnectionPool(
                conninfo=app_settings.database_url,
                min_size=app_settings.pool_min_size,
                max_size=app_settings.pool_max_size,
                open=True,
            )
            try:
                logger.info("Running database migrations...")
                run_migrations(pool)
            except StoreUnavailableError:
                logger.critical("Database unreachable at startup, refusing to serve")
                pool.close()
                raise
            app.state.credential_store = PostgresCredentialStore(pool)
            app.state.challenge_store = PostgresChallengeStore(
                pool, ttl_seconds=app_settings.otp_ttl_seconds
            )
        else:
            logger.warning("Using in-memory stores; data is lost on restart")
            app.state.credential_store = InMemoryCredentialStore()
            app.state.challenge_store = InMemoryChallengeStore(
                ttl_seconds=app_settings.otp_ttl_seconds
            )

        app.state.pool = pool
        app.state.notifier = build_notifier(app_settings)

        reaper: asyncio.Task[None] | None = None
        if app_settings.challenge_purge_interval_seconds > 0:
            reaper = asyncio.create_task(
                purge_expired_challenges(
                    app.state.challenge_store,
                    app_settings.challenge_purge_interval_seconds,
                )
            )

        logger.info("Application startup complete")

        yield

        # Shutdown
        logger.info("Shutting down application...")
        if reaper is not None:
            reaper.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await reaper
        if pool is not None:
            pool.close()
            logger.info("Database connection pool closed")

    app = FastAPI(
        title="otpgate",
        description="Email OTP registration and password login API",
        version=__version__,
        openapi_tags=tags_metadata,
        lifespan=lifespan,
    )

    if settings is not None:
        app.dependency_overrides[get_settings] = lambda: app_settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include v1 API routes
    app.include_router(v1_router, prefix="/v1")

    @app.exception_handler(StoreUnavailableError)
    async def store_unavailable_handler(request: Request, exc: StoreUnavailableError) -> JSONResponse:
        """Persistence outages fail the request with 503; the process keeps serving."""
        logger.error("Store unavailable during %s %s", request.method, request.url.path)
        return JSONResponse(status_code=503, content={"detail": "Service temporarily unavailable"})

    @app.get("/health")
    def health_check(request: Request) -> dict[str, str]:
        """
        Health check endpoint with database validation.

        Returns 200 OK if application and database are healthy,
        503 if the database cannot be reached.
        """
        pool = getattr(request.app.state, "pool", None)
        if pool is not None:
            try:
                with pool.connection() as conn:
                    conn.execute("SELECT 1")
            except (psycopg.OperationalError, PoolTimeout) as e:
                raise StoreUnavailableError("database unavailable") from e

        return {"status": "healthy"}

    return app


app = create_app()
