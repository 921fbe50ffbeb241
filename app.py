"""
FastAPI application factory.
create_app() is the single entry point for building the app.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import sentry_sdk
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import AppSettings
from errors import register_error_handlers
from infrastructure.http_client import HttpClient
from middleware.recaptcha import RecaptchaGate
from routes.health_routes import router as health_router
from routes.verify_routes import router as verify_router
from shared.logging import get_logger, setup_logging


def create_app(
    settings: Optional[AppSettings] = None,
    http_client: Optional[HttpClient] = None,
) -> FastAPI:
    """Create and return a fully configured FastAPI application.

    ``http_client`` replaces the outbound client built at startup; the caller
    keeps ownership of it.
    """
    if settings is None:
        settings = AppSettings()

    setup_logging(
        log_level=settings.logging.log_level,
        log_format=settings.logging.log_format,
        production=settings.is_production,
    )
    log = get_logger(__name__)

    # Initialise Sentry before anything else so it captures startup errors
    if settings.sentry.sentry_dsn:
        sentry_sdk.init(
            dsn=settings.sentry.sentry_dsn,
            send_default_pii=settings.sentry.sentry_send_pii,
            traces_sample_rate=settings.sentry.sentry_traces_sample_rate,
        )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        # ── Startup ──────────────────────────────────────────────────────────
        # Fails fast (pydantic ValidationError) when RECAPTCHA_SECRET is unset
        options = settings.recaptcha.to_options()

        owns_client = http_client is None
        client = http_client or HttpClient(timeout=options.timeout_seconds)

        app.state.settings = settings
        app.state.http_client = client
        app.state.recaptcha_gate = RecaptchaGate.from_http_client(options, client)

        if options.is_test_mode:
            log.warning("recaptcha_test_secret_in_use", env=settings.env)

        yield

        # ── Shutdown ─────────────────────────────────────────────────────────
        if owns_client:
            await client.aclose()

    app = FastAPI(
        title=settings.app_name,
        version="1.0.0",
        docs_url=settings.docs_url,
        redoc_url=None,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)
    app.include_router(health_router)
    app.include_router(verify_router)

    return app
