"""
FastAPI application factory.
create_app() is the single entry point for building the app.

Collaborators (store, identity resolver, notifier, token sink) and the wall clock
can be passed in explicitly; anything not passed is built from settings in the
lifespan.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import sentry_sdk
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import AppSettings
from errors import register_error_handlers
from infrastructure.directory.http_directory import (
    HttpIdentityResolver,
    HttpTokenSink,
    bearer_headers,
)
from infrastructure.directory.protocol import IdentityResolver, TokenSink
from infrastructure.email.protocol import Notifier
from infrastructure.email.zeptomail import ZeptoMailProvider
from infrastructure.http_client import HttpClient
from infrastructure.signing.jwt_signer import JWTSigner
from infrastructure.store.memory import MemoryStore
from infrastructure.store.protocol import EphemeralStore
from infrastructure.store.redis_store import RedisStore
from routes.health_routes import router as health_router
from routes.password_reset_routes import router as password_reset_router
from services.password_reset import PasswordResetService
from services.rate_limiter import FixedWindowRateLimiter
from services.reset_tokens import ResetTokenIssuer
from services.token_registry import ResetTokenRegistry
from services.verification_codes import VerificationCodeService
from shared.datetime_utils import Clock, utcnow
from shared.logging import get_logger, setup_logging
from workers.sweeper import ExpirySweeper

log = get_logger(__name__)


def build_password_reset_service(
    settings: AppSettings,
    store: EphemeralStore,
    identity: IdentityResolver,
    notifier: Notifier,
    token_sink: TokenSink,
    clock: Clock = utcnow,
) -> PasswordResetService:
    """Wire the credential engine around *store* from *settings*."""
    return PasswordResetService(
        codes=VerificationCodeService(
            store,
            ttl_seconds=settings.codes.code_ttl_seconds,
            retention_seconds=settings.codes.expired_code_retention_seconds,
            clock=clock,
        ),
        issuer=ResetTokenIssuer(
            JWTSigner(settings.tokens),
            ttl_seconds=settings.tokens.reset_token_ttl_seconds,
            clock=clock,
        ),
        registry=ResetTokenRegistry(store, clock=clock),
        rate_limiter=FixedWindowRateLimiter(
            store,
            limit=settings.rate_limit.code_request_limit,
            window_seconds=settings.rate_limit.code_request_window_seconds,
        ),
        identity=identity,
        notifier=notifier,
        token_sink=token_sink,
    )


def create_app(
    settings: Optional[AppSettings] = None,
    *,
    store: Optional[EphemeralStore] = None,
    identity_resolver: Optional[IdentityResolver] = None,
    notifier: Optional[Notifier] = None,
    token_sink: Optional[TokenSink] = None,
    clock: Clock = utcnow,
) -> FastAPI:
    """Create and return a fully configured FastAPI application."""
    if settings is None:
        settings = AppSettings()

    setup_logging(settings.logging, production=settings.is_production)

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
        app.state.settings = settings
        http_clients: list[HttpClient] = []

        app_store = store
        owned_redis: Optional[RedisStore] = None
        if app_store is None and settings.redis.redis_uri:
            owned_redis = await RedisStore.connect(
                settings.redis.redis_uri, prefix=settings.redis.redis_key_prefix
            )
            app_store = owned_redis
        if app_store is None:
            log.warning("memory_store_in_use", redis_configured=bool(settings.redis.redis_uri))
            app_store = MemoryStore()

        sweeper = ExpirySweeper(app_store, settings.sweep.sweep_interval_seconds)
        sweeper.start()

        app_notifier = notifier
        if app_notifier is None:
            mail_http = HttpClient()
            http_clients.append(mail_http)
            app_notifier = ZeptoMailProvider(
                settings.email, mail_http, app_name=settings.app_name
            )

        collab = settings.collaborators
        app_identity, app_sink = identity_resolver, token_sink
        if app_identity is None or app_sink is None:
            directory_http = HttpClient(
                timeout=collab.collaborator_timeout_seconds,
                headers=bearer_headers(collab.collaborator_api_key),
            )
            http_clients.append(directory_http)
            if app_identity is None:
                app_identity = HttpIdentityResolver(collab.identity_resolver_url, directory_http)
            if app_sink is None:
                app_sink = HttpTokenSink(collab.token_sink_url, directory_http)

        app.state.store = app_store
        app.state.sweeper = sweeper
        app.state.password_reset = build_password_reset_service(
            settings, app_store, app_identity, app_notifier, app_sink, clock=clock
        )

        yield

        # ── Shutdown ─────────────────────────────────────────────────────────
        await sweeper.stop()
        for client in http_clients:
            await client.aclose()
        if owned_redis is not None:
            await owned_redis.aclose()

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
    app.include_router(password_reset_router)

    return app
