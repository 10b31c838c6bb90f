"""
listing_gateway.api.app

FastAPI app factory for the listing gateway.

Responsibilities:
- Build the FastAPI application and register routers/middleware.
- Build the shared, read-only auth components (verifier, identity builder, policy engine).
- Initialize and dispose shared infrastructure (DB engine/session factory).
- Render every `GatewayError` through one exception handler.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from listing_gateway import __version__
from listing_gateway.api.routers.admin import router as admin_router
from listing_gateway.api.routers.blog import router as blog_router
from listing_gateway.api.routers.dev_auth import router as dev_auth_router
from listing_gateway.api.routers.health import router as health_router
from listing_gateway.api.routers.me import router as me_router
from listing_gateway.api.routers.properties import router as properties_router
from listing_gateway.auth.context import IdentityBuilder
from listing_gateway.auth.jwt import CredentialVerifier, JwtConfig
from listing_gateway.auth.middleware import IdentityMiddleware
from listing_gateway.auth.policy import PolicyEngine
from listing_gateway.db.init_db import init_db
from listing_gateway.db.session import create_engine, create_sessionmaker
from listing_gateway.errors import GatewayError
from listing_gateway.observability.logging import configure_logging, get_logger
from listing_gateway.observability.middleware import RequestContextMiddleware
from listing_gateway.settings import Settings

log = get_logger(__name__)


def create_app(*, settings: Settings) -> FastAPI:
    # Configure structured logging once at process startup (before app serves requests).
    configure_logging(service_name=settings.service_name, level=settings.log_level)

    verifier = CredentialVerifier(
        JwtConfig(
            alg=settings.jwt_alg,
            secret=settings.jwt_secret,
            issuer=settings.jwt_issuer,
            audience=settings.jwt_audience,
        )
    )
    if not verifier.configured:
        # Fail closed: every caller resolves to anonymous until a secret is provided.
        log.warning("verifier_unconfigured")

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        log.info("startup", env=settings.env)
        engine = create_engine(settings)
        app.state.engine = engine
        app.state.sessionmaker = create_sessionmaker(engine)
        if settings.env in ("dev", "test"):
            # Dev/test convenience: create tables automatically. Prod uses Alembic migrations.
            await init_db(engine)
        try:
            yield
        finally:
            await engine.dispose()
            log.info("shutdown")

    app = FastAPI(
        title="Listing Gateway",
        version=__version__,
        docs_url="/docs",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.policy = PolicyEngine(admin_identities=settings.admin_identities)

    # Last added runs first: request context is reset before identity is bound.
    app.add_middleware(IdentityMiddleware, builder=IdentityBuilder(verifier))
    app.add_middleware(RequestContextMiddleware)

    @app.exception_handler(GatewayError)
    async def _gateway_error(_: Request, exc: GatewayError) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail},
            headers=exc.headers,
        )

    app.include_router(health_router, tags=["health"])
    app.include_router(dev_auth_router)
    app.include_router(properties_router)
    app.include_router(blog_router)
    app.include_router(me_router)
    app.include_router(admin_router)

    return app


# --- Module Notes -----------------------------------------------------------
# Composition only: authorization lives in `auth.policy` + `api.gateway`, persistence and
# moderation in `services.content_service`.
