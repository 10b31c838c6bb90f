"""
listing_gateway.api.deps

FastAPI dependency wiring for the API layer.

Responsibilities:
- Provide dependency functions for settings, DB sessions, identity and policy.
- Assemble the per-request `ContentService` and `Gateway`.
"""

from __future__ import annotations

from collections.abc import AsyncIterator

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from listing_gateway.api.gateway import Gateway
from listing_gateway.auth.models import Identity
from listing_gateway.auth.policy import PolicyEngine
from listing_gateway.services.content_service import ContentService
from listing_gateway.settings import Settings


def settings_dep(request: Request) -> Settings:
    # Settings are pinned on app.state by `create_app` so tests can inject their own.
    return request.app.state.settings  # type: ignore[attr-defined]


def policy_dep(request: Request) -> PolicyEngine:
    return request.app.state.policy  # type: ignore[attr-defined]


def identity_dep(request: Request) -> Identity:
    # Set by IdentityMiddleware; absence means the middleware did not run, so fail closed.
    return getattr(request.state, "identity", None) or Identity.anonymous()


def sessionmaker_from_app(request: Request) -> async_sessionmaker[AsyncSession]:
    return request.app.state.sessionmaker  # type: ignore[attr-defined]


async def db_session(
    session_factory: async_sessionmaker[AsyncSession] = Depends(sessionmaker_from_app),
) -> AsyncIterator[AsyncSession]:
    # Request-scoped DB session. Commit/rollback is managed explicitly by the service layer.
    async with session_factory() as session:
        yield session


def content_service_dep(
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
    policy: PolicyEngine = Depends(policy_dep),
) -> ContentService:
    return ContentService(session=session, settings=settings, policy=policy)


def gateway_dep(
    identity: Identity = Depends(identity_dep),
    policy: PolicyEngine = Depends(policy_dep),
    content: ContentService = Depends(content_service_dep),
) -> Gateway:
    return Gateway(identity=identity, policy=policy, content=content)


# --- Module Notes -----------------------------------------------------------
# FastAPI caches dependencies per request, so the gateway and the handler share the same
# session and the same ContentService instance.
