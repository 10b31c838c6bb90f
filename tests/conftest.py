"""
tests.conftest

Shared fixtures: test settings, a booted app, an ASGI client, a token factory and
direct session access for service-level tests.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from datetime import timedelta
from pathlib import Path

import httpx
import pytest
import pytest_asyncio
from fastapi import FastAPI
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from listing_gateway.api.app import create_app
from listing_gateway.auth.jwt import JwtConfig, issue_token
from listing_gateway.auth.models import Role
from listing_gateway.db.init_db import init_db
from listing_gateway.db.session import create_engine, create_sessionmaker
from listing_gateway.settings import Settings

from .factories import ADMIN_EMAIL, AuthHeaders

JWT_SECRET = "test-secret-0123456789abcdef0123456789abcdef"


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        env="test",
        jwt_secret=JWT_SECRET,
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'gateway.db'}",
        admin_identities=[ADMIN_EMAIL],
    )


@pytest.fixture
def jwt_cfg(settings: Settings) -> JwtConfig:
    return JwtConfig(alg=settings.jwt_alg, secret=settings.jwt_secret)


@pytest.fixture
def auth(jwt_cfg: JwtConfig) -> AuthHeaders:
    def make(
        subject: str,
        role: Role | str = Role.user,
        *,
        email: str | None = None,
        ttl: timedelta = timedelta(minutes=10),
    ) -> dict[str, str]:
        token = issue_token(cfg=jwt_cfg, subject=subject, role=role, email=email, ttl=ttl)
        return {"Authorization": f"Bearer {token}"}

    return make


@pytest.fixture
def admin_headers(auth: AuthHeaders) -> dict[str, str]:
    return auth("admin-1", Role.admin, email=ADMIN_EMAIL)


@pytest_asyncio.fixture
async def app(settings: Settings) -> AsyncIterator[FastAPI]:
    app = create_app(settings=settings)
    # httpx ASGITransport does not run lifespan events; drive them explicitly.
    async with app.router.lifespan_context(app):
        yield app


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncIterator[httpx.AsyncClient]:
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c



@pytest_asyncio.fixture
async def sessions(settings: Settings) -> AsyncIterator[async_sessionmaker[AsyncSession]]:
    # Direct store access for service-level tests, independent of the app lifespan.
    engine = create_engine(settings)
    await init_db(engine)
    try:
        yield create_sessionmaker(engine)
    finally:
        await engine.dispose()
