"""
listing_gateway.settings

Central configuration model (Pydantic Settings).

Responsibilities:
- Provide strongly-typed, env-driven settings for all layers.
- Hide secrets from repr/logging (e.g., JWT secret).
- Offer a cached settings instance for dependency injection.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Env-driven configuration (prefix `LGW_`).

    `admin_identities` is the second, independent admin check: a token claiming the
    admin role is only honoured when its subject id or email is listed here.
    """

    model_config = SettingsConfigDict(env_prefix="LGW_", case_sensitive=False)

    # Environment controls toggle behavior like auto-init DB tables and the dev token mint.
    env: Literal["dev", "test", "prod"] = "dev"
    service_name: str = "listing-gateway"
    log_level: str = "INFO"

    api_host: str = "0.0.0.0"
    api_port: int = 8080

    # Auth
    jwt_alg: str = "HS256"
    jwt_secret: str = Field(default="dev-secret-change-me", repr=False)
    jwt_issuer: str | None = None
    jwt_audience: str | None = None
    admin_identities: list[str] = Field(default_factory=lambda: ["admin@albatrossrealtor.com"])

    # Persistence
    database_url: str = "sqlite+aiosqlite:///./listing_gateway.db"

    # Moderation
    reset_moderation_on_owner_edit: bool = True
    public_page_size: int = Field(default=100, ge=1, le=1000)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    # Cache avoids re-parsing env vars for each request dependency.
    return Settings()


# --- Module Notes -----------------------------------------------------------
# Verification key material (jwt_secret) is read once at process start; an empty secret
# makes the verifier fail closed rather than aborting startup.
