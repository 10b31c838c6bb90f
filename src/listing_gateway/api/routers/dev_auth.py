"""
listing_gateway.api.routers.dev_auth

Dev-only token mint (404 when `env=prod`).
"""

from __future__ import annotations

from datetime import timedelta

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from starlette.status import HTTP_404_NOT_FOUND

from listing_gateway.api.deps import settings_dep
from listing_gateway.auth.jwt import JwtConfig, issue_token
from listing_gateway.auth.models import Role
from listing_gateway.settings import Settings

router = APIRouter(prefix="/v1/dev", tags=["dev"])


class DevTokenRequest(BaseModel):
    subject: str = Field(min_length=1, max_length=256)
    role: Role = Role.user
    email: str | None = Field(default=None, max_length=256)
    ttl_minutes: int = Field(default=60, ge=1, le=24 * 60)


class DevTokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


@router.post("/token", response_model=DevTokenResponse)
async def mint_dev_token(
    body: DevTokenRequest,
    settings: Settings = Depends(settings_dep),
) -> DevTokenResponse:
    # Real credentials come from the login service; this exists for local work only.
    if settings.env == "prod":
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="Not found")

    cfg = JwtConfig(
        alg=settings.jwt_alg,
        secret=settings.jwt_secret,
        issuer=settings.jwt_issuer,
        audience=settings.jwt_audience,
    )
    token = issue_token(
        cfg=cfg,
        subject=body.subject,
        role=body.role,
        email=body.email,
        ttl=timedelta(minutes=body.ttl_minutes),
    )
    return DevTokenResponse(access_token=token)
