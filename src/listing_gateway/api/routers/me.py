"""
listing_gateway.api.routers.me

Caller-scoped listings ("my properties", "my posts").

Responsibilities:
- Return every item the caller owns, whatever its moderation state.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Query

from listing_gateway.api.deps import content_service_dep, gateway_dep
from listing_gateway.api.gateway import Gateway
from listing_gateway.api.routers.blog import BlogPostResponse
from listing_gateway.api.routers.properties import PropertyResponse
from listing_gateway.moderation.status import ResourceKind
from listing_gateway.services.content_service import ContentService

router = APIRouter(prefix="/v1/me", tags=["me"])


@router.get("/properties", response_model=list[PropertyResponse])
async def my_properties(
    property_type: str | None = Query(default=None),
    gateway: Gateway = Depends(gateway_dep),
    content: ContentService = Depends(content_service_dep),
) -> list[Any]:
    owner_id = gateway.require_owner_scope(ResourceKind.property)
    return await content.owned(
        ResourceKind.property, owner_id=owner_id, property_type=property_type
    )


@router.get("/posts", response_model=list[BlogPostResponse])
async def my_posts(
    gateway: Gateway = Depends(gateway_dep),
    content: ContentService = Depends(content_service_dep),
) -> list[Any]:
    owner_id = gateway.require_owner_scope(ResourceKind.blog_post)
    return await content.owned(ResourceKind.blog_post, owner_id=owner_id)
