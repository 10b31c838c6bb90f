"""
listing_gateway.api.routers.admin

Admin-only moderation views.

Responsibilities:
- Moderation queue: every Pending item of every kind.
- Audit trail of a single item (including deleted ones).
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field

from listing_gateway.api.deps import content_service_dep, gateway_dep
from listing_gateway.api.gateway import Gateway
from listing_gateway.api.routers.blog import BlogPostResponse
from listing_gateway.api.routers.properties import PropertyResponse
from listing_gateway.moderation.status import ResourceKind
from listing_gateway.services.content_service import ContentService

router = APIRouter(prefix="/v1/admin", tags=["admin"])


class ModerationQueueResponse(BaseModel):
    properties: list[PropertyResponse] = Field(default_factory=list)
    blog_posts: list[BlogPostResponse] = Field(default_factory=list)


class AuditEventResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    item_kind: str
    item_id: uuid.UUID
    actor: str
    event_type: str
    details: dict[str, Any]
    created_at: datetime


@router.get("/moderation/queue", response_model=ModerationQueueResponse)
async def moderation_queue(
    gateway: Gateway = Depends(gateway_dep),
    content: ContentService = Depends(content_service_dep),
) -> ModerationQueueResponse:
    gateway.require_admin()
    queue = await content.moderation_queue()
    return ModerationQueueResponse(
        properties=[PropertyResponse.model_validate(p) for p in queue[ResourceKind.property]],
        blog_posts=[BlogPostResponse.model_validate(p) for p in queue[ResourceKind.blog_post]],
    )


@router.get("/audit/{item_id}", response_model=list[AuditEventResponse])
async def audit_trail(
    item_id: uuid.UUID,
    gateway: Gateway = Depends(gateway_dep),
    content: ContentService = Depends(content_service_dep),
) -> list[Any]:
    gateway.require_admin()
    return await content.audit_trail(item_id)
