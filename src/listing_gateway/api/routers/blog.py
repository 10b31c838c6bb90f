"""
listing_gateway.api.routers.blog

Blog post endpoints.

Responsibilities:
- Public reads of published, approved posts (by list or slug).
- Submission by any authenticated identity; owner/admin edit and delete.
- Admin moderation transitions.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any, Literal

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, ConfigDict, Field, field_validator
from starlette.status import HTTP_201_CREATED

from listing_gateway.api.deps import content_service_dep, gateway_dep
from listing_gateway.api.gateway import Gateway
from listing_gateway.api.schemas import ModerationRequest
from listing_gateway.auth.policy import Action
from listing_gateway.moderation.status import ModerationStatus, PostStatus, ResourceKind
from listing_gateway.services.content_service import ContentService

router = APIRouter(prefix="/v1/blog/posts", tags=["blog"])

KIND = ResourceKind.blog_post

BlogCategory = Literal["Buying Guide", "Selling Guide", "Market Trends", "General Guide", "News"]


def _split_tags(value: str | list[str] | None) -> list[str] | None:
    # Accepts the form's comma-separated string as well as a JSON list.
    if value is None:
        return None
    parts = value.split(",") if isinstance(value, str) else value
    return [t.strip() for t in parts if t and t.strip()]


class BlogPostCreate(BaseModel):
    title: str = Field(min_length=5, max_length=256)
    excerpt: str = Field(min_length=10)
    content: str = Field(min_length=50)
    image_url: str = Field(pattern=r"^https?://\S+$", max_length=1024)
    category: BlogCategory
    author: str | None = Field(default=None, max_length=256)
    tags: list[str] = Field(default_factory=list)
    publication_status: PostStatus = PostStatus.draft

    @field_validator("tags", mode="before")
    @classmethod
    def split_tags(cls, v: Any) -> Any:
        return _split_tags(v) or []


class BlogPostUpdate(BaseModel):
    title: str | None = Field(default=None, min_length=5, max_length=256)
    excerpt: str | None = Field(default=None, min_length=10)
    content: str | None = Field(default=None, min_length=50)
    image_url: str | None = Field(default=None, pattern=r"^https?://\S+$", max_length=1024)
    category: BlogCategory | None = None
    author: str | None = Field(default=None, max_length=256)
    tags: list[str] | None = None
    publication_status: PostStatus | None = None

    @field_validator("tags", mode="before")
    @classmethod
    def split_tags(cls, v: Any) -> Any:
        return _split_tags(v)


class BlogPostResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    owner_id: str
    moderation_status: ModerationStatus
    publication_status: str
    version: int
    title: str
    slug: str
    excerpt: str
    content: str
    image_url: str
    category: str
    author: str | None
    tags: list[str]
    created_at: datetime
    updated_at: datetime


@router.get("", response_model=list[BlogPostResponse])
async def list_posts(
    category: list[str] | None = Query(default=None),
    status: str | None = Query(default=None),
    owner_id: str | None = Query(default=None),
    moderation_status: str | None = Query(default=None),
    gateway: Gateway = Depends(gateway_dep),
    content: ContentService = Depends(content_service_dep),
) -> list[Any]:
    if gateway.is_admin:
        # Admins see every post in any state; the extra filters only apply to them.
        return await content.all_items(
            KIND,
            owner_id=owner_id,
            publication_status=status,
            moderation_status=moderation_status,
            categories=category or [],
        )
    return await content.public_posts(categories=category or [])


@router.get("/slug/{slug}", response_model=BlogPostResponse)
async def get_post_by_slug(
    slug: str,
    content: ContentService = Depends(content_service_dep),
) -> Any:
    return await content.public_post_by_slug(slug)


@router.post("", response_model=BlogPostResponse, status_code=HTTP_201_CREATED)
async def create_post(
    body: BlogPostCreate,
    gateway: Gateway = Depends(gateway_dep),
    content: ContentService = Depends(content_service_dep),
) -> Any:
    gateway.require_create(KIND)
    return await content.create_post(actor=gateway.identity, fields=body.model_dump(mode="json"))


@router.get("/{post_id}", response_model=BlogPostResponse)
async def get_post(
    post_id: uuid.UUID,
    gateway: Gateway = Depends(gateway_dep),
) -> Any:
    return await gateway.load(KIND, post_id, Action.read)


@router.put("/{post_id}", response_model=BlogPostResponse)
async def update_post(
    post_id: uuid.UUID,
    body: BlogPostUpdate,
    gateway: Gateway = Depends(gateway_dep),
    content: ContentService = Depends(content_service_dep),
) -> Any:
    item = await gateway.load(KIND, post_id, Action.update)
    changes = {
        k: v
        for k, v in body.model_dump(exclude_unset=True, mode="json").items()
        if v is not None or k == "author"
    }
    return await content.update(item, actor=gateway.identity, changes=changes)


@router.delete("/{post_id}")
async def delete_post(
    post_id: uuid.UUID,
    gateway: Gateway = Depends(gateway_dep),
    content: ContentService = Depends(content_service_dep),
) -> dict[str, str]:
    item = await gateway.load(KIND, post_id, Action.delete)
    await content.delete(item, actor=gateway.identity)
    return {"status": "deleted"}


@router.patch("/{post_id}/moderation", response_model=BlogPostResponse)
async def moderate_post(
    post_id: uuid.UUID,
    body: ModerationRequest,
    gateway: Gateway = Depends(gateway_dep),
    content: ContentService = Depends(content_service_dep),
) -> Any:
    item = await gateway.load(KIND, post_id, Action.moderation_transition)
    return await content.transition(
        item,
        actor=gateway.identity,
        requested=body.moderation_status,
        expected_status=body.expected_status,
    )
