"""
listing_gateway.db.models

Persistence schema for moderated marketplace content.

Responsibilities:
- Define ORM models:
  - Property: a listing submitted by an agent (or admin)
  - BlogPost: an article submitted by any authenticated identity
  - AuditEvent: append-only trail of content and moderation changes
- Keep moderation and publication status in two separate columns.
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import JSON, Enum, Index, Integer, String, Text, Uuid as SAUuid
from sqlalchemy.orm import Mapped, mapped_column

from listing_gateway.db.base import Base
from listing_gateway.moderation.status import ModerationStatus, ResourceKind


def _utcnow() -> datetime:
    # Persist naive UTC timestamps for simplicity.
    return datetime.now(UTC).replace(tzinfo=None)


class ModeratedMixin:
    """
    Columns shared by every moderated content kind.

    `version` is bumped on every write and used as the compare-and-swap guard.
    """

    id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    owner_id: Mapped[str] = mapped_column(String(256), nullable=False, index=True)

    moderation_status: Mapped[ModerationStatus] = mapped_column(
        Enum(
            ModerationStatus,
            native_enum=False,
            length=16,
            values_callable=lambda e: [m.value for m in e],
        ),
        nullable=False,
        index=True,
        default=ModerationStatus.pending,
    )
    publication_status: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow, onupdate=_utcnow)


class Property(ModeratedMixin, Base):
    __tablename__ = "properties"

    kind = ResourceKind.property

    address: Mapped[str] = mapped_column(String(256), nullable=False)
    city: Mapped[str] = mapped_column(String(128), nullable=False)
    state: Mapped[str] = mapped_column(String(64), nullable=False)
    zip: Mapped[str] = mapped_column(String(16), nullable=False)
    price: Mapped[float] = mapped_column(nullable=False)
    bedrooms: Mapped[int] = mapped_column(nullable=False, default=0)
    bathrooms: Mapped[float] = mapped_column(nullable=False, default=0)
    area_sq_ft: Mapped[float] = mapped_column(nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    property_type: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    year_built: Mapped[int | None] = mapped_column(nullable=True)
    images: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    features: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    views: Mapped[int] = mapped_column(nullable=False, default=0)

    __table_args__ = (Index("ix_properties_public", "moderation_status", "publication_status"),)


class BlogPost(ModeratedMixin, Base):
    __tablename__ = "blog_posts"

    kind = ResourceKind.blog_post

    title: Mapped[str] = mapped_column(String(256), nullable=False)
    slug: Mapped[str] = mapped_column(String(300), nullable=False, unique=True)
    excerpt: Mapped[str] = mapped_column(Text, nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    image_url: Mapped[str] = mapped_column(String(1024), nullable=False)
    category: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    author: Mapped[str | None] = mapped_column(String(256), nullable=True)
    tags: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)

    __table_args__ = (Index("ix_blog_posts_public", "moderation_status", "publication_status"),)


MODELS: dict[ResourceKind, type[Property] | type[BlogPost]] = {
    ResourceKind.property: Property,
    ResourceKind.blog_post: BlogPost,
}


class AuditEvent(Base):
    __tablename__ = "audit_events"

    id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    item_kind: Mapped[str] = mapped_column(String(32), nullable=False)
    item_id: Mapped[uuid.UUID] = mapped_column(SAUuid(as_uuid=True), nullable=False, index=True)

    actor: Mapped[str] = mapped_column(String(256), nullable=False)
    event_type: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    details: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow, index=True)

    __table_args__ = (Index("ix_audit_item_created", "item_id", "created_at"),)


# --- Module Notes -----------------------------------------------------------
# There is no soft delete: deleting an item removes the row; its audit trail remains.
