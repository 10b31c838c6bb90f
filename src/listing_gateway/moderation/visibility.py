"""
listing_gateway.moderation.visibility

Public visibility predicate.

Responsibilities:
- Decide whether a content item may be shown to anonymous/third-party callers.
- Provide the equivalent SQL filter for public listing queries, built from the same
  constants, so no query re-implements the rule inline.
"""

from __future__ import annotations

from typing import ClassVar, Protocol

from sqlalchemy import ColumnElement, and_

from listing_gateway.moderation.status import (
    ModerationStatus,
    PostStatus,
    PropertyStatus,
    ResourceKind,
)

PUBLIC_PUBLICATION_STATES: dict[ResourceKind, frozenset[str]] = {
    ResourceKind.property: frozenset(
        {PropertyStatus.for_sale, PropertyStatus.for_rent, PropertyStatus.sold}
    ),
    ResourceKind.blog_post: frozenset({PostStatus.published}),
}


class ModeratedItem(Protocol):
    kind: ClassVar[ResourceKind]
    moderation_status: ModerationStatus
    publication_status: str


def is_publicly_visible(item: ModeratedItem) -> bool:
    return item.moderation_status == ModerationStatus.approved and (
        item.publication_status in PUBLIC_PUBLICATION_STATES[item.kind]
    )


def public_visibility_clause(model) -> ColumnElement[bool]:
    # Moderation and publication filters compose with AND, never OR.
    states = sorted(str(s) for s in PUBLIC_PUBLICATION_STATES[model.kind])
    return and_(
        model.moderation_status == ModerationStatus.approved,
        model.publication_status.in_(states),
    )


# --- Module Notes -----------------------------------------------------------
# `model` is an ORM class from `db.models` exposing `kind`, `moderation_status` and
# `publication_status`.
