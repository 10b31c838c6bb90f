"""
listing_gateway.db.repositories.content

Repositories for moderated content (`Property`, `BlogPost`).

Responsibilities:
- Fetch items fresh from the store (never from the identity map).
- Apply writes as compare-and-swap on `version`, so concurrent writers cannot silently
  overwrite each other.
- Build listing queries; public listings always go through `public_visibility_clause`.
"""

from __future__ import annotations

import uuid
from collections.abc import Sequence
from datetime import UTC, datetime
from typing import Any, Generic, TypeVar

from sqlalchemy import delete, desc, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from listing_gateway.db.models import BlogPost, Property
from listing_gateway.moderation.status import ModerationStatus
from listing_gateway.moderation.visibility import public_visibility_clause

ItemT = TypeVar("ItemT", Property, BlogPost)


class ContentRepo(Generic[ItemT]):
    model: type[ItemT]

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, item_id: uuid.UUID) -> ItemT | None:
        # populate_existing: authorization must see the row as stored right now.
        return await self._session.get(self.model, item_id, populate_existing=True)

    async def add(self, item: ItemT) -> ItemT:
        self._session.add(item)
        await self._session.flush()
        return item

    async def compare_and_set(
        self,
        item_id: uuid.UUID,
        *,
        expected_version: int,
        values: dict[str, Any],
        expected_owner_id: str | None = None,
    ) -> ItemT | None:
        """
        Conditionally update one row; returns the refreshed item, or None if the row
        changed (or vanished) since `expected_version` was read.
        """
        stmt = update(self.model).where(
            self.model.id == item_id, self.model.version == expected_version
        )
        if expected_owner_id is not None:
            stmt = stmt.where(self.model.owner_id == expected_owner_id)
        stmt = stmt.values(
            **values,
            version=expected_version + 1,
            updated_at=datetime.now(UTC).replace(tzinfo=None),
        ).execution_options(synchronize_session=False)

        result = await self._session.execute(stmt)
        if result.rowcount != 1:
            return None
        return await self.get(item_id)

    async def delete_if_version(self, item_id: uuid.UUID, *, expected_version: int) -> bool:
        stmt = (
            delete(self.model)
            .where(self.model.id == item_id, self.model.version == expected_version)
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        return result.rowcount == 1

    async def list_public(self, *, limit: int, extra: Sequence[Any] = ()) -> list[ItemT]:
        stmt = (
            select(self.model)
            .where(public_visibility_clause(self.model), *extra)
            .order_by(desc(self.model.created_at))
            .limit(limit)
        )
        return list((await self._session.execute(stmt)).scalars().all())

    async def list_for_owner(
        self, owner_id: str, *, limit: int, extra: Sequence[Any] = ()
    ) -> list[ItemT]:
        stmt = (
            select(self.model)
            .where(self.model.owner_id == owner_id, *extra)
            .order_by(desc(self.model.created_at))
            .limit(limit)
        )
        return list((await self._session.execute(stmt)).scalars().all())

    async def list_all(
        self,
        *,
        limit: int,
        owner_id: str | None = None,
        publication_status: str | None = None,
        moderation_status: ModerationStatus | None = None,
        extra: Sequence[Any] = (),
    ) -> list[ItemT]:
        stmt = select(self.model).where(*extra)
        if owner_id is not None:
            stmt = stmt.where(self.model.owner_id == owner_id)
        if publication_status is not None:
            stmt = stmt.where(self.model.publication_status == publication_status)
        if moderation_status is not None:
            stmt = stmt.where(self.model.moderation_status == moderation_status)
        stmt = stmt.order_by(desc(self.model.created_at)).limit(limit)
        return list((await self._session.execute(stmt)).scalars().all())


class PropertyRepo(ContentRepo[Property]):
    model = Property

    async def increment_views(self, item_id: uuid.UUID) -> int | None:
        # Atomic increment; hidden listings behave as if they did not exist.
        stmt = (
            update(Property)
            .where(Property.id == item_id, public_visibility_clause(Property))
            .values(views=Property.views + 1)
            .returning(Property.views)
            .execution_options(synchronize_session=False)
        )
        return (await self._session.execute(stmt)).scalar_one_or_none()


class BlogPostRepo(ContentRepo[BlogPost]):
    model = BlogPost

    async def get_public_by_slug(self, slug: str) -> BlogPost | None:
        stmt = select(BlogPost).where(BlogPost.slug == slug, public_visibility_clause(BlogPost))
        return (await self._session.execute(stmt)).scalar_one_or_none()

    async def slug_exists(self, slug: str) -> bool:
        stmt = select(BlogPost.id).where(BlogPost.slug == slug).limit(1)
        return (await self._session.execute(stmt)).first() is not None


# --- Module Notes -----------------------------------------------------------
# `compare_and_set` is the only write path for existing items; callers pass the
# `version` they authorized against.
