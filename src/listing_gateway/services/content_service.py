"""
listing_gateway.services.content_service

Content lifecycle service (transaction + persistence owner).

Responsibilities:
- Create, edit and delete properties and blog posts on behalf of an authorized caller.
- Apply moderation transitions through the approval state machine.
- Persist every change with compare-and-swap and record an audit event in the same
  transaction.

Authorization happens before these methods are called (see `api.gateway`); items passed
in are the freshly loaded rows the decision was made against.
"""

from __future__ import annotations

import re
import uuid
from collections.abc import Sequence
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from listing_gateway.auth.models import Identity
from listing_gateway.auth.policy import PolicyEngine
from listing_gateway.db.models import MODELS, AuditEvent, BlogPost, Property
from listing_gateway.db.repositories.audit import AuditRepo
from listing_gateway.db.repositories.content import BlogPostRepo, ContentRepo, PropertyRepo
from listing_gateway.errors import Conflict, Forbidden, InvalidState, NotFound
from listing_gateway.moderation.state_machine import (
    ModerationStateMachine,
    TransitionError,
    initial_status,
    parse_status,
    promote_on_approval,
)
from listing_gateway.moderation.status import (
    ModerationStatus,
    PostStatus,
    PropertyStatus,
    ResourceKind,
)
from listing_gateway.observability.logging import get_logger
from listing_gateway.settings import Settings

log = get_logger(__name__)

# Fields a caller can never set through create/edit payloads.
PROTECTED_FIELDS = frozenset(
    {"id", "owner_id", "moderation_status", "version", "views", "created_at", "updated_at"}
)

# Publicly filterable property statuses; other filters from the public yield nothing.
PUBLIC_STATUS_FILTERS = frozenset({PropertyStatus.for_sale, PropertyStatus.for_rent})


def make_slug(title: str) -> str:
    base = re.sub(r"[^a-z0-9\s-]", "", title.lower())
    base = re.sub(r"-+", "-", re.sub(r"\s+", "-", base.strip())).strip("-")
    return f"{base or 'post'}-{uuid.uuid4().hex[:8]}"


def _strip_protected(fields: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in fields.items() if k not in PROTECTED_FIELDS}


class ContentService:
    def __init__(
        self,
        *,
        session: AsyncSession,
        settings: Settings,
        policy: PolicyEngine,
    ) -> None:
        self._session = session
        self._settings = settings
        self._policy = policy
        self._machine = ModerationStateMachine(policy)

        self._properties = PropertyRepo(session)
        self._posts = BlogPostRepo(session)
        self._audit = AuditRepo(session)

    def _repo(self, kind: ResourceKind) -> ContentRepo[Any]:
        return self._properties if kind is ResourceKind.property else self._posts

    async def get(self, kind: ResourceKind, item_id: uuid.UUID) -> Property | BlogPost | None:
        return await self._repo(kind).get(item_id)

    # -- create -------------------------------------------------------------------------

    async def create_property(self, *, actor: Identity, fields: dict[str, Any]) -> Property:
        data = _strip_protected(fields)
        # "Pending Approval" is the placeholder publication state until a moderator acts.
        requested = data.pop("publication_status", None)
        data["publication_status"] = str(requested or PropertyStatus.pending_approval)

        status = initial_status(self._policy.is_admin(actor))
        promoted = promote_on_approval(ResourceKind.property, status, data["publication_status"])
        if promoted is not None:
            data["publication_status"] = promoted

        item = Property(
            **data,
            owner_id=actor.subject_id,
            moderation_status=status,
            version=1,
        )
        return await self._finish_create(item, actor)

    async def create_post(self, *, actor: Identity, fields: dict[str, Any]) -> BlogPost:
        data = _strip_protected(fields)
        data["publication_status"] = str(data.get("publication_status") or PostStatus.draft)
        data.setdefault("author", None)
        if not data["author"]:
            data["author"] = actor.email or "Anonymous"

        item = BlogPost(
            **data,
            slug=await self._unique_slug(data["title"]),
            owner_id=actor.subject_id,
            moderation_status=initial_status(self._policy.is_admin(actor)),
            version=1,
        )
        return await self._finish_create(item, actor)

    async def _unique_slug(self, title: str) -> str:
        slug = make_slug(title)
        while await self._posts.slug_exists(slug):
            slug = make_slug(title)
        return slug

    async def _finish_create(self, item: Property | BlogPost, actor: Identity) -> Any:
        await self._repo(item.kind).add(item)
        await self._audit.add(
            item_kind=item.kind,
            item_id=item.id,
            actor=actor.subject_id or "anonymous",
            event_type="ITEM_CREATED",
            details={"moderation_status": item.moderation_status.value},
        )
        await self._session.commit()
        log.info(
            "item_created",
            kind=item.kind.value,
            item_id=str(item.id),
            moderation_status=item.moderation_status.value,
        )
        return item

    # -- edit / delete ------------------------------------------------------------------

    async def update(
        self, item: Property | BlogPost, *, actor: Identity, changes: dict[str, Any]
    ) -> Any:
        values = _strip_protected(changes)
        if isinstance(item, BlogPost) and values.get("title") and values["title"] != item.title:
            values["slug"] = await self._unique_slug(values["title"])

        if (
            values
            and self._settings.reset_moderation_on_owner_edit
            and not self._policy.is_admin(actor)
            and item.moderation_status is not ModerationStatus.pending
        ):
            # Edited content goes back through review before it is public again.
            values["moderation_status"] = ModerationStatus.pending

        if not values:
            return item

        previous = item.moderation_status
        updated = await self._repo(item.kind).compare_and_set(
            item.id,
            expected_version=item.version,
            expected_owner_id=item.owner_id,
            values=values,
        )
        if updated is None:
            await self._session.rollback()
            raise Conflict()

        await self._audit.add(
            item_kind=item.kind,
            item_id=item.id,
            actor=actor.subject_id or "anonymous",
            event_type="ITEM_UPDATED",
            details={
                "fields": sorted(k for k in values if k != "moderation_status"),
                "moderation_status": {
                    "from": previous.value,
                    "to": updated.moderation_status.value,
                },
            },
        )
        await self._session.commit()
        return updated

    async def delete(self, item: Property | BlogPost, *, actor: Identity) -> None:
        deleted = await self._repo(item.kind).delete_if_version(
            item.id, expected_version=item.version
        )
        if not deleted:
            await self._session.rollback()
            raise Conflict()
        await self._audit.add(
            item_kind=item.kind,
            item_id=item.id,
            actor=actor.subject_id or "anonymous",
            event_type="ITEM_DELETED",
            details={"owner_id": item.owner_id},
        )
        await self._session.commit()
        log.info("item_deleted", kind=item.kind.value, item_id=str(item.id))

    # -- moderation ---------------------------------------------------------------------

    async def transition(
        self,
        item: Property | BlogPost,
        *,
        actor: Identity,
        requested: str,
        expected_status: str | None = None,
    ) -> Any:
        current = item.moderation_status
        if expected_status is not None:
            expected = parse_status(expected_status)
            if expected is None:
                raise InvalidState("Expected moderation status is not valid")
            if expected is not current:
                log.info(
                    "moderation_conflict",
                    item_id=str(item.id),
                    expected=expected.value,
                    actual=current.value,
                )
                raise Conflict()

        outcome = self._machine.transition(current, requested, actor, kind=item.kind)
        if outcome.error is TransitionError.not_permitted:
            raise Forbidden()
        if outcome.error is TransitionError.invalid_state:
            raise InvalidState()
        if not outcome.changed:
            return item

        # A lost race rolls back and expires `item`; keep what is logged afterwards.
        item_id, kind = item.id, item.kind
        target = outcome.status
        values: dict[str, Any] = {"moderation_status": target}
        promoted = promote_on_approval(kind, target, item.publication_status)
        if promoted is not None:
            values["publication_status"] = promoted

        # Status and any promotion land in one conditional write: no intermediate state.
        updated = await self._repo(kind).compare_and_set(
            item_id, expected_version=item.version, values=values
        )
        if updated is None:
            await self._session.rollback()
            log.info("moderation_conflict", item_id=str(item_id), requested=target.value)
            raise Conflict()

        await self._audit.add(
            item_kind=kind,
            item_id=item_id,
            actor=actor.subject_id or "anonymous",
            event_type="MODERATION_CHANGED",
            details={"from": current.value, "to": target.value, "publication_status": promoted},
        )
        await self._session.commit()
        log.info(
            "moderation_changed",
            kind=kind.value,
            item_id=str(item_id),
            from_status=current.value,
            to_status=target.value,
        )
        return updated

    # -- reads --------------------------------------------------------------------------

    async def increment_views(self, property_id: uuid.UUID) -> int:
        views = await self._properties.increment_views(property_id)
        if views is None:
            await self._session.rollback()
            raise NotFound("Property not found")
        await self._session.commit()
        return views

    async def public_properties(self, *, status: str | None = None) -> list[Property]:
        extra = []
        if status is not None:
            if status not in PUBLIC_STATUS_FILTERS:
                return []
            extra.append(Property.publication_status == status)
        return await self._properties.list_public(
            limit=self._settings.public_page_size, extra=extra
        )

    async def public_posts(self, *, categories: Sequence[str] = ()) -> list[BlogPost]:
        extra = [BlogPost.category.in_(list(categories))] if categories else []
        return await self._posts.list_public(limit=self._settings.public_page_size, extra=extra)

    async def public_post_by_slug(self, slug: str) -> BlogPost:
        post = await self._posts.get_public_by_slug(slug)
        if post is None:
            raise NotFound("Blog post not found")
        return post

    async def owned(
        self, kind: ResourceKind, *, owner_id: str, property_type: str | None = None
    ) -> list[Any]:
        extra = []
        if kind is ResourceKind.property and property_type is not None:
            extra.append(Property.property_type == property_type)
        return await self._repo(kind).list_for_owner(
            owner_id, limit=self._settings.public_page_size, extra=extra
        )

    async def all_items(
        self,
        kind: ResourceKind,
        *,
        owner_id: str | None = None,
        publication_status: str | None = None,
        moderation_status: ModerationStatus | str | None = None,
        categories: Sequence[str] = (),
    ) -> list[Any]:
        extra = []
        if kind is ResourceKind.blog_post and categories:
            extra.append(BlogPost.category.in_(list(categories)))
        moderation = None
        if moderation_status is not None:
            moderation = parse_status(moderation_status)
            if moderation is None:
                raise InvalidState("Moderation status filter is not valid")
        return await self._repo(kind).list_all(
            limit=self._settings.public_page_size,
            owner_id=owner_id,
            publication_status=publication_status,
            moderation_status=moderation,
            extra=extra,
        )

    async def moderation_queue(self) -> dict[ResourceKind, list[Any]]:
        return {
            kind: await self.all_items(kind, moderation_status=ModerationStatus.pending)
            for kind in MODELS
        }

    async def audit_trail(self, item_id: uuid.UUID) -> list[AuditEvent]:
        return await self._audit.list_for_item(item_id)


# --- Module Notes -----------------------------------------------------------
# A lost compare-and-swap surfaces as `Conflict` (HTTP 409); the caller re-fetches and
# decides whether to retry. Nothing here retries on its own.
