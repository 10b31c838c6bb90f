"""
listing_gateway.db.repositories.audit

Repository for `AuditEvent` entities.

Responsibilities:
- Append audit events for content writes and moderation decisions.
- Query the audit trail of one item.
"""

from __future__ import annotations

import uuid
from typing import Any

from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession

from listing_gateway.db.models import AuditEvent
from listing_gateway.moderation.status import ResourceKind


class AuditRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add(
        self,
        *,
        item_kind: ResourceKind,
        item_id: uuid.UUID,
        actor: str,
        event_type: str,
        details: dict[str, Any],
    ) -> AuditEvent:
        # Audit events are append-only (no update/delete) in normal operation.
        ev = AuditEvent(
            item_kind=item_kind.value,
            item_id=item_id,
            actor=actor,
            event_type=event_type,
            details=details,
        )
        self._session.add(ev)
        await self._session.flush()
        return ev

    async def list_for_item(self, item_id: uuid.UUID, *, limit: int = 200) -> list[AuditEvent]:
        # Newest first for UI consumption.
        stmt = (
            select(AuditEvent)
            .where(AuditEvent.item_id == item_id)
            .order_by(desc(AuditEvent.created_at))
            .limit(limit)
        )
        return list((await self._session.execute(stmt)).scalars().all())
