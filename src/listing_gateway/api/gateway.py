"""
listing_gateway.api.gateway

Route dispatch adapter: the only place handlers obtain authorization.

Responsibilities:
- Load the target item fresh from the store before deciding, and build the operation
  descriptor from the persisted owner/moderation fields (never from the payload).
- Consult the policy engine and abort with the matching error on Deny.
- Normalize hidden reads to the same NotFound a missing id produces.
"""

from __future__ import annotations

import uuid
from typing import Any

from listing_gateway.auth.models import Identity
from listing_gateway.auth.policy import Action, OperationDescriptor, PolicyEngine
from listing_gateway.errors import NotFound, from_deny
from listing_gateway.moderation.status import ResourceKind
from listing_gateway.observability.logging import get_logger
from listing_gateway.services.content_service import ContentService

log = get_logger(__name__)


class Gateway:
    def __init__(
        self,
        *,
        identity: Identity,
        policy: PolicyEngine,
        content: ContentService,
    ) -> None:
        self.identity = identity
        self._policy = policy
        self._content = content

    @property
    def is_admin(self) -> bool:
        return self._policy.is_admin(self.identity)

    def require(self, op: OperationDescriptor) -> None:
        decision = self._policy.authorize(self.identity, op)
        if decision.allowed:
            return
        log.info(
            "authorization_denied",
            action=op.action.value,
            kind=op.resource_kind.value,
            reason=decision.reason.value if decision.reason else None,
            rule=decision.rule,
        )
        raise from_deny(decision.reason)

    def require_create(self, kind: ResourceKind) -> None:
        self.require(OperationDescriptor(resource_kind=kind, action=Action.create))

    def require_owner_scope(self, kind: ResourceKind) -> str:
        # "My items": a read scoped to the caller's own subject id.
        self.require(
            OperationDescriptor(
                resource_kind=kind,
                action=Action.read,
                target_owner_id=self.identity.subject_id,
            )
        )
        return self.identity.subject_id  # type: ignore[return-value]

    def require_admin(self, kind: ResourceKind = ResourceKind.property) -> None:
        self.require(OperationDescriptor(resource_kind=kind, action=Action.moderation_transition))

    async def load(self, kind: ResourceKind, item_id: uuid.UUID, action: Action) -> Any:
        item = await self._content.get(kind, item_id)
        not_found = NotFound(f"{kind.label} not found")
        if item is None:
            raise not_found

        op = OperationDescriptor(
            resource_kind=kind,
            action=action,
            target_owner_id=item.owner_id,
            target_moderation_status=item.moderation_status,
        )
        if action is Action.read:
            # Existence of content the caller cannot see is never confirmed.
            if not self._policy.authorize(self.identity, op).allowed:
                raise not_found
            return item

        self.require(op)
        return item


# --- Module Notes -----------------------------------------------------------
# Every router path that touches an existing item goes through `Gateway.load`.
