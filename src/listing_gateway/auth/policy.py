"""
listing_gateway.auth.policy

Authorization Policy Engine.

Responsibilities:
- Decide Allow/Deny for (identity, operation) from a single ordered rule table.
- Own the super-admin predicate: an `admin` role claim only counts when the identity
  is also listed in the configured admin identity set.

Denials are ordinary return values; nothing in this module raises for them.
"""

from __future__ import annotations

import enum
from collections.abc import Callable, Iterable
from dataclasses import dataclass

from listing_gateway.auth.models import Identity, Role
from listing_gateway.moderation.status import ModerationStatus, ResourceKind
from listing_gateway.observability.logging import get_logger

log = get_logger(__name__)


class Action(enum.StrEnum):
    create = "create"
    read = "read"
    update = "update"
    delete = "delete"
    moderation_transition = "moderation_transition"


class DenyReason(enum.StrEnum):
    unauthenticated = "unauthenticated"
    forbidden = "forbidden"


@dataclass(frozen=True, slots=True)
class OperationDescriptor:
    resource_kind: ResourceKind
    action: Action
    target_owner_id: str | None = None
    target_moderation_status: ModerationStatus | None = None


@dataclass(frozen=True, slots=True)
class Decision:
    allowed: bool
    reason: DenyReason | None = None
    rule: str = ""

    @classmethod
    def allow(cls, rule: str) -> Decision:
        return cls(allowed=True, rule=rule)

    @classmethod
    def deny(cls, reason: DenyReason, rule: str) -> Decision:
        return cls(allowed=False, reason=reason, rule=rule)


# Who may submit new content, per kind. Kinds missing here cannot be created by anyone
# except through the admin override.
CREATE_ROLES: dict[ResourceKind, frozenset[Role]] = {
    ResourceKind.blog_post: frozenset({Role.user, Role.agent, Role.admin}),
    ResourceKind.property: frozenset({Role.agent, Role.admin}),
}

_OWNER_ACTIONS = frozenset({Action.update, Action.delete, Action.read})


@dataclass(frozen=True, slots=True)
class _Rule:
    name: str
    applies: Callable[[Identity, Role, OperationDescriptor], bool]
    decide: Callable[[Identity, Role, OperationDescriptor], Decision]


def _is_owner(identity: Identity, op: OperationDescriptor) -> bool:
    return op.target_owner_id is not None and identity.subject_id == op.target_owner_id


def _decide_create(_: Identity, role: Role, op: OperationDescriptor) -> Decision:
    if role in CREATE_ROLES.get(op.resource_kind, frozenset()):
        return Decision.allow("create")
    return Decision.deny(DenyReason.forbidden, "create")


def _decide_owner(identity: Identity, _: Role, op: OperationDescriptor) -> Decision:
    if _is_owner(identity, op):
        return Decision.allow("owner")
    return Decision.deny(DenyReason.forbidden, "owner")


# Evaluated top to bottom; first rule whose `applies` is true decides.
POLICY_TABLE: tuple[_Rule, ...] = (
    _Rule(
        "public_read",
        lambda _i, _r, op: op.action is Action.read
        and op.target_moderation_status is ModerationStatus.approved,
        lambda *_: Decision.allow("public_read"),
    ),
    _Rule(
        "anonymous",
        lambda i, _r, _op: i.is_anonymous,
        lambda *_: Decision.deny(DenyReason.unauthenticated, "anonymous"),
    ),
    _Rule(
        "admin_override",
        lambda _i, r, _op: r is Role.admin,
        lambda *_: Decision.allow("admin_override"),
    ),
    _Rule("create", lambda _i, _r, op: op.action is Action.create, _decide_create),
    _Rule("owner", lambda _i, _r, op: op.action in _OWNER_ACTIONS, _decide_owner),
    _Rule(
        "moderation",
        lambda _i, _r, op: op.action is Action.moderation_transition,
        lambda *_: Decision.deny(DenyReason.forbidden, "moderation"),
    ),
)


class PolicyEngine:
    def __init__(self, *, admin_identities: Iterable[str]) -> None:
        self._admin_identities = frozenset(
            a.strip().lower() for a in admin_identities if a and a.strip()
        )

    def is_super_admin(self, identity: Identity) -> bool:
        # Independent of the role claim: membership in the configured admin set.
        candidates = (identity.subject_id, identity.email)
        return any(c is not None and c.lower() in self._admin_identities for c in candidates)

    def is_admin(self, identity: Identity) -> bool:
        return identity.role is Role.admin and self.is_super_admin(identity)

    def effective_role(self, identity: Identity) -> Role:
        if identity.is_anonymous:
            return Role.anonymous
        if identity.role is Role.admin and not self.is_super_admin(identity):
            log.warning("admin_claim_unrecognised", subject_id=identity.subject_id)
            return Role.user
        return identity.role

    def authorize(self, identity: Identity, op: OperationDescriptor) -> Decision:
        role = self.effective_role(identity)
        for rule in POLICY_TABLE:
            if rule.applies(identity, role, op):
                return rule.decide(identity, role, op)
        return Decision.deny(DenyReason.forbidden, "default_deny")


# --- Module Notes -----------------------------------------------------------
# New endpoints get default-deny for free: any (role, action) pair not matched above
# falls through to the final Deny(forbidden).
