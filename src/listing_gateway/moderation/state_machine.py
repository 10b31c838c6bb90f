"""
listing_gateway.moderation.state_machine

Approval State Machine.

Responsibilities:
- Validate a requested moderation status and the caller's right to request it.
- Compute the next moderation status (and, at approval time, the publication status
  promotion) without touching storage; persistence applies the result atomically.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass

from listing_gateway.auth.models import Identity
from listing_gateway.auth.policy import Action, OperationDescriptor, PolicyEngine
from listing_gateway.moderation.status import (
    ModerationStatus,
    PropertyStatus,
    ResourceKind,
)


class TransitionError(enum.StrEnum):
    invalid_state = "invalid_state"
    not_permitted = "not_permitted"


@dataclass(frozen=True, slots=True)
class TransitionOutcome:
    status: ModerationStatus | None
    changed: bool = False
    error: TransitionError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


# Pending -> {Approved, Rejected}; Approved/Rejected -> Pending for re-review.
# Approved <-> Rejected is allowed directly as a single assignment (admin convenience).
ALLOWED_TRANSITIONS: dict[ModerationStatus, frozenset[ModerationStatus]] = {
    ModerationStatus.pending: frozenset({ModerationStatus.approved, ModerationStatus.rejected}),
    ModerationStatus.approved: frozenset({ModerationStatus.pending, ModerationStatus.rejected}),
    ModerationStatus.rejected: frozenset({ModerationStatus.pending, ModerationStatus.approved}),
}


def parse_status(value: ModerationStatus | str) -> ModerationStatus | None:
    if isinstance(value, ModerationStatus):
        return value
    try:
        return ModerationStatus(value)
    except ValueError:
        pass
    # Accept the member name too ("approved" as well as "Approved").
    return ModerationStatus.__members__.get(str(value).strip().lower())


class ModerationStateMachine:
    def __init__(self, policy: PolicyEngine) -> None:
        self._policy = policy

    def transition(
        self,
        current: ModerationStatus,
        requested: ModerationStatus | str,
        by: Identity,
        *,
        kind: ResourceKind,
    ) -> TransitionOutcome:
        decision = self._policy.authorize(
            by,
            OperationDescriptor(
                resource_kind=kind,
                action=Action.moderation_transition,
                target_moderation_status=current,
            ),
        )
        if not decision.allowed:
            return TransitionOutcome(status=None, error=TransitionError.not_permitted)

        target = parse_status(requested)
        if target is None:
            return TransitionOutcome(status=None, error=TransitionError.invalid_state)

        if target is current:
            return TransitionOutcome(status=current, changed=False)
        if target not in ALLOWED_TRANSITIONS[current]:
            return TransitionOutcome(status=None, error=TransitionError.invalid_state)
        return TransitionOutcome(status=target, changed=True)


def promote_on_approval(
    kind: ResourceKind, target: ModerationStatus, publication_status: str
) -> str | None:
    """
    Publication status to write alongside an approval, or None to leave it unchanged.

    A property submitted as "Pending Approval" goes live as "For Sale" once approved.
    """
    if (
        kind is ResourceKind.property
        and target is ModerationStatus.approved
        and publication_status == PropertyStatus.pending_approval
    ):
        return PropertyStatus.for_sale.value
    return None


def initial_status(is_admin: bool) -> ModerationStatus:
    # Admin submissions are trusted and skip the review queue.
    return ModerationStatus.approved if is_admin else ModerationStatus.pending


# --- Module Notes -----------------------------------------------------------
# Same-state requests are idempotent no-ops (changed=False); the service skips the write.
