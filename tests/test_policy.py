"""
tests.test_policy

Authorization policy engine.

Responsibilities:
- Anonymous callers never mutate and only read approved content.
- Non-owner, non-admin callers cannot edit or delete.
- Admin rights need both the role claim and membership in the admin identity set.
- Anything not matched by a rule is denied.
"""

from __future__ import annotations

import itertools

import pytest

from listing_gateway.auth.models import Identity, Role
from listing_gateway.auth.policy import (
    Action,
    DenyReason,
    OperationDescriptor,
    PolicyEngine,
)
from listing_gateway.moderation.status import ModerationStatus, ResourceKind

ADMIN = "root@listings.test"

policy = PolicyEngine(admin_identities=[ADMIN, "ops-subject"])

anonymous = Identity.anonymous()
rejected = Identity.anonymous(credential_rejected=True)
owner = Identity(subject_id="agent-a", role=Role.agent)
other_agent = Identity(subject_id="agent-b", role=Role.agent)
user = Identity(subject_id="user-1", role=Role.user)
admin = Identity(subject_id="admin-1", role=Role.admin, email=ADMIN)
pretender = Identity(subject_id="mallory", role=Role.admin, email="mallory@evil.test")

MUTATIONS = (Action.create, Action.update, Action.delete, Action.moderation_transition)


def _op(
    action: Action,
    *,
    kind: ResourceKind = ResourceKind.property,
    owner_id: str | None = "agent-a",
    status: ModerationStatus | None = ModerationStatus.pending,
) -> OperationDescriptor:
    return OperationDescriptor(
        resource_kind=kind,
        action=action,
        target_owner_id=owner_id,
        target_moderation_status=status,
    )


@pytest.mark.parametrize(
    ("caller", "action", "kind", "status"),
    list(
        itertools.product(
            [anonymous, rejected],
            MUTATIONS,
            list(ResourceKind),
            list(ModerationStatus),
        )
    ),
)
def test_anonymous_never_mutates(
    caller: Identity, action: Action, kind: ResourceKind, status: ModerationStatus
) -> None:
    decision = policy.authorize(caller, _op(action, kind=kind, status=status))
    assert not decision.allowed
    assert decision.reason is DenyReason.unauthenticated


@pytest.mark.parametrize("status", list(ModerationStatus))
def test_anonymous_reads_only_approved(status: ModerationStatus) -> None:
    decision = policy.authorize(anonymous, _op(Action.read, status=status))
    assert decision.allowed is (status is ModerationStatus.approved)


@pytest.mark.parametrize("action", [Action.update, Action.delete])
@pytest.mark.parametrize("status", list(ModerationStatus))
def test_non_owner_cannot_edit(action: Action, status: ModerationStatus) -> None:
    for caller in (other_agent, user, pretender):
        decision = policy.authorize(caller, _op(action, status=status))
        assert not decision.allowed
        assert decision.reason is DenyReason.forbidden

    assert policy.authorize(owner, _op(action, status=status)).allowed
    assert policy.authorize(admin, _op(action, status=status)).allowed


def test_owner_reads_own_hidden_item_but_others_do_not() -> None:
    assert policy.authorize(owner, _op(Action.read)).allowed
    assert not policy.authorize(other_agent, _op(Action.read)).allowed
    assert policy.authorize(admin, _op(Action.read)).allowed


def test_missing_owner_never_matches() -> None:
    nobody = Identity(subject_id="x", role=Role.user)
    assert not policy.authorize(nobody, _op(Action.update, owner_id=None)).allowed


def test_create_roles_per_kind() -> None:
    prop = OperationDescriptor(resource_kind=ResourceKind.property, action=Action.create)
    post = OperationDescriptor(resource_kind=ResourceKind.blog_post, action=Action.create)

    assert not policy.authorize(user, prop).allowed
    assert policy.authorize(owner, prop).allowed
    assert policy.authorize(admin, prop).allowed
    # A role claim that is not backed by the admin set is just a user.
    assert not policy.authorize(pretender, prop).allowed

    for caller in (user, owner, admin, pretender):
        assert policy.authorize(caller, post).allowed


@pytest.mark.parametrize("kind", list(ResourceKind))
def test_moderation_needs_super_admin(kind: ResourceKind) -> None:
    op = _op(Action.moderation_transition, kind=kind)
    assert policy.authorize(admin, op).allowed
    for caller in (owner, other_agent, user, pretender):
        decision = policy.authorize(caller, op)
        assert not decision.allowed
        assert decision.reason is DenyReason.forbidden


def test_admin_set_matches_subject_id_or_email_case_insensitively() -> None:
    by_subject = Identity(subject_id="ops-subject", role=Role.admin)
    by_email = Identity(subject_id="z", role=Role.admin, email="ROOT@Listings.test")
    assert policy.is_admin(by_subject)
    assert policy.is_admin(by_email)

    # Membership alone does not make an admin without the role claim.
    listed_user = Identity(subject_id="ops-subject", role=Role.user)
    assert policy.is_super_admin(listed_user)
    assert not policy.is_admin(listed_user)
    assert policy.effective_role(pretender) is Role.user


def test_unmatched_operation_is_default_denied() -> None:
    # An action no rule knows about (e.g. one added later without a policy entry).
    op = OperationDescriptor(
        resource_kind=ResourceKind.property,
        action="publish",  # type: ignore[arg-type]
    )
    for caller in (owner, user, other_agent):
        decision = policy.authorize(caller, op)
        assert not decision.allowed
        assert decision.reason is DenyReason.forbidden
        assert decision.rule == "default_deny"

    # The admin override still applies, and anonymous callers are still unauthenticated.
    assert policy.authorize(admin, op).allowed
    assert policy.authorize(anonymous, op).reason is DenyReason.unauthenticated
