"""
listing_gateway.auth.models

Auth domain models.

Responsibilities:
- Define the caller identity (`Identity`) attached to every request.
- Define verified token claims (`Claims`).
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import datetime


class Role(enum.StrEnum):
    anonymous = "anonymous"
    user = "user"
    agent = "agent"
    admin = "admin"

    @classmethod
    def from_claim(cls, value: object) -> Role:
        # Unknown or missing role claims degrade to the least-privileged authenticated role.
        try:
            role = cls(str(value).lower())
        except ValueError:
            return cls.user
        return cls.user if role is cls.anonymous else role


@dataclass(frozen=True, slots=True)
class Claims:
    subject_id: str
    role: Role
    email: str | None
    issued_at: datetime | None
    expires_at: datetime


@dataclass(frozen=True, slots=True)
class Identity:
    """
    Caller identity for the lifetime of one request.

    `credential_rejected` marks a caller who offered a bearer token that failed
    verification; they are still anonymous for every policy decision.
    """

    subject_id: str | None = None
    role: Role = Role.anonymous
    email: str | None = None
    credential_rejected: bool = False

    @property
    def is_anonymous(self) -> bool:
        return self.role is Role.anonymous or self.subject_id is None

    @classmethod
    def anonymous(cls, *, credential_rejected: bool = False) -> Identity:
        return cls(credential_rejected=credential_rejected)

    @classmethod
    def from_claims(cls, claims: Claims) -> Identity:
        return cls(subject_id=claims.subject_id, role=claims.role, email=claims.email)


# --- Module Notes -----------------------------------------------------------
# Identity is never persisted; handlers read it from `request.state.identity`.
