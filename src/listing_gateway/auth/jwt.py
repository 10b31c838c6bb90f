"""
listing_gateway.auth.jwt

JWT verification (and dev/test issuing) helpers.

Responsibilities:
- Verify signature and expiry of bearer tokens and return typed `Claims`.
- Classify failures (malformed / bad signature / expired / unconfigured) for server-side
  logging; callers must treat every kind the same way.
- Issue tokens for the dev token endpoint and tests only.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

import jwt
from jwt import (
    DecodeError,
    ExpiredSignatureError,
    InvalidSignatureError,
    InvalidTokenError,
    MissingRequiredClaimError,
)

from listing_gateway.auth.models import Claims, Role


@dataclass(frozen=True, slots=True)
class JwtConfig:
    alg: str
    secret: str
    issuer: str | None = None
    audience: str | None = None


class VerificationFailure(enum.StrEnum):
    malformed = "malformed"
    signature_invalid = "signature_invalid"
    expired = "expired"
    unconfigured = "unconfigured"


class VerificationError(Exception):
    def __init__(self, kind: VerificationFailure, message: str = "") -> None:
        super().__init__(message or kind.value)
        self.kind = kind


def _timestamp(value: Any) -> datetime | None:
    if value is None:
        return None
    return datetime.fromtimestamp(int(value), tz=UTC)


class CredentialVerifier:
    """
    Pure function of (token, current time, key material).

    Key material is captured at construction; an empty secret makes every call fail
    with `unconfigured` so a misconfigured process resolves all callers to anonymous.
    """

    def __init__(self, cfg: JwtConfig) -> None:
        self._cfg = cfg

    @property
    def configured(self) -> bool:
        return bool(self._cfg.secret)

    def verify(self, raw_token: str) -> Claims:
        if not self.configured:
            raise VerificationError(VerificationFailure.unconfigured, "verification key missing")
        if not raw_token or raw_token.count(".") != 2:
            raise VerificationError(VerificationFailure.malformed, "not a compact JWS")

        options: dict[str, Any] = {"require": ["exp"], "verify_aud": self._cfg.audience is not None}
        try:
            payload = jwt.decode(
                raw_token,
                self._cfg.secret,
                algorithms=[self._cfg.alg],
                issuer=self._cfg.issuer,
                audience=self._cfg.audience,
                options=options,
            )
        except ExpiredSignatureError as e:
            raise VerificationError(VerificationFailure.expired, str(e)) from e
        except InvalidSignatureError as e:
            raise VerificationError(VerificationFailure.signature_invalid, str(e)) from e
        except (DecodeError, MissingRequiredClaimError) as e:
            raise VerificationError(VerificationFailure.malformed, str(e)) from e
        except InvalidTokenError as e:
            # Issuer/audience/iat mismatches: the token is well formed but not ours.
            raise VerificationError(VerificationFailure.signature_invalid, str(e)) from e

        # Legacy tokens carry the subject as `userId` rather than `sub`.
        subject = payload.get("sub") or payload.get("userId")
        if not isinstance(subject, str) or not subject:
            raise VerificationError(VerificationFailure.malformed, "missing subject")

        email = payload.get("email")
        return Claims(
            subject_id=subject,
            role=Role.from_claim(payload.get("role", Role.user.value)),
            email=email if isinstance(email, str) else None,
            issued_at=_timestamp(payload.get("iat")),
            expires_at=_timestamp(payload["exp"]),
        )


def issue_token(
    *,
    cfg: JwtConfig,
    subject: str,
    role: Role | str,
    email: str | None = None,
    ttl: timedelta = timedelta(hours=1),
) -> str:
    now = datetime.now(tz=UTC)
    payload: dict[str, Any] = {
        "sub": subject,
        "role": str(role),
        "iat": int(now.timestamp()),
        "exp": int((now + ttl).timestamp()),
    }
    if email is not None:
        payload["email"] = email
    if cfg.issuer is not None:
        payload["iss"] = cfg.issuer
    if cfg.audience is not None:
        payload["aud"] = cfg.audience
    return jwt.encode(payload, cfg.secret, algorithm=cfg.alg)


# --- Module Notes -----------------------------------------------------------
# Token issuing is used by:
# - `api/routers/dev_auth.py` (dev convenience, 404 in prod)
# - tests
