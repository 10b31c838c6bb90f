"""
listing_gateway.errors

Request-aborting error taxonomy.

Responsibilities:
- Map each expected failure outcome to exactly one HTTP status, in one place.
- Carry only caller-safe messages (no hint whether hidden content exists).
"""

from __future__ import annotations

from starlette.status import (
    HTTP_400_BAD_REQUEST,
    HTTP_401_UNAUTHORIZED,
    HTTP_403_FORBIDDEN,
    HTTP_404_NOT_FOUND,
    HTTP_409_CONFLICT,
)

from listing_gateway.auth.policy import DenyReason


class GatewayError(Exception):
    status_code: int = HTTP_400_BAD_REQUEST
    default_detail: str = "Bad request"

    def __init__(self, detail: str | None = None) -> None:
        self.detail = detail or self.default_detail
        super().__init__(self.detail)

    @property
    def headers(self) -> dict[str, str] | None:
        return None


class Unauthenticated(GatewayError):
    status_code = HTTP_401_UNAUTHORIZED
    default_detail = "Authentication required"

    @property
    def headers(self) -> dict[str, str] | None:
        return {"WWW-Authenticate": "Bearer"}


class Forbidden(GatewayError):
    status_code = HTTP_403_FORBIDDEN
    default_detail = "You do not have permission to perform this action"


class NotFound(GatewayError):
    status_code = HTTP_404_NOT_FOUND
    default_detail = "Not found"


class Conflict(GatewayError):
    status_code = HTTP_409_CONFLICT
    default_detail = "The item was changed concurrently; re-fetch and retry"


class InvalidState(GatewayError):
    status_code = HTTP_400_BAD_REQUEST
    default_detail = "Requested moderation status is not valid"


def from_deny(reason: DenyReason | None) -> GatewayError:
    if reason is DenyReason.unauthenticated:
        return Unauthenticated()
    return Forbidden()


# --- Module Notes -----------------------------------------------------------
# Rendered by the handler registered in `api.app.create_app`.
