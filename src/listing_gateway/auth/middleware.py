"""
listing_gateway.auth.middleware

Identity middleware (first step of the route dispatch adapter).

Responsibilities:
- Build the request `Identity` for every inbound request, before any handler runs.
- Expose it on `request.state.identity` and bind it into structlog contextvars.
"""

from __future__ import annotations

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from listing_gateway.auth.context import IdentityBuilder


class IdentityMiddleware(BaseHTTPMiddleware):
    def __init__(self, app: ASGIApp, *, builder: IdentityBuilder) -> None:
        super().__init__(app)
        self._builder = builder

    async def dispatch(self, request: Request, call_next) -> Response:
        identity = self._builder.build_identity(request.headers.get("authorization"))
        request.state.identity = identity
        structlog.contextvars.bind_contextvars(
            subject_id=identity.subject_id,
            role=identity.role.value,
        )
        return await call_next(request)


# --- Module Notes -----------------------------------------------------------
# Handlers must not parse the Authorization header themselves; they read the identity
# through `api.deps.identity_dep`.
