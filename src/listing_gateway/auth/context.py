"""
listing_gateway.auth.context

Request Context Builder.

Responsibilities:
- Turn a raw `Authorization` header value into an immutable `Identity`.
- Never surface verification failures as errors: a rejected credential resolves to an
  anonymous identity (flagged `credential_rejected`) and policy decides from there.
"""

from __future__ import annotations

from listing_gateway.auth.jwt import CredentialVerifier, VerificationError
from listing_gateway.auth.models import Identity
from listing_gateway.observability.logging import get_logger

log = get_logger(__name__)

_SCHEME = "bearer"


def extract_bearer(header_value: str | None) -> str | None:
    if not header_value:
        return None
    scheme, _, token = header_value.strip().partition(" ")
    if scheme.lower() != _SCHEME:
        return None
    token = token.strip()
    return token or None


class IdentityBuilder:
    def __init__(self, verifier: CredentialVerifier) -> None:
        self._verifier = verifier

    def build_identity(self, header_value: str | None) -> Identity:
        token = extract_bearer(header_value)
        if token is None:
            return Identity.anonymous()

        try:
            claims = self._verifier.verify(token)
        except VerificationError as e:
            # Distinct kinds are for operators only; the caller just becomes anonymous.
            log.info("credential_rejected", kind=e.kind.value)
            return Identity.anonymous(credential_rejected=True)

        return Identity.from_claims(claims)


# --- Module Notes -----------------------------------------------------------
# The builder is created once in the app factory and shared by `auth.middleware`.
