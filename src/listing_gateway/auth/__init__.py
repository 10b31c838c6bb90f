"""
listing_gateway.auth

Authentication/authorization package.

Responsibilities:
- JWT verification (Credential Verifier).
- Per-request identity construction and the identity middleware.
- The authorization policy engine.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# This package never mints production credentials; login/signup live elsewhere.
