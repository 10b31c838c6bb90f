"""
listing_gateway.db.repositories

Repository package.

Responsibilities:
- Group data-access repositories for the persistence layer.
"""

# Package marker; repositories are imported directly from submodules.


# --- Module Notes -----------------------------------------------------------
# Repositories hold no authorization logic; authorization and moderation decisions belong in
# `auth.policy`, `moderation.*` and `services`.
