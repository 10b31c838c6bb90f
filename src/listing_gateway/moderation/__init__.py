"""
listing_gateway.moderation

Content approval package.

Responsibilities:
- Moderation/publication status enums shared by all layers.
- The approval state machine and the public visibility predicate.
"""

# Package marker; import from submodules directly.


# --- Module Notes -----------------------------------------------------------
# `status` is a leaf module so the auth policy engine can depend on it without cycles.
