"""
listing_gateway.db

Persistence package (SQLAlchemy async).

Responsibilities:
- Provide ORM models, engine/session setup, and repositories.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# The rest of the service treats storage as find/update/delete on content documents;
# swapping backends should not touch the policy or moderation modules.
