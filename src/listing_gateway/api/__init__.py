"""
listing_gateway.api

API package for the listing gateway.

Responsibilities:
- FastAPI app factory and router modules.
- API-layer dependency wiring and the per-request authorization gateway.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# The API layer stays thin: request validation + gateway check + delegation to services.
