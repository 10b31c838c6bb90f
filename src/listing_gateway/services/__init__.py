"""
listing_gateway.services

Service-layer package.

Responsibilities:
- Own transaction boundaries, compare-and-swap writes and audit events.
"""
