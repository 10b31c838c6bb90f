"""
listing_gateway.api.routers

HTTP routers, one module per resource area.
"""

# Package marker.
