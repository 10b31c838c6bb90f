"""
listing_gateway.moderation.status

Status enums for moderated content.

Responsibilities:
- Define the moderation axis (admin-controlled) and the publication axes
  (owner-controlled, one per content kind) as separate enums.
"""

from __future__ import annotations

import enum


class ResourceKind(enum.StrEnum):
    property = "property"
    blog_post = "blog_post"

    # `property` is shadowed by the member above.
    @enum.property
    def label(self) -> str:
        return "Property" if self is ResourceKind.property else "Blog post"


class ModerationStatus(enum.StrEnum):
    # Enum values are stored in DB; treat as stable API contract.
    pending = "Pending"
    approved = "Approved"
    rejected = "Rejected"


class PropertyStatus(enum.StrEnum):
    for_sale = "For Sale"
    for_rent = "For Rent"
    sold = "Sold"
    pending_approval = "Pending Approval"
    draft = "Draft"


class PostStatus(enum.StrEnum):
    draft = "draft"
    published = "published"


class PropertyType(enum.StrEnum):
    house = "House"
    apartment = "Apartment"
    condo = "Condo"
    townhouse = "Townhouse"
    land = "Land"
    plot = "Plot"
    flat = "Flat"
    penthouse = "Penthouse"
    residential_plot = "Residential Plot"
    commercial_plot = "Commercial Plot"
    office = "Office"
    shop = "Shop"
    warehouse = "Warehouse"
    building = "Building"
    other = "Other"


# --- Module Notes -----------------------------------------------------------
# "Pending Approval" is a publication status chosen by the owner; "Pending" is the
# moderation status. They are never derived from one another except at approval time
# (see `moderation.state_machine.promote_on_approval`).
