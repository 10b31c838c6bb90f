"""
listing_gateway.api.schemas

Request models shared by more than one router.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class ModerationRequest(BaseModel):
    # Free-form string: unknown values are rejected by the state machine (400).
    moderation_status: str = Field(min_length=1, max_length=32)
    expected_status: str | None = Field(default=None, max_length=32)
