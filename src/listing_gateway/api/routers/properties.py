"""
listing_gateway.api.routers.properties

Property listing endpoints.

Responsibilities:
- Public listing and detail reads filtered by the visibility predicate.
- Agent/admin submission, owner/admin edit and delete.
- Admin moderation transitions.
"""

from __future__ import annotations

import re
import uuid
from datetime import UTC, datetime
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Query
from pydantic import AfterValidator, BaseModel, ConfigDict, Field, field_validator
from starlette.status import HTTP_201_CREATED

from listing_gateway.api.deps import content_service_dep, gateway_dep
from listing_gateway.api.gateway import Gateway
from listing_gateway.api.schemas import ModerationRequest
from listing_gateway.auth.policy import Action
from listing_gateway.moderation.status import (
    ModerationStatus,
    PropertyStatus,
    PropertyType,
    ResourceKind,
)
from listing_gateway.services.content_service import ContentService

router = APIRouter(prefix="/v1/properties", tags=["properties"])

KIND = ResourceKind.property
_URL = re.compile(r"^https?://\S+$")


def _clean_urls(values: list[str]) -> list[str]:
    cleaned = [v.strip() for v in values if v and v.strip()]
    for v in cleaned:
        if not _URL.match(v):
            raise ValueError(f"invalid image URL: {v}")
    if not cleaned:
        raise ValueError("at least one image URL is required")
    return cleaned


def _check_year(value: int) -> int:
    if not 1800 <= value <= datetime.now(UTC).year + 5:
        raise ValueError("year built is out of range")
    return value


ImageList = Annotated[list[str], AfterValidator(_clean_urls)]
YearBuilt = Annotated[int, AfterValidator(_check_year)]


class PropertyCreate(BaseModel):
    address: str = Field(min_length=5, max_length=256)
    city: str = Field(min_length=2, max_length=128)
    state: str = Field(min_length=2, max_length=64)
    zip: str = Field(pattern=r"^\d{5}(-\d{4})?$")
    price: float = Field(gt=0)
    bedrooms: int = Field(ge=0)
    bathrooms: float = Field(ge=0)
    area_sq_ft: float = Field(gt=0)
    description: str = Field(min_length=20)
    property_type: PropertyType
    publication_status: PropertyStatus | None = None
    year_built: YearBuilt | None = None
    images: ImageList
    features: list[str] = Field(default_factory=list)

    @field_validator("features")
    @classmethod
    def strip_features(cls, v: list[str]) -> list[str]:
        return [f.strip() for f in v if f and f.strip()]


class PropertyUpdate(BaseModel):
    # Ownership and moderation are not editable here; unknown keys are ignored.
    address: str | None = Field(default=None, min_length=5, max_length=256)
    city: str | None = Field(default=None, min_length=2, max_length=128)
    state: str | None = Field(default=None, min_length=2, max_length=64)
    zip: str | None = Field(default=None, pattern=r"^\d{5}(-\d{4})?$")
    price: float | None = Field(default=None, gt=0)
    bedrooms: int | None = Field(default=None, ge=0)
    bathrooms: float | None = Field(default=None, ge=0)
    area_sq_ft: float | None = Field(default=None, gt=0)
    description: str | None = Field(default=None, min_length=20)
    property_type: PropertyType | None = None
    publication_status: PropertyStatus | None = None
    year_built: YearBuilt | None = None
    images: ImageList | None = None
    features: list[str] | None = None


class PropertyResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    owner_id: str
    moderation_status: ModerationStatus
    publication_status: str
    version: int
    address: str
    city: str
    state: str
    zip: str
    price: float
    bedrooms: int
    bathrooms: float
    area_sq_ft: float
    description: str
    property_type: str
    year_built: int | None
    images: list[str]
    features: list[str]
    views: int
    created_at: datetime
    updated_at: datetime


def _updates(body: BaseModel) -> dict[str, Any]:
    changes = body.model_dump(exclude_unset=True, mode="json")
    # Nullable only where the column is nullable.
    return {k: v for k, v in changes.items() if v is not None or k == "year_built"}


@router.get("", response_model=list[PropertyResponse])
async def list_properties(
    status: str | None = Query(default=None),
    owner_id: str | None = Query(default=None),
    moderation_status: str | None = Query(default=None),
    gateway: Gateway = Depends(gateway_dep),
    content: ContentService = Depends(content_service_dep),
) -> list[Any]:
    # Admins see every listing; `owner_id` and `moderation_status` only apply to them.
    if gateway.is_admin:
        return await content.all_items(
            KIND,
            owner_id=owner_id,
            publication_status=status,
            moderation_status=moderation_status,
        )
    return await content.public_properties(status=status)


@router.post("", response_model=PropertyResponse, status_code=HTTP_201_CREATED)
async def create_property(
    body: PropertyCreate,
    gateway: Gateway = Depends(gateway_dep),
    content: ContentService = Depends(content_service_dep),
) -> Any:
    gateway.require_create(KIND)
    return await content.create_property(
        actor=gateway.identity, fields=body.model_dump(mode="json")
    )


@router.get("/{property_id}", response_model=PropertyResponse)
async def get_property(
    property_id: uuid.UUID,
    gateway: Gateway = Depends(gateway_dep),
) -> Any:
    return await gateway.load(KIND, property_id, Action.read)


@router.put("/{property_id}", response_model=PropertyResponse)
async def update_property(
    property_id: uuid.UUID,
    body: PropertyUpdate,
    gateway: Gateway = Depends(gateway_dep),
    content: ContentService = Depends(content_service_dep),
) -> Any:
    item = await gateway.load(KIND, property_id, Action.update)
    return await content.update(item, actor=gateway.identity, changes=_updates(body))


@router.delete("/{property_id}")
async def delete_property(
    property_id: uuid.UUID,
    gateway: Gateway = Depends(gateway_dep),
    content: ContentService = Depends(content_service_dep),
) -> dict[str, str]:
    item = await gateway.load(KIND, property_id, Action.delete)
    await content.delete(item, actor=gateway.identity)
    return {"status": "deleted"}


@router.patch("/{property_id}/moderation", response_model=PropertyResponse)
async def moderate_property(
    property_id: uuid.UUID,
    body: ModerationRequest,
    gateway: Gateway = Depends(gateway_dep),
    content: ContentService = Depends(content_service_dep),
) -> Any:
    item = await gateway.load(KIND, property_id, Action.moderation_transition)
    return await content.transition(
        item,
        actor=gateway.identity,
        requested=body.moderation_status,
        expected_status=body.expected_status,
    )


@router.post("/{property_id}/views")
async def record_view(
    property_id: uuid.UUID,
    content: ContentService = Depends(content_service_dep),
) -> dict[str, int]:
    # Counting a view is anonymous and only possible on publicly visible listings.
    return {"views": await content.increment_views(property_id)}


# --- Module Notes -----------------------------------------------------------
# No handler here compares owner ids or roles itself; the gateway does.
