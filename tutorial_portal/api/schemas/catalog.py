from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from tutorial_portal.infrastructure.db.models import JobRoleType


class CatalogModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True
    )


class TutorialResponse(CatalogModel):
    id: str
    name: str
    description: str
    tag: str
    id_cademi: int


class TutorialCreate(CatalogModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    tag: str = Field(..., min_length=1, max_length=64)
    id_cademi: int = Field(..., gt=0, description="Course id in the fulfillment system")


class JobRoleResponse(CatalogModel):
    id: str
    name: str
    type: JobRoleType
    sort_order: int
    active: bool
    created_at: datetime | None = None


class JobRoleCreate(CatalogModel):
    name: str = Field(..., min_length=1, max_length=128)
    type: JobRoleType
    sort_order: int = Field(default=0, ge=0)


class JobRoleUpdate(CatalogModel):
    """Partial update; omitted fields are left untouched."""

    name: str | None = Field(None, min_length=1, max_length=128)
    type: JobRoleType | None = None
    sort_order: int | None = Field(None, ge=0)
    active: bool | None = None
