from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from tutorial_portal.domain.validation import ReleaseSubmission


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ReleaseCreate(ReleaseSubmission):
    """Request body for POST /tutorial-releases."""


class ReleaseResponse(CamelModel):
    id: str
    user_id: str
    client_name: str
    client_cpf: str
    client_email: str
    client_phone: str | None = None
    company_name: str
    company_document: str
    company_role: str
    tutorial_ids: list[str]
    status: str = Field(..., description="Effective status: pending, success, failed or expired")
    expiration_date: datetime | None = Field(
        None, description="Set only while the release is effectively successful"
    )
    created_at: datetime


class CreatorResponse(BaseModel):
    id: str
    name: str
    email: str
    department: str


class ReleaseWithCreatorResponse(ReleaseResponse):
    user: CreatorResponse | None = Field(None, description="Creator, included on admin listings")


class BulkReleaseRequest(CamelModel):
    releases: list[Any] = Field(..., description="Raw client/company rows, validated one by one")
    tutorial_ids: list[str] | None = Field(
        None,
        min_length=1,
        description="Tutorials applied to every row; rows carry their own when omitted",
    )


class BulkSuccessItem(CamelModel):
    index: int
    id: str
    client_name: str
    status: str


class BulkFailureItem(BaseModel):
    index: int
    error: str
    data: Any = None


class BulkReleaseResponse(BaseModel):
    successful: list[BulkSuccessItem]
    failed: list[BulkFailureItem]
    total: int
    message: str


class StatusUpdateRequest(BaseModel):
    status: str = Field(..., description="pending, success or failed")
    message: str | None = Field(None, description="Free-form note from the orchestrator")


class StatusUpdateResponse(CamelModel):
    message: str
    release_id: str
    status: str


class ReleasesByStatusResponse(BaseModel):
    status: str
    count: int
    releases: list[ReleaseResponse]


class PendingReleaseItem(BaseModel):
    id: str
    client_name: str
    client_email: str
    client_company: str
    created_at: datetime
    status: str


class PendingReleasesResponse(BaseModel):
    count: int
    pending_releases: list[PendingReleaseItem]


class ReleaseStatsResponse(BaseModel):
    total: int
    pending: int
    success: int
    failed: int
    expired: int
    success_rate: int
