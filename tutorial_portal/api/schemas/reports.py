from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from tutorial_portal.api.schemas.releases import ReleaseWithCreatorResponse


class ReportExport(BaseModel):
    """Rows for spreadsheet formats; the client renders the file."""

    data: list[ReleaseWithCreatorResponse]
    format: str


class OverviewResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    total_users: int
    total_admins: int
    total_releases: int
    releases_this_month: int
