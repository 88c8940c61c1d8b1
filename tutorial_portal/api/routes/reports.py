from __future__ import annotations

from dataclasses import asdict

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from tutorial_portal.api.deps import get_clock, get_current_user, get_db_session, require_roles
from tutorial_portal.api.routes.releases import to_response_with_creator
from tutorial_portal.api.schemas.releases import ReleaseWithCreatorResponse
from tutorial_portal.api.schemas.reports import OverviewResponse, ReportExport
from tutorial_portal.core.clock import Clock
from tutorial_portal.domain.models import User
from tutorial_portal.domain.services.releases import ReleaseService
from tutorial_portal.domain.services.reports import ReportService
from tutorial_portal.infrastructure.db.models import ReleaseStatus

router = APIRouter(prefix="/reports", tags=["Reports"])
logger = structlog.get_logger()


@router.get("/tutorial-releases", response_model=None)
async def tutorial_releases_report(
    release_status: str | None = Query(None, alias="status"),
    export_format: str = Query("json", alias="format"),
    user_id: str | None = Query(None),
    session: AsyncSession = Depends(get_db_session),
    user: User = Depends(get_current_user),
    clock: Clock = Depends(get_clock),
) -> list[ReleaseWithCreatorResponse] | ReportExport:
    """Report source for the dashboard export.

    ``json`` returns the rows directly; any other format wraps them as
    ``{data, format}`` for the client to render. Employees only ever see
    their own releases.
    """
    status_filter: ReleaseStatus | None = None
    if release_status and release_status != "all":
        try:
            status_filter = ReleaseStatus(release_status)
        except ValueError as exc:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Status inválido. Use: all, pending, success, failed, expired",
            ) from exc

    owner = user_id if user.is_admin else user.user_id
    rows = await ReleaseService(session, clock=clock).get_for_report(
        user_id=owner, status=status_filter
    )
    items = [to_response_with_creator(row) for row in rows]

    logger.info(
        "release_report_generated",
        user_id=user.user_id,
        owner=owner,
        status=release_status or "all",
        format=export_format,
        count=len(items),
    )
    if export_format == "json":
        return items
    return ReportExport(data=items, format=export_format)


@router.get("/overview", response_model=OverviewResponse)
async def overview(
    session: AsyncSession = Depends(get_db_session),
    user: User = Depends(require_roles(["admin"])),
    clock: Clock = Depends(get_clock),
) -> OverviewResponse:
    result = await ReportService(session, clock=clock).get_overview()
    return OverviewResponse(**asdict(result))
