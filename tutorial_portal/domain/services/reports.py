from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from tutorial_portal.core.clock import Clock, ReferenceClock
from tutorial_portal.infrastructure.db.models import TutorialReleaseModel, UserModel, UserRole


@dataclass(slots=True)
class PortalOverview:
    """Headline numbers for the admin dashboard."""

    total_users: int
    total_admins: int
    total_releases: int
    releases_this_month: int


class ReportService:
    def __init__(self, session: AsyncSession, *, clock: Clock | None = None) -> None:
        self.session = session
        self.clock = clock or ReferenceClock()

    async def get_overview(self) -> PortalOverview:
        """Active users/admins, all releases, and releases since the 1st of the
        current month in the reference zone."""
        now = self.clock.now()
        month_start = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)

        total_users = await self.session.scalar(
            select(func.count()).select_from(UserModel).where(UserModel.is_active.is_(True))
        )
        total_admins = await self.session.scalar(
            select(func.count())
            .select_from(UserModel)
            .where(UserModel.is_active.is_(True), UserModel.role == UserRole.ADMIN)
        )
        total_releases = await self.session.scalar(
            select(func.count()).select_from(TutorialReleaseModel)
        )
        this_month = await self.session.scalar(
            select(func.count())
            .select_from(TutorialReleaseModel)
            .where(TutorialReleaseModel.created_at >= month_start)
        )

        return PortalOverview(
            total_users=total_users or 0,
            total_admins=total_admins or 0,
            total_releases=total_releases or 0,
            releases_this_month=this_month or 0,
        )
