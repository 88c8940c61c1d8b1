"""Tutorial catalog and job-role lookups consumed by forms and the webhook."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tutorial_portal.infrastructure.db.models import JobRoleModel, JobRoleType, TutorialModel

logger = structlog.get_logger()


class JobRoleNotFoundError(Exception):
    """Raised when a job role id does not exist."""


class CatalogService:
    """Read-mostly access to tutorials and job roles."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def list_tutorials(self) -> list[TutorialModel]:
        stmt = select(TutorialModel).order_by(TutorialModel.tag, TutorialModel.name)
        return list((await self.session.execute(stmt)).scalars().all())

    async def get_tutorials_by_ids(self, ids: Sequence[str]) -> list[TutorialModel]:
        """Resolve tutorials in the order of ``ids``; unknown ids are skipped."""
        if not ids:
            return []
        stmt = select(TutorialModel).where(TutorialModel.id.in_(list(ids)))
        found = {tutorial.id: tutorial for tutorial in (await self.session.execute(stmt)).scalars()}
        missing = [tutorial_id for tutorial_id in ids if tutorial_id not in found]
        if missing:
            await logger.awarning("tutorials_not_found", tutorial_ids=missing)
        return [found[tutorial_id] for tutorial_id in ids if tutorial_id in found]

    async def create_tutorial(
        self, *, name: str, description: str, tag: str, id_cademi: int
    ) -> TutorialModel:
        tutorial = TutorialModel(name=name, description=description, tag=tag, id_cademi=id_cademi)
        self.session.add(tutorial)
        await self.session.commit()
        await self.session.refresh(tutorial)
        await logger.ainfo("tutorial_created", tutorial_id=tutorial.id, id_cademi=id_cademi)
        return tutorial

    async def list_job_roles(self, role_type: JobRoleType | None = None) -> list[JobRoleModel]:
        """Active roles ordered by sort order then name."""
        stmt = select(JobRoleModel).where(JobRoleModel.active.is_(True))
        if role_type is not None:
            stmt = stmt.where(JobRoleModel.type == role_type)
        stmt = stmt.order_by(JobRoleModel.sort_order, JobRoleModel.name)
        return list((await self.session.execute(stmt)).scalars().all())

    async def create_job_role(
        self, *, name: str, role_type: JobRoleType, sort_order: int = 0
    ) -> JobRoleModel:
        role = JobRoleModel(name=name, type=role_type, sort_order=sort_order, active=True)
        self.session.add(role)
        await self.session.commit()
        await self.session.refresh(role)
        return role

    async def update_job_role(self, role_id: str, changes: dict[str, Any]) -> JobRoleModel:
        role = await self.session.get(JobRoleModel, role_id)
        if role is None:
            raise JobRoleNotFoundError(f"Cargo {role_id} não encontrado")
        for field_name, value in changes.items():
            setattr(role, field_name, value)
        await self.session.commit()
        await self.session.refresh(role)
        return role

    async def deactivate_job_role(self, role_id: str) -> None:
        """Soft delete: the role disappears from listings but stays referenced."""
        role = await self.session.get(JobRoleModel, role_id)
        if role is None:
            raise JobRoleNotFoundError(f"Cargo {role_id} não encontrado")
        role.active = False
        await self.session.commit()
        await logger.ainfo("job_role_deactivated", job_role_id=role_id)
