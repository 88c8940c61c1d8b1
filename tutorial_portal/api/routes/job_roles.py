from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from tutorial_portal.api.deps import get_db_session, require_roles
from tutorial_portal.api.schemas.catalog import JobRoleCreate, JobRoleResponse, JobRoleUpdate
from tutorial_portal.domain.models import User
from tutorial_portal.domain.services.catalog import CatalogService, JobRoleNotFoundError
from tutorial_portal.infrastructure.db.models import JobRoleType

router = APIRouter(prefix="/job-roles", tags=["Job Roles"])
logger = structlog.get_logger()


@router.get("", response_model=list[JobRoleResponse])
async def list_job_roles(
    role_type: JobRoleType | None = Query(None, alias="type"),
    session: AsyncSession = Depends(get_db_session),
) -> list[JobRoleResponse]:
    """Active departments and client roles feeding the release form selects."""
    roles = await CatalogService(session).list_job_roles(role_type)
    return [JobRoleResponse.model_validate(role) for role in roles]


@router.post("", response_model=JobRoleResponse, status_code=status.HTTP_201_CREATED)
async def create_job_role(
    payload: JobRoleCreate,
    session: AsyncSession = Depends(get_db_session),
    user: User = Depends(require_roles(["admin"])),
) -> JobRoleResponse:
    role = await CatalogService(session).create_job_role(
        name=payload.name, role_type=payload.type, sort_order=payload.sort_order
    )
    logger.info("job_role_created", job_role_id=role.id, type=role.type.value, user_id=user.user_id)
    return JobRoleResponse.model_validate(role)


@router.put("/{role_id}", response_model=JobRoleResponse)
async def update_job_role(
    role_id: str,
    payload: JobRoleUpdate,
    session: AsyncSession = Depends(get_db_session),
    user: User = Depends(require_roles(["admin"])),
) -> JobRoleResponse:
    try:
        role = await CatalogService(session).update_job_role(
            role_id, payload.model_dump(exclude_none=True)
        )
    except JobRoleNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return JobRoleResponse.model_validate(role)


@router.delete("/{role_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_job_role(
    role_id: str,
    session: AsyncSession = Depends(get_db_session),
    user: User = Depends(require_roles(["admin"])),
) -> None:
    """Deactivate a job role; existing releases keep the name they stored."""
    try:
        await CatalogService(session).deactivate_job_role(role_id)
    except JobRoleNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
