from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from tutorial_portal.api.deps import get_current_user, get_db_session, require_roles
from tutorial_portal.api.schemas.catalog import TutorialCreate, TutorialResponse
from tutorial_portal.domain.models import User
from tutorial_portal.domain.services.catalog import CatalogService

router = APIRouter(prefix="/tutorials", tags=["Tutorials"])


@router.get("", response_model=list[TutorialResponse])
async def list_tutorials(
    session: AsyncSession = Depends(get_db_session),
    user: User = Depends(get_current_user),
) -> list[TutorialResponse]:
    """Tutorials an employee can grant, grouped by tag."""
    tutorials = await CatalogService(session).list_tutorials()
    return [TutorialResponse.model_validate(tutorial) for tutorial in tutorials]


@router.post("", response_model=TutorialResponse, status_code=status.HTTP_201_CREATED)
async def create_tutorial(
    payload: TutorialCreate,
    session: AsyncSession = Depends(get_db_session),
    user: User = Depends(require_roles(["admin"])),
) -> TutorialResponse:
    tutorial = await CatalogService(session).create_tutorial(
        name=payload.name,
        description=payload.description,
        tag=payload.tag,
        id_cademi=payload.id_cademi,
    )
    return TutorialResponse.model_validate(tutorial)
