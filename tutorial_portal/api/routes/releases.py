from __future__ import annotations

from dataclasses import asdict

import structlog
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from tutorial_portal.api.deps import (
    get_clock,
    get_current_user,
    get_db_session,
    get_webhook_client,
    require_api_key,
)
from tutorial_portal.api.schemas.releases import (
    BulkFailureItem,
    BulkReleaseRequest,
    BulkReleaseResponse,
    BulkSuccessItem,
    CreatorResponse,
    PendingReleaseItem,
    PendingReleasesResponse,
    ReleaseCreate,
    ReleaseResponse,
    ReleasesByStatusResponse,
    ReleaseStatsResponse,
    ReleaseWithCreatorResponse,
    StatusUpdateRequest,
    StatusUpdateResponse,
)
from tutorial_portal.core.clock import Clock
from tutorial_portal.domain.models import User
from tutorial_portal.domain.services.bulk import BulkIngestionService
from tutorial_portal.domain.services.lifecycle import InvalidStatusError, parse_confirmation_status
from tutorial_portal.domain.services.releases import (
    PersistenceError,
    ReleaseNotFoundError,
    ReleaseRecord,
    ReleaseService,
    ReleaseWithCreator,
)
from tutorial_portal.domain.services.webhooks import ReleaseWebhookDispatcher
from tutorial_portal.libs.webhook_client import WebhookClientProtocol

router = APIRouter(prefix="/tutorial-releases", tags=["Tutorial Releases"])
logger = structlog.get_logger()

INVALID_STATUS_DETAIL = "Status inválido. Use: pending, success, failed"


def to_response(record: ReleaseRecord) -> ReleaseResponse:
    return ReleaseResponse(**asdict(record))


def to_response_with_creator(item: ReleaseWithCreator) -> ReleaseWithCreatorResponse:
    return ReleaseWithCreatorResponse(
        **asdict(item.release),
        user=CreatorResponse(**asdict(item.user)),
    )


# Employee-facing (bearer token)


@router.post("", response_model=ReleaseResponse)
async def create_release(
    payload: ReleaseCreate,
    session: AsyncSession = Depends(get_db_session),
    user: User = Depends(get_current_user),
    clock: Clock = Depends(get_clock),
    webhook_client: WebhookClientProtocol = Depends(get_webhook_client),
) -> ReleaseResponse:
    """Register a release as pending and notify the fulfillment system.

    The webhook is best effort: a failed notification still returns the
    created release.
    """
    service = ReleaseService(session, clock=clock)
    try:
        release = await service.create(payload, user_id=user.user_id)
    except PersistenceError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc)
        ) from exc

    await ReleaseWebhookDispatcher(session, client=webhook_client).dispatch(release)
    return to_response(release)


@router.get("", response_model=list[ReleaseWithCreatorResponse])
async def list_releases(
    session: AsyncSession = Depends(get_db_session),
    user: User = Depends(get_current_user),
    clock: Clock = Depends(get_clock),
) -> list[ReleaseWithCreatorResponse]:
    """Admins see every release with its creator; employees see their own."""
    service = ReleaseService(session, clock=clock)
    if user.is_admin:
        return [to_response_with_creator(item) for item in await service.get_all()]
    return [
        ReleaseWithCreatorResponse(**asdict(record))
        for record in await service.get_by_user(user.user_id)
    ]


@router.post("/bulk", response_model=BulkReleaseResponse)
async def bulk_create_releases(
    payload: BulkReleaseRequest,
    session: AsyncSession = Depends(get_db_session),
    user: User = Depends(get_current_user),
    clock: Clock = Depends(get_clock),
    webhook_client: WebhookClientProtocol = Depends(get_webhook_client),
) -> BulkReleaseResponse:
    """Create one release per row; invalid rows are reported, never fatal."""
    service = BulkIngestionService(
        session,
        clock=clock,
        dispatcher=ReleaseWebhookDispatcher(session, client=webhook_client),
    )
    result = await service.ingest(
        payload.releases,
        user_id=user.user_id,
        tutorial_ids=payload.tutorial_ids,
    )
    return BulkReleaseResponse(
        successful=[BulkSuccessItem(**asdict(item)) for item in result.successful],
        failed=[BulkFailureItem(**asdict(item)) for item in result.failed],
        total=result.total,
        message=result.message,
    )


# Automation-facing (shared API key)


@router.post(
    "/{release_id}/status",
    response_model=StatusUpdateResponse,
    dependencies=[Depends(require_api_key)],
)
async def update_release_status(
    release_id: str,
    payload: StatusUpdateRequest,
    session: AsyncSession = Depends(get_db_session),
    clock: Clock = Depends(get_clock),
) -> StatusUpdateResponse:
    """External confirmation from the fulfillment orchestrator."""
    try:
        requested = parse_confirmation_status(payload.status)
    except InvalidStatusError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=INVALID_STATUS_DETAIL
        ) from exc

    service = ReleaseService(session, clock=clock)
    try:
        await service.update_status(release_id, requested)
    except ReleaseNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except PersistenceError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc)
        ) from exc

    await logger.ainfo(
        "release_confirmation_received",
        release_id=release_id,
        status=requested.value,
        note=payload.message,
    )
    return StatusUpdateResponse(
        message="Status atualizado com sucesso",
        release_id=release_id,
        status=requested.value,
    )


@router.get(
    "/status/{release_status}",
    response_model=ReleasesByStatusResponse,
    dependencies=[Depends(require_api_key)],
)
async def list_releases_by_status(
    release_status: str,
    session: AsyncSession = Depends(get_db_session),
    clock: Clock = Depends(get_clock),
) -> ReleasesByStatusResponse:
    """Releases whose effective status matches; ``expired`` is derived, not queried."""
    try:
        requested = parse_confirmation_status(release_status)
    except InvalidStatusError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=INVALID_STATUS_DETAIL
        ) from exc

    releases = await ReleaseService(session, clock=clock).get_by_effective_status(requested)
    await logger.ainfo("releases_by_status_queried", status=requested.value, count=len(releases))
    return ReleasesByStatusResponse(
        status=requested.value,
        count=len(releases),
        releases=[to_response(record) for record in releases],
    )


@router.get(
    "/pending",
    response_model=PendingReleasesResponse,
    dependencies=[Depends(require_api_key)],
)
async def list_pending_releases(
    session: AsyncSession = Depends(get_db_session),
    clock: Clock = Depends(get_clock),
) -> PendingReleasesResponse:
    """Condensed pending list for polling integrations."""
    releases = await ReleaseService(session, clock=clock).get_pending()
    return PendingReleasesResponse(
        count=len(releases),
        pending_releases=[
            PendingReleaseItem(
                id=record.id,
                client_name=record.client_name,
                client_email=record.client_email,
                client_company=record.company_name,
                created_at=record.created_at,
                status=record.status,
            )
            for record in releases
        ],
    )


@router.get(
    "/stats",
    response_model=ReleaseStatsResponse,
    dependencies=[Depends(require_api_key)],
)
async def release_stats(
    session: AsyncSession = Depends(get_db_session),
    clock: Clock = Depends(get_clock),
) -> ReleaseStatsResponse:
    stats = await ReleaseService(session, clock=clock).get_stats()
    return ReleaseStatsResponse(**stats.as_dict())


@router.get("/{release_id}", response_model=ReleaseResponse)
async def get_release(
    release_id: str,
    session: AsyncSession = Depends(get_db_session),
    user: User = Depends(get_current_user),
    clock: Clock = Depends(get_clock),
) -> ReleaseResponse:
    """Single release; employees may only read their own."""
    try:
        record = await ReleaseService(session, clock=clock).get_by_id(release_id)
    except ReleaseNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc

    if record.user_id != user.user_id and not user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="Liberação pertence a outro usuário"
        )
    return to_response(record)
