"""
Release webhook dispatch.

Best effort and at most once: a release is already committed when this runs,
and nothing here can undo it. The polling API is the source of truth for the
fulfillment system; the webhook only saves it a polling round.
"""

from __future__ import annotations

from typing import Any

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from tutorial_portal.domain.services.catalog import CatalogService
from tutorial_portal.domain.services.releases import ReleaseRecord
from tutorial_portal.infrastructure.db.models import ReleaseStatus, TutorialModel
from tutorial_portal.libs.webhook_client import (
    DispatchError,
    FulfillmentWebhookClient,
    WebhookClientProtocol,
)

logger = structlog.get_logger()


def build_release_payload(release: ReleaseRecord, tutorials: list[TutorialModel]) -> dict[str, Any]:
    """Shape expected by the fulfillment automation."""
    return {
        "id": release.id,
        "client": {
            "name": release.client_name,
            "cpf": release.client_cpf,
            "email": release.client_email,
            "phone": release.client_phone or None,
            "company": {
                "name": release.company_name,
                "document": release.company_document,
                "role": release.company_role,
            },
        },
        "tutorials": [
            {
                "id": tutorial.id,
                "name": tutorial.name,
                "description": tutorial.description,
                "tag": tutorial.tag,
                "idCademi": tutorial.id_cademi,
            }
            for tutorial in tutorials
        ],
        "createdAt": release.created_at.isoformat(),
        "status": ReleaseStatus.PENDING.value,
    }


class ReleaseWebhookDispatcher:
    """Notifies the fulfillment system about newly created releases."""

    def __init__(
        self,
        session: AsyncSession,
        client: WebhookClientProtocol | None = None,
    ) -> None:
        self.catalog = CatalogService(session)
        self.client = client or FulfillmentWebhookClient()

    async def dispatch(self, release: ReleaseRecord) -> bool:
        """Send the notification. Returns False on failure; never raises ``DispatchError``."""
        try:
            tutorials = await self.catalog.get_tutorials_by_ids(release.tutorial_ids)
        except SQLAlchemyError as exc:
            await logger.awarning(
                "webhook_dispatch_failed",
                release_id=release.id,
                status_code=None,
                error=f"tutorial lookup failed: {exc}",
            )
            return False
        payload = build_release_payload(release, tutorials)

        try:
            body = await self.client.post_json(payload)
        except DispatchError as exc:
            await logger.awarning(
                "webhook_dispatch_failed",
                release_id=release.id,
                status_code=exc.status_code,
                error=str(exc),
            )
            return False

        await logger.ainfo(
            "webhook_dispatched",
            release_id=release.id,
            tutorial_count=len(tutorials),
            response=body[:200],
        )
        return True
