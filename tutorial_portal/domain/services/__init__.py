"""Domain services."""

from tutorial_portal.domain.services.bulk import BulkIngestionResult, BulkIngestionService
from tutorial_portal.domain.services.catalog import CatalogService, JobRoleNotFoundError
from tutorial_portal.domain.services.releases import (
    PersistenceError,
    ReleaseNotFoundError,
    ReleaseRecord,
    ReleaseService,
    ReleaseStats,
)
from tutorial_portal.domain.services.reports import PortalOverview, ReportService
from tutorial_portal.domain.services.webhooks import ReleaseWebhookDispatcher

__all__ = [
    "BulkIngestionResult",
    "BulkIngestionService",
    "CatalogService",
    "JobRoleNotFoundError",
    "PersistenceError",
    "PortalOverview",
    "ReleaseNotFoundError",
    "ReleaseRecord",
    "ReleaseService",
    "ReleaseStats",
    "ReleaseWebhookDispatcher",
    "ReportService",
]
