from __future__ import annotations

from datetime import UTC, datetime

import structlog
from fastapi import APIRouter
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from tutorial_portal.core.config import get_settings
from tutorial_portal.infrastructure.db.session import get_session_factory

router = APIRouter(tags=["Observability"])
logger = structlog.get_logger()


async def check_database() -> dict:
    """Run a trivial query against the release store."""
    try:
        session_factory = get_session_factory()
        async with session_factory() as session:
            await session.execute(text("SELECT 1"))
            return {"status": "ok"}
    except (SQLAlchemyError, OSError) as e:
        return {"status": "error", "message": str(e)[:100]}


@router.get("/health", summary="Service health probe")
async def health_check() -> dict:
    """Return basic service and datastore status information."""
    settings = get_settings()
    database_status = await check_database()

    payload = {
        "service": settings.app_name,
        "version": settings.version,
        "status": "ok" if database_status.get("status") == "ok" else "degraded",
        "timestamp": datetime.now(UTC).isoformat(),
        "datastores": {"database": database_status},
    }
    logger.info("health_probe", **payload)
    return payload
