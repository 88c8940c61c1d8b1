"""Reference clock for release lifecycle arithmetic.

Every "now" the lifecycle engine sees comes from here, so the reference zone
is configured in exactly one place (``RELEASE_REFERENCE_TIMEZONE``).
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol
from zoneinfo import ZoneInfo

from tutorial_portal.core.config import get_settings


class Clock(Protocol):
    """Anything that can tell the current time as an aware datetime."""

    def now(self) -> datetime: ...


class ReferenceClock:
    """Wall clock pinned to a fixed IANA time zone."""

    def __init__(self, zone: str | None = None) -> None:
        self.zone = ZoneInfo(zone or get_settings().reference_timezone)

    def now(self) -> datetime:
        return datetime.now(self.zone)


def current_time_in_reference_zone() -> datetime:
    """Return the current instant expressed in the configured reference zone."""
    return ReferenceClock().now()
