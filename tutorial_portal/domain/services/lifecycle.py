"""
Release lifecycle rules.

Pure functions only: nothing here reads the clock or touches the database.
Callers pass ``now`` from the reference clock so the same inputs always
produce the same answer.

    pending --confirm(success)--> success --(now >= expiration)--> expired
    pending --confirm(failed)---> failed
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta

from tutorial_portal.infrastructure.db.models import ReleaseStatus

DEFAULT_VALIDITY_DAYS = 90


class InvalidStatusError(ValueError):
    """Raised when a confirmation carries a status outside pending/success/failed."""


@dataclass(frozen=True, slots=True)
class Transition:
    """Stored column values a confirmation should write."""

    status: ReleaseStatus
    expiration_date: datetime | None


def parse_confirmation_status(value: str) -> ReleaseStatus:
    """Validate a status sent by the external orchestrator."""
    try:
        status = ReleaseStatus(value)
    except ValueError as exc:
        raise InvalidStatusError(value) from exc
    if status not in ReleaseStatus.confirmable():
        raise InvalidStatusError(value)
    return status


def compute_expiration(
    confirmed_at: datetime, validity_days: int = DEFAULT_VALIDITY_DAYS
) -> datetime:
    """Add ``validity_days`` wall-clock days in the zone ``confirmed_at`` carries."""
    if confirmed_at.tzinfo is None:
        raise ValueError("confirmed_at must be timezone-aware")
    return confirmed_at + timedelta(days=validity_days)


def plan_transition(
    requested: ReleaseStatus,
    now: datetime,
    validity_days: int = DEFAULT_VALIDITY_DAYS,
) -> Transition:
    """Return the stored values for a confirmation of ``requested`` at ``now``.

    Re-sending the same status re-runs the rule; a repeated ``success``
    restarts the validity window.
    """
    if requested not in ReleaseStatus.confirmable():
        raise InvalidStatusError(requested.value)
    if requested is ReleaseStatus.SUCCESS:
        return Transition(requested, compute_expiration(now, validity_days))
    return Transition(requested, None)


def is_lapsed(expiration_date: datetime | None, now: datetime) -> bool:
    return expiration_date is None or expiration_date <= now


def effective_status(
    stored: ReleaseStatus | str,
    expiration_date: datetime | None,
    now: datetime,
) -> ReleaseStatus:
    """Status as a reader should see it, accounting for a lapsed success."""
    stored = ReleaseStatus(stored)
    if stored is ReleaseStatus.SUCCESS and is_lapsed(expiration_date, now):
        return ReleaseStatus.EXPIRED
    return stored


def visible_expiration(
    stored: ReleaseStatus | str,
    expiration_date: datetime | None,
    now: datetime,
) -> datetime | None:
    """Expiration shown to readers: only while the release is effectively successful."""
    if effective_status(stored, expiration_date, now) is ReleaseStatus.SUCCESS:
        return expiration_date
    return None
