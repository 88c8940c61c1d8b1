from __future__ import annotations

from datetime import timedelta

import pytest
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from tutorial_portal.domain.services.releases import (
    PersistenceError,
    ReleaseNotFoundError,
    ReleaseService,
    success_rate,
)
from tutorial_portal.domain.validation import ReleaseSubmission
from tutorial_portal.infrastructure.db.models import ReleaseStatus, TutorialReleaseModel

from tests.utils import EMPLOYEE_ID, OTHER_EMPLOYEE_ID, FrozenClock, release_payload


def submission(**overrides) -> ReleaseSubmission:
    return ReleaseSubmission.model_validate(release_payload(**overrides))


async def stored_row(db: AsyncSession, release_id: str) -> TutorialReleaseModel:
    row = await db.get(TutorialReleaseModel, release_id)
    assert row is not None
    await db.refresh(row)
    return row


async def test_create_starts_pending_without_expiration(
    db: AsyncSession, clock: FrozenClock
) -> None:
    service = ReleaseService(db, clock=clock)

    release = await service.create(submission(), user_id=EMPLOYEE_ID)

    assert release.status == "pending"
    assert release.expiration_date is None
    assert release.tutorial_ids == ["t1", "t2"]
    assert release.created_at == clock.now()
    row = await stored_row(db, release.id)
    assert row.status == ReleaseStatus.PENDING.value
    assert row.expiration_date is None


async def test_create_wraps_store_failures(
    db: AsyncSession, clock: FrozenClock, monkeypatch: pytest.MonkeyPatch
) -> None:
    service = ReleaseService(db, clock=clock)

    async def broken_commit() -> None:
        raise SQLAlchemyError("disk full")

    monkeypatch.setattr(db, "commit", broken_commit)

    with pytest.raises(PersistenceError):
        await service.create(submission(), user_id=EMPLOYEE_ID)


async def test_confirm_success_sets_expiration_from_confirmation_time(
    db: AsyncSession, clock: FrozenClock
) -> None:
    service = ReleaseService(db, clock=clock)
    release = await service.create(submission(), user_id=EMPLOYEE_ID)

    clock.advance(hours=5)
    confirmed_at = clock.now()
    updated = await service.update_status(release.id, ReleaseStatus.SUCCESS)

    assert updated.status == "success"
    assert updated.expiration_date == confirmed_at + timedelta(days=90)
    row = await stored_row(db, release.id)
    assert row.expiration_date == confirmed_at + timedelta(days=90)


async def test_effective_status_flips_when_window_lapses(
    db: AsyncSession, clock: FrozenClock
) -> None:
    service = ReleaseService(db, clock=clock)
    release = await service.create(submission(), user_id=EMPLOYEE_ID)
    await service.update_status(release.id, ReleaseStatus.SUCCESS)

    clock.advance(days=90, seconds=-1)
    before = await service.get_by_id(release.id)
    assert before.status == "success"
    assert before.expiration_date is not None

    clock.advance(seconds=1)
    after = await service.get_by_id(release.id)
    assert after.status == "expired"
    assert after.expiration_date is None


async def test_failed_after_success_clears_expiration(db: AsyncSession, clock: FrozenClock) -> None:
    service = ReleaseService(db, clock=clock)
    release = await service.create(submission(), user_id=EMPLOYEE_ID)

    await service.update_status(release.id, ReleaseStatus.SUCCESS)
    final = await service.update_status(release.id, ReleaseStatus.FAILED)

    assert final.status == "failed"
    assert final.expiration_date is None
    row = await stored_row(db, release.id)
    assert row.status == "failed"
    assert row.expiration_date is None


async def test_update_status_unknown_release(db: AsyncSession, clock: FrozenClock) -> None:
    with pytest.raises(ReleaseNotFoundError):
        await ReleaseService(db, clock=clock).update_status("missing", ReleaseStatus.SUCCESS)


async def test_sweep_rewrites_lapsed_rows_and_is_idempotent(
    db: AsyncSession, clock: FrozenClock
) -> None:
    service = ReleaseService(db, clock=clock)
    lapsing = await service.create(submission(), user_id=EMPLOYEE_ID)
    fresh = await service.create(submission(clientName="Maria"), user_id=EMPLOYEE_ID)
    await service.update_status(lapsing.id, ReleaseStatus.SUCCESS)

    clock.advance(days=60)
    await service.update_status(fresh.id, ReleaseStatus.SUCCESS)
    clock.advance(days=31)

    assert await service.sweep_expired() == 1
    assert await service.sweep_expired() == 0

    lapsed_row = await stored_row(db, lapsing.id)
    assert lapsed_row.status == "expired"
    assert lapsed_row.expiration_date is None
    fresh_row = await stored_row(db, fresh.id)
    assert fresh_row.status == "success"
    assert fresh_row.expiration_date is not None


async def test_sweep_catches_success_rows_missing_expiration(
    db: AsyncSession, clock: FrozenClock
) -> None:
    service = ReleaseService(db, clock=clock)
    release = await service.create(submission(), user_id=EMPLOYEE_ID)
    row = await stored_row(db, release.id)
    row.status = ReleaseStatus.SUCCESS.value
    await db.commit()

    assert await service.sweep_expired() == 1
    assert (await stored_row(db, release.id)).status == "expired"


async def test_get_all_sweeps_and_skips_orphans(db: AsyncSession, clock: FrozenClock) -> None:
    service = ReleaseService(db, clock=clock)
    first = await service.create(submission(), user_id=EMPLOYEE_ID)
    clock.advance(minutes=1)
    second = await service.create(submission(clientName="Maria"), user_id=OTHER_EMPLOYEE_ID)
    clock.advance(minutes=1)
    await service.create(submission(clientName="Sem dono"), user_id="deleted-user")
    await service.update_status(first.id, ReleaseStatus.SUCCESS)

    clock.advance(days=91)
    listing = await service.get_all()

    assert [item.release.id for item in listing] == [second.id, first.id]
    assert listing[1].release.status == "expired"
    assert listing[1].user.name == "Ana Souza"
    assert listing[1].user.department == "Vendas"
    assert (await stored_row(db, first.id)).status == "expired"


async def test_get_by_user_newest_first(db: AsyncSession, clock: FrozenClock) -> None:
    service = ReleaseService(db, clock=clock)
    older = await service.create(submission(), user_id=EMPLOYEE_ID)
    clock.advance(minutes=5)
    newer = await service.create(submission(clientName="Maria"), user_id=EMPLOYEE_ID)
    await service.create(submission(clientName="Outro"), user_id=OTHER_EMPLOYEE_ID)

    releases = await service.get_by_user(EMPLOYEE_ID)

    assert [release.id for release in releases] == [newer.id, older.id]


async def test_same_instant_releases_list_in_reverse_insertion_order(
    db: AsyncSession, clock: FrozenClock
) -> None:
    service = ReleaseService(db, clock=clock)
    created = [
        await service.create(submission(clientName=f"Cliente {n}"), user_id=EMPLOYEE_ID)
        for n in range(4)
    ]
    newest_first = [release.id for release in reversed(created)]

    assert [release.id for release in await service.get_by_user(EMPLOYEE_ID)] == newest_first
    assert [item.release.id for item in await service.get_all()] == newest_first
    pending = await service.get_by_effective_status(ReleaseStatus.PENDING)
    assert [release.id for release in pending] == newest_first


async def test_get_by_effective_status_uses_time_aware_query(
    db: AsyncSession, clock: FrozenClock
) -> None:
    service = ReleaseService(db, clock=clock)
    release = await service.create(submission(), user_id=EMPLOYEE_ID)
    await service.update_status(release.id, ReleaseStatus.SUCCESS)
    clock.advance(days=91)

    # Stored column still says success; nothing has swept yet.
    assert (await stored_row(db, release.id)).status == "success"
    assert await service.get_by_effective_status(ReleaseStatus.SUCCESS) == []
    expired = await service.get_by_effective_status(ReleaseStatus.EXPIRED)
    assert [item.id for item in expired] == [release.id]


async def test_get_for_report_filters_by_user_and_status(
    db: AsyncSession, clock: FrozenClock
) -> None:
    service = ReleaseService(db, clock=clock)
    mine = await service.create(submission(), user_id=EMPLOYEE_ID)
    await service.create(submission(clientName="Maria"), user_id=OTHER_EMPLOYEE_ID)
    await service.update_status(mine.id, ReleaseStatus.FAILED)

    only_mine = await service.get_for_report(user_id=EMPLOYEE_ID)
    failed = await service.get_for_report(status=ReleaseStatus.FAILED)
    pending = await service.get_for_report(status=ReleaseStatus.PENDING)

    assert [item.release.id for item in only_mine] == [mine.id]
    assert [item.release.id for item in failed] == [mine.id]
    assert len(pending) == 1
    assert pending[0].user.name == "Bruno Lima"


async def test_stats_use_effective_status(db: AsyncSession, clock: FrozenClock) -> None:
    service = ReleaseService(db, clock=clock)
    ids = [
        (await service.create(submission(clientName=f"Cliente {n}"), user_id=EMPLOYEE_ID)).id
        for n in range(8)
    ]
    await service.update_status(ids[0], ReleaseStatus.SUCCESS)
    await service.update_status(ids[1], ReleaseStatus.FAILED)

    stats = await service.get_stats()
    assert stats.as_dict() == {
        "total": 8,
        "pending": 6,
        "success": 1,
        "failed": 1,
        "expired": 0,
        "success_rate": 13,
    }

    clock.advance(days=100)
    lapsed = await service.get_stats()
    assert lapsed.success == 0
    assert lapsed.expired == 1
    assert lapsed.success_rate == 0


async def test_stats_on_empty_store(db: AsyncSession, clock: FrozenClock) -> None:
    stats = await ReleaseService(db, clock=clock).get_stats()

    assert stats.total == 0
    assert stats.success_rate == 0


@pytest.mark.parametrize(
    ("success", "total", "expected"),
    [(0, 0, 0), (1, 8, 13), (1, 3, 33), (2, 3, 67), (1, 2, 50), (1, 200, 1), (1, 201, 0)],
)
def test_success_rate_rounds_half_up(success: int, total: int, expected: int) -> None:
    assert success_rate(success, total) == expected


async def test_rows_are_stored_in_utc(db: AsyncSession, clock: FrozenClock) -> None:
    service = ReleaseService(db, clock=clock)
    release = await service.create(submission(), user_id=EMPLOYEE_ID)

    result = await db.execute(
        select(TutorialReleaseModel.created_at).where(TutorialReleaseModel.id == release.id)
    )
    created_at = result.scalar_one()
    assert created_at.utcoffset() == timedelta(0)
    assert created_at == clock.now()
