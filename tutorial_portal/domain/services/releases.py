"""
Release store.

The only place that writes ``status`` and ``expiration_date``. Read paths
derive the effective status from the lifecycle rules instead of trusting the
stored column; ``get_all`` and report reads also sweep lapsed rows so the
column catches up.
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from datetime import datetime

import structlog
from sqlalchemy import and_, case, func, or_, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql.elements import ColumnElement, UnaryExpression
from sqlalchemy.sql.selectable import ScalarSelect

from tutorial_portal.core.clock import Clock, ReferenceClock
from tutorial_portal.core.config import get_settings
from tutorial_portal.domain.services.lifecycle import (
    effective_status,
    plan_transition,
    visible_expiration,
)
from tutorial_portal.domain.validation import ReleaseSubmission
from tutorial_portal.infrastructure.db.models import (
    ReleaseStatus,
    TutorialReleaseModel,
    UserModel,
)

logger = structlog.get_logger()


class ReleaseNotFoundError(Exception):
    """Raised when a release id does not exist."""


class PersistenceError(Exception):
    """Raised when the backing store rejects a read or write."""


@dataclass(slots=True)
class ReleaseRecord:
    """A release as readers see it: effective status, visible expiration."""

    id: str
    user_id: str
    client_name: str
    client_cpf: str
    client_email: str
    client_phone: str | None
    company_name: str
    company_document: str
    company_role: str
    tutorial_ids: list[str]
    status: str
    expiration_date: datetime | None
    created_at: datetime

    @classmethod
    def from_model(cls, model: TutorialReleaseModel, now: datetime) -> ReleaseRecord:
        return cls(
            id=model.id,
            user_id=model.user_id,
            client_name=model.client_name,
            client_cpf=model.client_cpf,
            client_email=model.client_email,
            client_phone=model.client_phone,
            company_name=model.company_name,
            company_document=model.company_document,
            company_role=model.company_role,
            tutorial_ids=list(model.tutorial_ids or []),
            status=effective_status(model.status, model.expiration_date, now).value,
            expiration_date=visible_expiration(model.status, model.expiration_date, now),
            created_at=model.created_at,
        )


@dataclass(slots=True)
class CreatorInfo:
    id: str
    name: str
    email: str
    department: str


@dataclass(slots=True)
class ReleaseWithCreator:
    release: ReleaseRecord
    user: CreatorInfo


@dataclass(slots=True)
class ReleaseStats:
    total: int
    pending: int
    success: int
    failed: int
    expired: int
    success_rate: int

    def as_dict(self) -> dict[str, int]:
        return asdict(self)


def success_rate(success: int, total: int) -> int:
    """Percentage of effective successes, rounded half up; 0 for an empty table."""
    if total <= 0:
        return 0
    return math.floor(success / total * 100 + 0.5)


def _lapsed(now: datetime) -> ColumnElement[bool]:
    return or_(
        TutorialReleaseModel.expiration_date.is_(None),
        TutorialReleaseModel.expiration_date <= now,
    )


def _next_created_seq() -> ScalarSelect[int]:
    return select(
        func.coalesce(func.max(TutorialReleaseModel.created_seq), 0) + 1
    ).scalar_subquery()


def _newest_first() -> tuple[UnaryExpression, ...]:
    return (
        TutorialReleaseModel.created_at.desc(),
        TutorialReleaseModel.created_seq.desc(),
    )


def effective_status_expression(now: datetime) -> ColumnElement[str]:
    """SQL twin of ``lifecycle.effective_status``."""
    return case(
        (
            and_(TutorialReleaseModel.status == ReleaseStatus.SUCCESS.value, _lapsed(now)),
            ReleaseStatus.EXPIRED.value,
        ),
        else_=TutorialReleaseModel.status,
    )


class ReleaseService:
    """Persistence and lifecycle transitions for tutorial releases."""

    def __init__(
        self,
        session: AsyncSession,
        *,
        clock: Clock | None = None,
        validity_days: int | None = None,
    ) -> None:
        self.session = session
        self.clock = clock or ReferenceClock()
        self.validity_days = (
            validity_days if validity_days is not None else get_settings().release_validity_days
        )

    async def create(self, submission: ReleaseSubmission, *, user_id: str) -> ReleaseRecord:
        """Insert a new release as ``pending`` with no expiration."""
        now = self.clock.now()
        model = TutorialReleaseModel(
            user_id=user_id,
            client_name=submission.client_name,
            client_cpf=submission.client_cpf,
            client_email=str(submission.client_email),
            client_phone=submission.client_phone,
            company_name=submission.company_name,
            company_document=submission.company_document,
            company_role=submission.company_role,
            tutorial_ids=list(submission.tutorial_ids),
            status=ReleaseStatus.PENDING.value,
            expiration_date=None,
            created_at=now,
            created_seq=_next_created_seq(),
        )
        try:
            self.session.add(model)
            await self.session.commit()
        except SQLAlchemyError as exc:
            await self.session.rollback()
            await logger.aerror("release_create_failed", user_id=user_id, error=str(exc))
            raise PersistenceError("Erro ao salvar liberação") from exc

        await logger.ainfo(
            "release_created",
            release_id=model.id,
            user_id=user_id,
            tutorial_count=len(model.tutorial_ids),
        )
        return ReleaseRecord.from_model(model, now)

    async def get_by_id(self, release_id: str) -> ReleaseRecord:
        model = await self.session.get(TutorialReleaseModel, release_id)
        if model is None:
            raise ReleaseNotFoundError(f"Liberação {release_id} não encontrada")
        return ReleaseRecord.from_model(model, self.clock.now())

    async def get_by_user(self, user_id: str) -> list[ReleaseRecord]:
        """Releases created by ``user_id``, newest first."""
        stmt = (
            select(TutorialReleaseModel)
            .where(TutorialReleaseModel.user_id == user_id)
            .order_by(*_newest_first())
        )
        now = self.clock.now()
        rows = (await self.session.execute(stmt)).scalars().all()
        return [ReleaseRecord.from_model(row, now) for row in rows]

    async def get_all(self) -> list[ReleaseWithCreator]:
        """Every release with its creator, newest first.

        Sweeps lapsed successes first. Releases whose creator no longer exists
        are left out.
        """
        await self.sweep_expired()
        return await self._joined(())

    async def get_for_report(
        self,
        *,
        user_id: str | None = None,
        status: ReleaseStatus | None = None,
    ) -> list[ReleaseWithCreator]:
        """Filtered listing feeding spreadsheet exports."""
        await self.sweep_expired()
        now = self.clock.now()
        conditions: list[ColumnElement[bool]] = []
        if user_id:
            conditions.append(TutorialReleaseModel.user_id == user_id)
        if status is not None:
            conditions.append(effective_status_expression(now) == status.value)
        return await self._joined(conditions, now=now)

    async def _joined(
        self,
        conditions,
        *,
        now: datetime | None = None,
    ) -> list[ReleaseWithCreator]:
        stmt = (
            select(TutorialReleaseModel, UserModel)
            .join(UserModel, UserModel.id == TutorialReleaseModel.user_id)
            .where(*conditions)
            .order_by(*_newest_first())
        )
        now = now or self.clock.now()
        rows = (await self.session.execute(stmt)).all()
        return [
            ReleaseWithCreator(
                release=ReleaseRecord.from_model(release, now),
                user=CreatorInfo(
                    id=user.id,
                    name=user.name,
                    email=user.email,
                    department=user.department,
                ),
            )
            for release, user in rows
        ]

    async def update_status(self, release_id: str, status: ReleaseStatus) -> ReleaseRecord:
        """Apply an external confirmation. Last write wins."""
        model = await self.session.get(TutorialReleaseModel, release_id)
        if model is None:
            raise ReleaseNotFoundError(f"Liberação {release_id} não encontrada")

        now = self.clock.now()
        transition = plan_transition(status, now, self.validity_days)
        previous = model.status
        model.status = transition.status.value
        model.expiration_date = transition.expiration_date
        try:
            await self.session.commit()
        except SQLAlchemyError as exc:
            await self.session.rollback()
            await logger.aerror(
                "release_status_update_failed", release_id=release_id, error=str(exc)
            )
            raise PersistenceError("Erro ao atualizar status") from exc

        await logger.ainfo(
            "release_status_updated",
            release_id=release_id,
            previous_status=previous,
            status=transition.status.value,
            expiration_date=transition.expiration_date.isoformat()
            if transition.expiration_date
            else None,
        )
        return ReleaseRecord.from_model(model, now)

    async def get_by_effective_status(self, status: ReleaseStatus) -> list[ReleaseRecord]:
        """Releases whose status, as of now, equals ``status``; newest first."""
        now = self.clock.now()
        stmt = (
            select(TutorialReleaseModel)
            .where(effective_status_expression(now) == status.value)
            .order_by(*_newest_first())
        )
        rows = (await self.session.execute(stmt)).scalars().all()
        return [ReleaseRecord.from_model(row, now) for row in rows]

    async def get_pending(self) -> list[ReleaseRecord]:
        return await self.get_by_effective_status(ReleaseStatus.PENDING)

    async def get_stats(self) -> ReleaseStats:
        now = self.clock.now()
        derived = select(
            effective_status_expression(now).label("effective_status")
        ).subquery()
        stmt = select(derived.c.effective_status, func.count()).group_by(
            derived.c.effective_status
        )
        counts = {status: count for status, count in (await self.session.execute(stmt)).all()}

        total = sum(counts.values())
        success = counts.get(ReleaseStatus.SUCCESS.value, 0)
        return ReleaseStats(
            total=total,
            pending=counts.get(ReleaseStatus.PENDING.value, 0),
            success=success,
            failed=counts.get(ReleaseStatus.FAILED.value, 0),
            expired=counts.get(ReleaseStatus.EXPIRED.value, 0),
            success_rate=success_rate(success, total),
        )

    async def sweep_expired(self) -> int:
        """Rewrite lapsed ``success`` rows to ``expired``. Returns rows changed."""
        now = self.clock.now()
        lapsed = (TutorialReleaseModel.status == ReleaseStatus.SUCCESS.value, _lapsed(now))
        try:
            ids = (
                await self.session.execute(select(TutorialReleaseModel.id).where(*lapsed))
            ).scalars().all()
            if not ids:
                return 0
            await self.session.execute(
                update(TutorialReleaseModel)
                .where(TutorialReleaseModel.id.in_(ids), *lapsed)
                .values(status=ReleaseStatus.EXPIRED.value, expiration_date=None)
                .execution_options(synchronize_session="fetch")
            )
            await self.session.commit()
        except SQLAlchemyError as exc:
            await self.session.rollback()
            raise PersistenceError("Erro ao verificar expirações") from exc

        await logger.ainfo("releases_swept", count=len(ids), release_ids=list(ids))
        return len(ids)
