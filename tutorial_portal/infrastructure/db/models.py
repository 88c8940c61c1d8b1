from __future__ import annotations

import enum
import uuid
from datetime import datetime

from sqlalchemy import (
    JSON,
    BigInteger,
    Boolean,
    Enum,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, UTCDateTime


class ReleaseStatus(str, enum.Enum):
    """Release lifecycle status.

    ``expired`` is never requested by callers; it is derived from a lapsed
    ``success`` and written back by the sweep.
    """

    PENDING = "pending"
    SUCCESS = "success"
    FAILED = "failed"
    EXPIRED = "expired"

    @classmethod
    def confirmable(cls) -> tuple[ReleaseStatus, ...]:
        return (cls.PENDING, cls.SUCCESS, cls.FAILED)


class UserRole(str, enum.Enum):
    """User role enum matching auth.Role."""

    EMPLOYEE = "employee"
    ADMIN = "admin"


class JobRoleType(str, enum.Enum):
    DEPARTMENT = "department"
    CLIENT_ROLE = "client_role"


class UserModel(Base):
    """Portal employee. Provisioned outside this service and read here."""

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    department: Mapped[str] = mapped_column(String(128), nullable=False)
    role: Mapped[UserRole] = mapped_column(
        Enum(UserRole, name="user_role", values_callable=lambda e: [x.value for x in e]),
        default=UserRole.EMPLOYEE,
        nullable=False,
    )
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime, server_default=func.now(), nullable=False
    )

    def __repr__(self) -> str:
        return f"<UserModel(id={self.id}, email={self.email}, role={self.role.value})>"


class TutorialModel(Base):
    """Tutorial catalog entry; ``id_cademi`` addresses the fulfillment system."""

    __tablename__ = "tutorials"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    tag: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    id_cademi: Mapped[int] = mapped_column(Integer, nullable=False)


class JobRoleModel(Base):
    __tablename__ = "job_roles"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    type: Mapped[JobRoleType] = mapped_column(
        Enum(JobRoleType, name="job_role_type", values_callable=lambda e: [x.value for x in e]),
        nullable=False,
        index=True,
    )
    sort_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime, server_default=func.now(), nullable=False
    )


class TutorialReleaseModel(Base):
    """A client/company granted access to a set of tutorials."""

    __tablename__ = "tutorial_releases"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    # No FK: releases outlive their creator and are filtered out of joined reads
    user_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    client_name: Mapped[str] = mapped_column(String(255), nullable=False)
    client_cpf: Mapped[str] = mapped_column(String(32), nullable=False)
    client_email: Mapped[str] = mapped_column(String(255), nullable=False)
    client_phone: Mapped[str | None] = mapped_column(String(32), nullable=True)
    company_name: Mapped[str] = mapped_column(String(255), nullable=False)
    company_document: Mapped[str] = mapped_column(String(32), nullable=False)
    company_role: Mapped[str] = mapped_column(String(128), nullable=False)
    tutorial_ids: Mapped[list[str]] = mapped_column(JSON, nullable=False)
    status: Mapped[str] = mapped_column(
        String(16), default=ReleaseStatus.PENDING.value, nullable=False, index=True
    )
    expiration_date: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime, server_default=func.now(), nullable=False, index=True
    )
    # Breaks created_at ties; assigned as max + 1 on insert
    created_seq: Mapped[int] = mapped_column(BigInteger, nullable=False, index=True)


__all__ = [
    "ReleaseStatus",
    "UserRole",
    "JobRoleType",
    "UserModel",
    "TutorialModel",
    "JobRoleModel",
    "TutorialReleaseModel",
]
