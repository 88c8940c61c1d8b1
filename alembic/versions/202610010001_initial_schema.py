"""Initial schema for users, tutorials, job roles and tutorial releases

Revision ID: 202610010001
Revises:
Create Date: 2026-10-01 00:01:00
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision = "202610010001"
down_revision = None
branch_labels = None
depends_on = None

user_role_enum = sa.Enum("employee", "admin", name="user_role")
job_role_type_enum = sa.Enum("department", "client_role", name="job_role_type")


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("department", sa.String(length=128), nullable=False),
        sa.Column("role", user_role_enum, nullable=False, server_default="employee"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "tutorials",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("tag", sa.String(length=64), nullable=False),
        sa.Column("id_cademi", sa.Integer(), nullable=False),
    )
    op.create_index("ix_tutorials_tag", "tutorials", ["tag"])

    op.create_table(
        "job_roles",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("name", sa.String(length=128), nullable=False),
        sa.Column("type", job_role_type_enum, nullable=False),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    )
    op.create_index("ix_job_roles_type", "job_roles", ["type"])

    op.create_table(
        "tutorial_releases",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("user_id", sa.String(length=36), nullable=False),
        sa.Column("client_name", sa.String(length=255), nullable=False),
        sa.Column("client_cpf", sa.String(length=32), nullable=False),
        sa.Column("client_email", sa.String(length=255), nullable=False),
        sa.Column("client_phone", sa.String(length=32), nullable=True),
        sa.Column("company_name", sa.String(length=255), nullable=False),
        sa.Column("company_document", sa.String(length=32), nullable=False),
        sa.Column("company_role", sa.String(length=128), nullable=False),
        sa.Column("tutorial_ids", sa.JSON(), nullable=False),
        sa.Column("status", sa.String(length=16), nullable=False, server_default="pending"),
        sa.Column("expiration_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    )
    op.create_index("ix_tutorial_releases_user_id", "tutorial_releases", ["user_id"])
    op.create_index("ix_tutorial_releases_status", "tutorial_releases", ["status"])
    op.create_index("ix_tutorial_releases_created_at", "tutorial_releases", ["created_at"])


def downgrade() -> None:
    op.drop_index("ix_tutorial_releases_created_at", table_name="tutorial_releases")
    op.drop_index("ix_tutorial_releases_status", table_name="tutorial_releases")
    op.drop_index("ix_tutorial_releases_user_id", table_name="tutorial_releases")
    op.drop_table("tutorial_releases")

    op.drop_index("ix_job_roles_type", table_name="job_roles")
    op.drop_table("job_roles")

    op.drop_index("ix_tutorials_tag", table_name="tutorials")
    op.drop_table("tutorials")

    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")

    bind = op.get_bind()
    job_role_type_enum.drop(bind, checkfirst=True)
    user_role_enum.drop(bind, checkfirst=True)
