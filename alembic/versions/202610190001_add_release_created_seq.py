"""add_release_created_seq

Revision ID: 202610190001
Revises: 202610010001
Create Date: 2026-10-19 09:00:00.000000
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = "202610190001"
down_revision = "202610010001"
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Insertion order among releases sharing a created_at
    op.add_column(
        "tutorial_releases",
        sa.Column("created_seq", sa.BigInteger(), nullable=True),
    )
    op.execute(
        """
        UPDATE tutorial_releases AS release
        SET created_seq = numbered.seq
        FROM (
            SELECT id, ROW_NUMBER() OVER (ORDER BY created_at, id) AS seq
            FROM tutorial_releases
        ) AS numbered
        WHERE release.id = numbered.id
        """
    )
    op.alter_column("tutorial_releases", "created_seq", nullable=False)
    op.create_index(
        "ix_tutorial_releases_created_seq", "tutorial_releases", ["created_seq"]
    )


def downgrade() -> None:
    op.drop_index("ix_tutorial_releases_created_seq", table_name="tutorial_releases")
    op.drop_column("tutorial_releases", "created_seq")
