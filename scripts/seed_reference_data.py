#!/usr/bin/env python3
"""
Seed job roles and the sample tutorial catalog.

Safe to re-run: existing rows (same name and type for job roles, same
id_cademi for tutorials) are left alone.

Run with:
    python scripts/seed_reference_data.py
"""

import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

import asyncio

from sqlalchemy import select

from tutorial_portal.domain.reference_data import JOB_ROLE_DEFINITIONS, TUTORIAL_DEFINITIONS
from tutorial_portal.infrastructure.db.models import JobRoleModel, JobRoleType, TutorialModel
from tutorial_portal.infrastructure.db.session import dispose_engine, get_session_factory


async def seed_reference_data() -> None:
    session_factory = get_session_factory()

    async with session_factory() as session:
        created_roles = 0
        for definition in JOB_ROLE_DEFINITIONS:
            role_type = JobRoleType(definition["type"])
            existing = await session.scalar(
                select(JobRoleModel).where(
                    JobRoleModel.name == definition["name"], JobRoleModel.type == role_type
                )
            )
            if existing:
                continue
            session.add(
                JobRoleModel(
                    name=definition["name"],
                    type=role_type,
                    sort_order=definition["sort_order"],
                    active=True,
                )
            )
            created_roles += 1

        created_tutorials = 0
        for definition in TUTORIAL_DEFINITIONS:
            existing = await session.scalar(
                select(TutorialModel).where(TutorialModel.id_cademi == definition["id_cademi"])
            )
            if existing:
                continue
            session.add(TutorialModel(**definition))
            created_tutorials += 1

        await session.commit()

    print(f"✅ Job roles created: {created_roles} (of {len(JOB_ROLE_DEFINITIONS)})")
    print(f"✅ Tutorials created: {created_tutorials} (of {len(TUTORIAL_DEFINITIONS)})")
    await dispose_engine()


if __name__ == "__main__":
    asyncio.run(seed_reference_data())
