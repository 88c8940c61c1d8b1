#!/usr/bin/env python3
"""
Import releases from a spreadsheet export.

The CSV uses the portal template headers
(nome,cpf,email,telefone,empresa,cnpj,cargo) or their English names.
Every row gets the same tutorials, as in the bulk upload dialog.

Run with:
    python scripts/import_releases_csv.py <file.csv> <user_id> <tutorial_id> [<tutorial_id> ...]
"""

import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

import asyncio

from tutorial_portal.core.logging import setup_logging
from tutorial_portal.domain.services.bulk import BulkIngestionService, rows_from_csv
from tutorial_portal.infrastructure.db.session import dispose_engine, get_session_factory


async def import_releases(csv_path: Path, user_id: str, tutorial_ids: list[str]) -> int:
    rows = rows_from_csv(csv_path.read_text(encoding="utf-8"))
    if not rows:
        print(f"❌ No rows found in {csv_path}")
        return 1

    session_factory = get_session_factory()
    async with session_factory() as session:
        result = await BulkIngestionService(session).ingest(
            rows, user_id=user_id, tutorial_ids=tutorial_ids
        )
    await dispose_engine()

    print(f"✅ {result.message}")
    for failure in result.failed:
        print(f"   linha {failure.index + 2}: {failure.error}")
    return 0 if not result.failed else 2


def main() -> None:
    if len(sys.argv) < 4:
        print(__doc__)
        sys.exit(1)

    setup_logging()
    csv_path = Path(sys.argv[1])
    user_id = sys.argv[2]
    tutorial_ids = sys.argv[3:]
    sys.exit(asyncio.run(import_releases(csv_path, user_id, tutorial_ids)))


if __name__ == "__main__":
    main()
