"""
Bulk release ingestion.

Each row is validated, persisted and announced on its own. A bad row is
recorded in ``failed`` and the loop moves on; the batch as a whole never
fails because of one row. Rows run sequentially so creation order and
webhook order follow input order.
"""

from __future__ import annotations

import csv
import io
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

import structlog
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from tutorial_portal.core.clock import Clock
from tutorial_portal.core.exceptions import format_validation_errors, summarize_validation_errors
from tutorial_portal.domain.services.releases import PersistenceError, ReleaseService
from tutorial_portal.domain.services.webhooks import ReleaseWebhookDispatcher
from tutorial_portal.domain.validation import ReleaseSubmission

logger = structlog.get_logger()

# Spreadsheet header (lower-cased) -> submission field alias
CSV_HEADER_ALIASES: dict[str, str] = {
    "nome": "clientName",
    "client_name": "clientName",
    "cpf": "clientCpf",
    "client_cpf": "clientCpf",
    "email": "clientEmail",
    "client_email": "clientEmail",
    "telefone": "clientPhone",
    "client_phone": "clientPhone",
    "empresa": "companyName",
    "company_name": "companyName",
    "cnpj": "companyDocument",
    "company_document": "companyDocument",
    "cargo": "companyRole",
    "company_role": "companyRole",
}


@dataclass(slots=True)
class BulkSuccess:
    index: int
    id: str
    client_name: str
    status: str


@dataclass(slots=True)
class BulkFailure:
    index: int
    error: str
    data: Any


@dataclass(slots=True)
class BulkIngestionResult:
    total: int
    successful: list[BulkSuccess] = field(default_factory=list)
    failed: list[BulkFailure] = field(default_factory=list)

    @property
    def message(self) -> str:
        return (
            f"Processamento concluído: {len(self.successful)} de {self.total} "
            f"liberações criadas, {len(self.failed)} com erro"
        )


def rows_from_csv(text: str) -> list[dict[str, str]]:
    """Turn spreadsheet CSV text into raw release rows keyed by submission alias.

    Unknown columns are ignored. Accepts comma or semicolon separated files.
    """
    text = text.lstrip("\ufeff")
    if not text.strip():
        return []
    try:
        dialect: type[csv.Dialect] | csv.Dialect = csv.Sniffer().sniff(
            text.splitlines()[0], delimiters=",;"
        )
    except csv.Error:
        dialect = csv.excel

    rows: list[dict[str, str]] = []
    for raw in csv.DictReader(io.StringIO(text), dialect=dialect):
        row: dict[str, str] = {}
        for header, value in raw.items():
            if header is None:
                continue
            alias = CSV_HEADER_ALIASES.get(header.strip().lower())
            if alias:
                row[alias] = (value or "").strip()
        if any(row.values()):
            rows.append(row)
    return rows


def _merge_tutorials(row: Mapping[str, Any], tutorial_ids: Sequence[str] | None) -> dict[str, Any]:
    merged = dict(row)
    if tutorial_ids:
        merged.pop("tutorial_ids", None)
        merged["tutorialIds"] = list(tutorial_ids)
    return merged


class BulkIngestionService:
    """Creates many releases from one request, reporting per-row outcomes."""

    def __init__(
        self,
        session: AsyncSession,
        *,
        clock: Clock | None = None,
        releases: ReleaseService | None = None,
        dispatcher: ReleaseWebhookDispatcher | None = None,
    ) -> None:
        self.releases = releases or ReleaseService(session, clock=clock)
        self.dispatcher = dispatcher or ReleaseWebhookDispatcher(session)

    async def ingest(
        self,
        rows: Sequence[Any],
        *,
        user_id: str,
        tutorial_ids: Sequence[str] | None = None,
    ) -> BulkIngestionResult:
        """Process ``rows`` in order.

        ``tutorial_ids``, when given, replaces whatever each row carries.
        Without it every row must bring its own ``tutorialIds``.
        """
        result = BulkIngestionResult(total=len(rows))

        for index, row in enumerate(rows):
            if not isinstance(row, Mapping):
                result.failed.append(BulkFailure(index=index, error="Registro inválido", data=row))
                continue

            try:
                submission = ReleaseSubmission.model_validate(_merge_tutorials(row, tutorial_ids))
            except ValidationError as exc:
                errors = format_validation_errors(exc.errors())
                result.failed.append(
                    BulkFailure(index=index, error=summarize_validation_errors(errors), data=row)
                )
                continue

            try:
                release = await self.releases.create(submission, user_id=user_id)
            except PersistenceError as exc:
                result.failed.append(BulkFailure(index=index, error=str(exc), data=row))
                continue

            await self.dispatcher.dispatch(release)
            result.successful.append(
                BulkSuccess(
                    index=index,
                    id=release.id,
                    client_name=release.client_name,
                    status=release.status,
                )
            )

        await logger.ainfo(
            "bulk_ingestion_completed",
            user_id=user_id,
            total=result.total,
            successful=len(result.successful),
            failed=len(result.failed),
        )
        return result
