"""
app/services/csv_exchange_service.py

CSV templates and exports for field-visit domains.

Both use the assembler's canonical column order and preferred headers, so
an exported file can be re-imported unchanged.
"""

from __future__ import annotations

import csv
import io
import json
from datetime import date, datetime
from functools import lru_cache
from typing import Any, Iterable

from sqlalchemy.orm import Session

from intake.assemblers import RecordAssembler, get_assembler_class
from intake.domains import Domain
from intake.repository import FieldRecordRepository

EXPORT_BATCH_SIZE = 500


class CSVExchangeService:
    """
    Renders header-only templates and full record exports.
    """

    def __init__(self, *, export_batch_size: int = EXPORT_BATCH_SIZE) -> None:
        self._export_batch_size = max(1, export_batch_size)

    def template_csv(self, *, db: Session, domain: Domain) -> str:
        assembler = self._assembler(db, domain)
        return _render_csv(assembler.template_headers(), [])

    def export_csv(self, *, db: Session, domain: Domain) -> str:
        """
        All stored records for ``domain``, oldest visit first.
        """

        assembler = self._assembler(db, domain)
        repository = FieldRecordRepository(db, assembler.model)
        model = assembler.model
        return _render_csv(
            assembler.template_headers(),
            (assembler.export_row(record) for record in self._iter_records(repository, model)),
        )

    def _iter_records(self, repository: FieldRecordRepository, model: Any) -> Iterable[Any]:
        offset = 0
        while True:
            page = repository.search(
                order_by=(model.date.asc(), model.created_at.asc(), model.id.asc()),
                offset=offset,
                limit=self._export_batch_size,
            )
            yield from page
            if len(page) < self._export_batch_size:
                return
            offset += self._export_batch_size

    @staticmethod
    def _assembler(db: Session, domain: Domain) -> RecordAssembler:
        return get_assembler_class(domain)(db)


def _render_csv(headers: list[str], rows: Iterable[list[Any]]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(headers)
    for row in rows:
        writer.writerow([_cell(value) for value in row])
    return buffer.getvalue()


def _cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False)
    return str(value)


@lru_cache(maxsize=1)
def get_csv_exchange_service() -> CSVExchangeService:
    """
    Dependency provider for a singleton CSV exchange service.
    """

    return CSVExchangeService()
