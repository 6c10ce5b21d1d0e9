"""
intake/orchestrator.py

Sequential batch import with per-row failure isolation.

Rows are handled strictly in input order. Each row (client resolution and
record) is committed on its own; a failing row is rolled back, recorded in
the batch report and never aborts the rows after it.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Iterable, Mapping

from sqlalchemy.orm import Session

from intake.assemblers import RecordAssembler, get_assembler_class
from intake.domains import Domain
from intake.logging_utils import log_event
from intake.outcomes import BatchReport, ImportOutcome, RowFailureCategory, RowProcessingError

logger = logging.getLogger(__name__)


class ImportOrchestrator:
    """
    Runs one batch of rows through the assembler selected by ``domain``.
    """

    def __init__(
        self,
        session: Session,
        domain: Domain,
        *,
        assembler: RecordAssembler | None = None,
        log_row_errors: bool = True,
        **assembler_options: Any,
    ) -> None:
        self._session = session
        self._domain = domain
        self._assembler = assembler or get_assembler_class(domain)(session, **assembler_options)
        self._log_row_errors = log_row_errors

    @property
    def assembler(self) -> RecordAssembler:
        return self._assembler

    def run(self, rows: Iterable[Any], creator_id: str | None) -> BatchReport:
        rows = list(rows)
        started = time.perf_counter()
        log_event(
            logger,
            logging.INFO,
            "import_batch_started",
            domain=self._domain.value,
            total_rows=len(rows),
            created_by=creator_id,
        )

        outcomes: list[ImportOutcome] = []
        for row_index, row in enumerate(rows, start=1):
            outcomes.append(self._process_row(row, row_index=row_index, creator_id=creator_id))

        report = BatchReport.from_outcomes(outcomes)
        log_event(
            logger,
            logging.INFO,
            "import_batch_completed",
            domain=self._domain.value,
            total_rows=report.total_rows,
            success_rows=report.success_count,
            error_rows=report.failure_count,
            duration_ms=round((time.perf_counter() - started) * 1000, 1),
        )
        return report

    def _process_row(self, row: Any, *, row_index: int, creator_id: str | None) -> ImportOutcome:
        if not isinstance(row, Mapping):
            return self._failure(
                row_index=row_index,
                category=RowFailureCategory.RECORD,
                message=f"Row must be an object, got {type(row).__name__}.",
                raw_row=None,
            )

        try:
            record = self._assembler.assemble(row, creator_id, row_index)
            self._session.commit()
        except RowProcessingError as exc:
            self._session.rollback()
            return self._failure(
                row_index=row_index,
                category=exc.category,
                message=exc.message,
                raw_row=row,
            )
        except Exception as exc:  # noqa: BLE001
            self._session.rollback()
            return self._failure(
                row_index=row_index,
                category=RowFailureCategory.PERSISTENCE,
                message=f"Unexpected error: {exc}",
                raw_row=row,
            )

        return ImportOutcome.succeeded(
            row_index=row_index,
            record_id=str(record.id),
            serial_no=record.serial_no,
        )

    def _failure(
        self,
        *,
        row_index: int,
        category: str,
        message: str,
        raw_row: Mapping[str, Any] | None,
    ) -> ImportOutcome:
        if self._log_row_errors:
            log_event(
                logger,
                logging.WARNING,
                "import_row_failed",
                domain=self._domain.value,
                row_index=row_index,
                category=category,
                message=message,
            )
        return ImportOutcome.failed(
            row_index=row_index,
            category=category,
            message=message,
            raw_row=dict(raw_row) if raw_row is not None else None,
        )
