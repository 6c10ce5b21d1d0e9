"""
app/services/field_import_service.py

Service layer for field-visit batch imports.

Two entry points feed the same pipeline: webhook-style JSON payloads and
multipart CSV uploads. Both end in ImportOrchestrator.run(), which commits
row by row; this layer only shapes input and output.
"""

from __future__ import annotations

import csv
import io
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from functools import lru_cache
from typing import Any, Callable, Mapping

from fastapi import UploadFile
from sqlalchemy.orm import Session

from app.config import get_import_settings
from intake.domains import Domain
from intake.entity_resolver import ClientResolver
from intake.orchestrator import ImportOrchestrator
from intake.outcomes import BatchReport
from intake.repository import ClientRepository

logger = logging.getLogger(__name__)

PAYLOAD_ROW_KEYS: tuple[str, ...] = ("data", "rows", "validData")
WEBHOOK_SOURCE = "dromo-webhook"
CSV_SOURCE = "csv-upload"
_BATCH_PREFIXES: dict[str, str] = {WEBHOOK_SOURCE: "dromo", CSV_SOURCE: "csv"}


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class ImportPayloadError(ValueError):
    """
    Raised when a JSON import payload carries no row list.
    """


class CSVImportError(ValueError):
    """
    Raised when an uploaded CSV cannot be decoded or parsed.
    """


class ImportBatchTooLargeError(ValueError):
    """
    Raised when a batch exceeds the configured row limit.
    """

    def __init__(self, *, total_rows: int, max_rows: int) -> None:
        super().__init__(f"Batch has {total_rows} rows; the limit is {max_rows}.")
        self.total_rows = total_rows
        self.max_rows = max_rows


# ---------------------------------------------------------------------------
# Result
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ImportBatchResult:
    """
    Batch report plus the identifiers the API echoes back.
    """

    domain: Domain
    report: BatchReport
    batch_id: str
    source: str
    max_reported_errors: int

    @property
    def message(self) -> str:
        return f"تم استيراد {self.report.success_count} سجل بنجاح"

    def error_entries(self) -> list[dict[str, Any]]:
        return [
            {
                "row_index": outcome.row_index,
                "error": outcome.error_message or "",
                "category": outcome.error_category or "",
                "data": dict(outcome.raw_row) if outcome.raw_row is not None else None,
            }
            for outcome in self.report.errors[: self.max_reported_errors]
        ]


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class FieldImportService:
    """
    Coordinates payload extraction, CSV parsing and the row-by-row import.
    """

    def __init__(
        self,
        *,
        max_rows: int,
        log_row_errors: bool,
        max_reported_errors: int,
        default_creator_id: str,
        client_default_status: str,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._max_rows = max(1, max_rows)
        self._log_row_errors = log_row_errors
        self._max_reported_errors = max(1, max_reported_errors)
        self._default_creator_id = default_creator_id
        self._client_default_status = client_default_status
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    @property
    def default_creator_id(self) -> str:
        return self._default_creator_id

    def import_payload(
        self,
        *,
        db: Session,
        domain: Domain,
        payload: Any,
        creator_id: str | None = None,
    ) -> ImportBatchResult:
        """
        Import a webhook payload: a bare array of rows or an object holding
        the rows under ``data``, ``rows`` or ``validData``.
        """

        rows = self.extract_rows(payload)
        return self.import_rows(db=db, domain=domain, rows=rows, creator_id=creator_id, source=WEBHOOK_SOURCE)

    def import_csv(
        self,
        *,
        db: Session,
        domain: Domain,
        upload_file: UploadFile,
        creator_id: str | None = None,
    ) -> ImportBatchResult:
        rows = self.parse_csv(upload_file)
        return self.import_rows(db=db, domain=domain, rows=rows, creator_id=creator_id, source=CSV_SOURCE)

    def import_rows(
        self,
        *,
        db: Session,
        domain: Domain,
        rows: list[Any],
        creator_id: str | None,
        source: str,
    ) -> ImportBatchResult:
        if len(rows) > self._max_rows:
            raise ImportBatchTooLargeError(total_rows=len(rows), max_rows=self._max_rows)

        orchestrator = ImportOrchestrator(
            db,
            domain,
            log_row_errors=self._log_row_errors,
            client_resolver=ClientResolver(
                ClientRepository(db),
                default_status=self._client_default_status,
                clock=self._clock,
            ),
            clock=self._clock,
        )
        report = orchestrator.run(rows, creator_id or self._default_creator_id)

        millis = int(self._clock().timestamp() * 1000)
        return ImportBatchResult(
            domain=domain,
            report=report,
            batch_id=f"{_BATCH_PREFIXES.get(source, 'import')}_{millis}_{domain.value}",
            source=source,
            max_reported_errors=self._max_reported_errors,
        )

    @staticmethod
    def extract_rows(payload: Any) -> list[Any]:
        if isinstance(payload, list):
            return payload
        if isinstance(payload, Mapping):
            for key in PAYLOAD_ROW_KEYS:
                rows = payload.get(key)
                if isinstance(rows, list):
                    return rows
            raise ImportPayloadError(
                f"Payload must contain a row list under one of: {', '.join(PAYLOAD_ROW_KEYS)}."
            )
        raise ImportPayloadError("Payload must be a JSON array or object.")

    @staticmethod
    def parse_csv(upload_file: UploadFile) -> list[dict[str, str]]:
        """
        Read a UTF-8 CSV (BOM tolerated) into header-keyed rows.

        Header cells are kept verbatim; blank lines are skipped.
        """

        raw_file = upload_file.file
        raw_file.seek(0)
        text_stream: io.TextIOWrapper | None = None
        try:
            text_stream = io.TextIOWrapper(raw_file, encoding="utf-8-sig", newline="")
            reader = csv.DictReader(text_stream)
            if not reader.fieldnames:
                raise CSVImportError("CSV header row is missing.")
            rows = [
                {key: value for key, value in raw_row.items() if key is not None}
                for raw_row in reader
                if any((value or "").strip() for key, value in raw_row.items() if isinstance(value, str))
            ]
        except UnicodeDecodeError as exc:
            raise CSVImportError("CSV must be UTF-8 encoded.") from exc
        except csv.Error as exc:
            raise CSVImportError(f"Invalid CSV format: {exc}") from exc
        finally:
            if text_stream is not None:
                try:
                    text_stream.detach()
                except ValueError:
                    pass

        logger.debug("Parsed %d CSV rows from %s", len(rows), upload_file.filename)
        return rows


@lru_cache(maxsize=1)
def get_field_import_service() -> FieldImportService:
    """
    Dependency provider for a singleton field import service.
    """

    settings = get_import_settings()
    return FieldImportService(
        max_rows=settings.max_rows,
        log_row_errors=settings.log_row_errors,
        max_reported_errors=settings.max_reported_errors,
        default_creator_id=settings.default_creator_id,
        client_default_status=settings.client_default_status,
    )
