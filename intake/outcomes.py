"""
intake/outcomes.py

Per-row import outcomes, the batch report and the row failure type.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping


class RowFailureCategory:
    CLIENT = "client"
    RECORD = "record"
    PERSISTENCE = "persistence"


class RowProcessingError(RuntimeError):
    """
    Raised when one source row cannot be turned into a persisted record.
    """

    def __init__(
        self,
        *,
        row_index: int,
        category: str,
        message: str,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.row_index = row_index
        self.category = category
        self.message = message
        self.cause = cause

    def to_dict(self) -> dict[str, object]:
        return {
            "row_index": self.row_index,
            "category": self.category,
            "message": self.message,
            "cause": type(self.cause).__name__ if self.cause is not None else None,
        }


@dataclass(frozen=True)
class ImportOutcome:
    """
    Result of processing one row. ``row_index`` is the 1-based position in the batch.
    """

    row_index: int
    success: bool
    record_id: str | None = None
    serial_no: str | None = None
    error_category: str | None = None
    error_message: str | None = None
    raw_row: Mapping[str, Any] | None = None

    @classmethod
    def succeeded(cls, *, row_index: int, record_id: str, serial_no: str) -> "ImportOutcome":
        return cls(row_index=row_index, success=True, record_id=record_id, serial_no=serial_no)

    @classmethod
    def failed(
        cls,
        *,
        row_index: int,
        category: str,
        message: str,
        raw_row: Mapping[str, Any] | None,
    ) -> "ImportOutcome":
        return cls(
            row_index=row_index,
            success=False,
            error_category=category,
            error_message=message,
            raw_row=raw_row,
        )


@dataclass(frozen=True)
class BatchReport:
    """
    End-of-batch summary with outcomes in input order.
    """

    total_rows: int
    success_count: int
    failure_count: int
    outcomes: list[ImportOutcome] = field(default_factory=list)

    @property
    def errors(self) -> list[ImportOutcome]:
        return [outcome for outcome in self.outcomes if not outcome.success]

    @property
    def succeeded(self) -> bool:
        return self.failure_count == 0

    @classmethod
    def from_outcomes(cls, outcomes: list[ImportOutcome]) -> "BatchReport":
        success_count = sum(1 for outcome in outcomes if outcome.success)
        return cls(
            total_rows=len(outcomes),
            success_count=success_count,
            failure_count=len(outcomes) - success_count,
            outcomes=list(outcomes),
        )
