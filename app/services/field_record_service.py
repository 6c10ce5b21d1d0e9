"""
app/services/field_record_service.py

Filtered, paginated listing of stored field-visit records.
"""

from __future__ import annotations

import math
import uuid
from dataclasses import dataclass
from datetime import date, datetime
from functools import lru_cache
from typing import Any, Mapping

from sqlalchemy.orm import Session

from app.config import get_query_settings
from intake.assemblers import get_assembler_class
from intake.domains import Domain
from intake.filters import FilterBuilder, Pagination
from intake.repository import FieldRecordRepository

_CLIENT_SUMMARY_FIELDS: tuple[str, ...] = ("id", "name", "national_id", "phone", "village")


@dataclass(frozen=True)
class RecordPage:
    records: list[dict[str, Any]]
    pagination: Pagination
    total: int

    @property
    def pages(self) -> int:
        return math.ceil(self.total / self.pagination.limit) if self.total else 0


class FieldRecordService:
    """
    Applies FilterBuilder predicates to one domain's record table.
    """

    def __init__(self, *, filter_builder: FilterBuilder | None = None) -> None:
        self._filters = filter_builder or FilterBuilder()

    def list_records(self, *, db: Session, domain: Domain, params: Mapping[str, Any]) -> RecordPage:
        model = get_assembler_class(domain).model
        repository = FieldRecordRepository(db, model)
        query = self._filters.build_query(domain, model, params)

        total = repository.count(predicates=query.predicates)
        records = repository.search(
            predicates=query.predicates,
            order_by=query.order_by,
            offset=query.pagination.offset,
            limit=query.pagination.limit,
        )
        return RecordPage(
            records=[serialize_record(record) for record in records],
            pagination=query.pagination,
            total=total,
        )


def serialize_record(record: Any) -> dict[str, Any]:
    """
    Column values of a record as JSON-ready data, with a client summary.
    """

    payload = {column.key: _json_value(getattr(record, column.key)) for column in record.__table__.columns}
    client = getattr(record, "client", None)
    if client is not None:
        payload["client"] = {field: _json_value(getattr(client, field)) for field in _CLIENT_SUMMARY_FIELDS}
    return payload


def _json_value(value: Any) -> Any:
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, uuid.UUID):
        return str(value)
    return value


@lru_cache(maxsize=1)
def get_field_record_service() -> FieldRecordService:
    """
    Dependency provider for a singleton record listing service.
    """

    settings = get_query_settings()
    return FieldRecordService(
        filter_builder=FilterBuilder(
            default_limit=settings.default_limit,
            max_limit=settings.max_limit,
        )
    )
