"""
db/models/laboratory_record.py

Laboratory sample record. Keeps a denormalized copy of the client's identity
next to the client reference so sample sheets stay readable after edits.
"""

from __future__ import annotations

from datetime import date
from typing import Any

from sqlalchemy import Date, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, validates

from db.base import Base, JSONDocument
from db.models.field_visit_base import FieldVisitMixin, ensure_non_negative_counts


class LaboratoryRecord(Base, FieldVisitMixin):
    __tablename__ = "laboratory_records"

    sample_code: Mapped[str] = mapped_column(String(64), nullable=False)
    farm_location: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    collector: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    sample_type: Mapped[str] = mapped_column(String(64), nullable=False)
    sample_number: Mapped[str] = mapped_column(String(64), nullable=False, default="")
    positive_cases: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    negative_cases: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    species_counts: Mapped[dict[str, Any]] = mapped_column(
        JSONDocument,
        nullable=False,
        comment="species -> head count, plus free-text 'other'",
    )
    test_results: Mapped[list[dict[str, Any]]] = mapped_column(
        JSONDocument,
        nullable=False,
        default=list,
    )

    client_name: Mapped[str] = mapped_column(String(255), nullable=False)
    client_national_id: Mapped[str] = mapped_column(String(32), nullable=False)
    client_phone: Mapped[str] = mapped_column(String(32), nullable=False)
    client_birth_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    __table_args__ = (
        Index("ix_laboratory_records_sample_code", "sample_code"),
        Index("ix_laboratory_records_sample_type", "sample_type"),
    )

    @validates("positive_cases", "negative_cases", "species_counts")
    def _validate_counts(self, key: str, value: Any) -> Any:
        return ensure_non_negative_counts(key, value)
