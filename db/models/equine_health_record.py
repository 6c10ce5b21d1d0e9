"""
db/models/equine_health_record.py

Equine-health visit: per-horse details and the normalized intervention category.
"""

from __future__ import annotations

from datetime import date
from typing import Any

from sqlalchemy import Boolean, Date, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, validates

from db.base import Base, JSONDocument
from db.models.field_visit_base import (
    FieldVisitMixin,
    RequestTrackingMixin,
    ensure_non_negative_counts,
)


class EquineHealthRecord(Base, FieldVisitMixin, RequestTrackingMixin):
    __tablename__ = "equine_health_records"

    farm_location: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    horse_count: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    horse_details: Mapped[list[dict[str, Any]]] = mapped_column(
        JSONDocument,
        nullable=False,
        default=list,
        comment="[{breed, age, gender, color, health_status}]",
    )
    diagnosis: Mapped[str] = mapped_column(Text, nullable=False)
    intervention_category: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        comment="Clinical Examination, Surgical Operation, Ultrasonography, Lab Analysis, Farriery",
    )
    intervention_categories: Mapped[list[str]] = mapped_column(
        JSONDocument,
        nullable=False,
        default=list,
    )
    treatment: Mapped[str] = mapped_column(Text, nullable=False)
    medications_used: Mapped[list[dict[str, Any]]] = mapped_column(
        JSONDocument,
        nullable=False,
        default=list,
    )
    follow_up_required: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    follow_up_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    __table_args__ = (
        Index("ix_equine_health_records_intervention_category", "intervention_category"),
    )

    @validates("horse_count")
    def _validate_horse_count(self, key: str, value: int) -> int:
        return ensure_non_negative_counts(key, value)

    @validates("horse_details")
    def _validate_horse_details(
        self,
        key: str,
        value: list[dict[str, Any]],
    ) -> list[dict[str, Any]]:
        for index, detail in enumerate(value):
            ensure_non_negative_counts(f"{key}[{index}]", {"age": detail.get("age") or 0})
        return value
