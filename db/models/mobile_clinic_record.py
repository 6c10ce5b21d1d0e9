"""
db/models/mobile_clinic_record.py

Mobile-clinic visit: examined animals, diagnosis, treatment and follow-up.
"""

from __future__ import annotations

from datetime import date
from typing import Any

from sqlalchemy import Boolean, Date, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column, validates

from db.base import Base, JSONDocument
from db.models.field_visit_base import (
    FieldVisitMixin,
    RequestTrackingMixin,
    ensure_non_negative_counts,
)


class MobileClinicRecord(Base, FieldVisitMixin, RequestTrackingMixin):
    __tablename__ = "mobile_clinic_records"

    farm_location: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    animal_counts: Mapped[dict[str, int]] = mapped_column(
        JSONDocument,
        nullable=False,
        comment="species -> head count",
    )
    diagnosis: Mapped[str] = mapped_column(Text, nullable=False, default="")
    intervention_category: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        comment="Emergency, Routine, Preventive, Follow-up",
    )
    treatment: Mapped[str] = mapped_column(Text, nullable=False, default="")
    medications_used: Mapped[list[dict[str, Any]]] = mapped_column(
        JSONDocument,
        nullable=False,
        default=list,
    )
    follow_up_required: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    follow_up_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    __table_args__ = (
        Index("ix_mobile_clinic_records_intervention_category", "intervention_category"),
    )

    @validates("animal_counts")
    def _validate_animal_counts(self, key: str, value: dict[str, int]) -> dict[str, int]:
        return ensure_non_negative_counts(key, value)
