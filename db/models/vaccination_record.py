"""
db/models/vaccination_record.py

Vaccination campaign visit: vaccine administered and per-species herd counts.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import Index, String
from sqlalchemy.orm import Mapped, mapped_column, validates

from db.base import Base, JSONDocument
from db.models.field_visit_base import (
    FieldVisitMixin,
    RequestTrackingMixin,
    ensure_non_negative_counts,
)


class VaccinationRecord(Base, FieldVisitMixin, RequestTrackingMixin):
    __tablename__ = "vaccination_records"

    farm_location: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    team: Mapped[str | None] = mapped_column(String(255), nullable=True)
    vaccine_type: Mapped[str | None] = mapped_column(String(255), nullable=True)
    vaccine_category: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        comment="Preventive, Emergency",
    )
    herd_counts: Mapped[dict[str, Any]] = mapped_column(
        JSONDocument,
        nullable=False,
        comment="species -> {total, young, female, vaccinated}",
    )
    herd_health: Mapped[str] = mapped_column(String(32), nullable=False)
    animals_handling: Mapped[str] = mapped_column(String(32), nullable=False)
    labours: Mapped[str] = mapped_column(String(32), nullable=False)
    reachable_location: Mapped[str] = mapped_column(String(32), nullable=False)

    __table_args__ = (
        Index("ix_vaccination_records_vaccine_category", "vaccine_category"),
        Index("ix_vaccination_records_herd_health", "herd_health"),
    )

    @validates("herd_counts")
    def _validate_herd_counts(self, key: str, value: dict[str, Any]) -> dict[str, Any]:
        return ensure_non_negative_counts(key, value)
