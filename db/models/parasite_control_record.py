"""
db/models/parasite_control_record.py

Parasite-control treatment visit: insecticide application and treated herd counts.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, validates

from db.base import Base, JSONDocument
from db.models.field_visit_base import (
    FieldVisitMixin,
    RequestTrackingMixin,
    ensure_non_negative_counts,
)


class ParasiteControlRecord(Base, FieldVisitMixin, RequestTrackingMixin):
    __tablename__ = "parasite_control_records"

    herd_location: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    herd_counts: Mapped[dict[str, Any]] = mapped_column(
        JSONDocument,
        nullable=False,
        comment="species -> {total, young, female, treated}",
    )
    insecticide: Mapped[dict[str, Any]] = mapped_column(
        JSONDocument,
        nullable=False,
        comment="{type, method, volume_ml, status, category}",
    )
    insecticide_status: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        comment="Sprayed, Not Sprayed",
    )
    animal_barn_size_sqm: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    breeding_sites: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    parasite_control_volume: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    parasite_control_status: Mapped[str] = mapped_column(String(64), nullable=False, default="")
    herd_health_status: Mapped[str] = mapped_column(String(32), nullable=False)
    complying_to_instructions: Mapped[str] = mapped_column(String(32), nullable=False)

    __table_args__ = (
        Index("ix_parasite_control_records_insecticide_status", "insecticide_status"),
        Index("ix_parasite_control_records_herd_health_status", "herd_health_status"),
        Index("ix_parasite_control_records_compliance", "complying_to_instructions"),
    )

    @validates("herd_counts", "animal_barn_size_sqm", "parasite_control_volume")
    def _validate_counts(self, key: str, value: Any) -> Any:
        return ensure_non_negative_counts(key, value)

    @validates("insecticide")
    def _validate_insecticide(self, key: str, value: dict[str, Any]) -> dict[str, Any]:
        ensure_non_negative_counts(key, {"volume_ml": value.get("volume_ml", 0)})
        return value
