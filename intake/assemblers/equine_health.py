"""
intake/assemblers/equine_health.py

Equine-health visit rows. Per-horse columns (breed, age, gender, colour,
health status) may hold comma-separated lists; they are zipped by position
into one detail entry per horse.
"""

from __future__ import annotations

from itertools import zip_longest
from typing import Any

from db.models.client import Client
from db.models.equine_health_record import EquineHealthRecord
from intake.aliases import EQUINE_HEALTH_FIELD_ALIASES
from intake.assemblers.base import RecordAssembler, VisitDates, register_assembler
from intake.assemblers.mobile_clinic import medication_names
from intake.coercion import parse_int, split_csv_cell
from intake.domains import Domain
from intake.entity_resolver import UNSPECIFIED
from intake.enums import EQUINE_INTERVENTION_CATEGORY, HORSE_GENDER, HORSE_HEALTH_STATUS
from intake.field_resolver import Row

DEFAULT_INTERVENTION_CATEGORY = "Clinical Examination"

_DETAIL_COLUMNS: dict[str, str] = {
    "horse_breed": "breed",
    "horse_age": "age",
    "horse_gender": "gender",
    "horse_color": "color",
    "horse_health_status": "health_status",
}


@register_assembler
class EquineHealthAssembler(RecordAssembler):
    domain = Domain.EQUINE_HEALTH
    model = EquineHealthRecord
    field_aliases = EQUINE_HEALTH_FIELD_ALIASES
    template_fields = (
        "serial_no",
        "date",
        "client_name",
        "client_national_id",
        "client_birth_date",
        "client_phone",
        "holding_code",
        "farm_location",
        "longitude",
        "latitude",
        "supervisor",
        "vehicle_no",
        "horse_count",
        "horse_breed",
        "horse_age",
        "horse_gender",
        "horse_color",
        "horse_health_status",
        "diagnosis",
        "intervention_category",
        "treatment",
        "medications_used",
        "request_date",
        "request_situation",
        "request_fulfilling_date",
        "follow_up_required",
        "follow_up_date",
        "remarks",
    )

    def build_attributes(self, row: Row, *, client: Client, dates: VisitDates) -> dict[str, Any]:
        categories = self._enums[EQUINE_INTERVENTION_CATEGORY].normalize_list(
            split_csv_cell(self.value(row, "intervention_category")),
            DEFAULT_INTERVENTION_CATEGORY,
        )
        return {
            "farm_location": self.text(row, "farm_location") or (client.village or ""),
            "horse_count": self.count(row, "horse_count", 1),
            "horse_details": self.horse_details(row),
            "diagnosis": self.text(row, "diagnosis", UNSPECIFIED),
            "intervention_category": categories[0],
            "intervention_categories": categories,
            "treatment": self.text(row, "treatment", UNSPECIFIED),
            "medications_used": self.medications(row, route_fallback="Injection"),
            "follow_up_required": self.follow_up_required(row),
            "follow_up_date": dates.follow_up,
        }

    def horse_details(self, row: Row) -> list[dict[str, Any]]:
        genders = self._enums[HORSE_GENDER]
        statuses = self._enums[HORSE_HEALTH_STATUS]
        columns = zip_longest(
            split_csv_cell(self.value(row, "horse_breed")),
            split_csv_cell(self.value(row, "horse_age")),
            split_csv_cell(self.value(row, "horse_gender")),
            split_csv_cell(self.value(row, "horse_color")),
            split_csv_cell(self.value(row, "horse_health_status")),
        )

        details: list[dict[str, Any]] = []
        for breed, age, gender, color, health in columns:
            details.append(
                {
                    "breed": breed or UNSPECIFIED,
                    "age": parse_int(age, 0) if age else None,
                    "gender": genders.normalize(gender, gender or "") or None,
                    "color": color or UNSPECIFIED,
                    "health_status": statuses.normalize(health, "Healthy"),
                }
            )
        return details

    def export_value(self, record: Any, attribute: str) -> Any:
        if attribute in _DETAIL_COLUMNS:
            key = _DETAIL_COLUMNS[attribute]
            return ", ".join(
                str(detail.get(key)) for detail in record.horse_details or [] if detail.get(key) is not None
            )
        if attribute == "intervention_category":
            return ", ".join(record.intervention_categories or [record.intervention_category])
        if attribute == "medications_used":
            return medication_names(record.medications_used)
        if attribute == "follow_up_required":
            return "Yes" if record.follow_up_required else "No"
        return super().export_value(record, attribute)
