"""
intake/assemblers/mobile_clinic.py

Mobile-clinic visit rows.
"""

from __future__ import annotations

from typing import Any

from db.models.client import Client
from db.models.mobile_clinic_record import MobileClinicRecord
from intake.aliases import MOBILE_CLINIC_FIELD_ALIASES, SPECIES
from intake.assemblers.base import RecordAssembler, VisitDates, register_assembler, species_value
from intake.domains import Domain
from intake.enums import MOBILE_INTERVENTION_CATEGORY
from intake.field_resolver import Row


def medication_names(medications: list[dict[str, Any]] | None) -> str:
    return ", ".join(str(item.get("name", "")) for item in medications or [] if item.get("name"))


@register_assembler
class MobileClinicAssembler(RecordAssembler):
    domain = Domain.MOBILE_CLINICS
    model = MobileClinicRecord
    field_aliases = MOBILE_CLINIC_FIELD_ALIASES
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
        *(f"{species}_count" for species in SPECIES),
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
        return {
            "farm_location": self.text(row, "farm_location"),
            "animal_counts": {species: self.count(row, f"{species}_count") for species in SPECIES},
            "diagnosis": self.text(row, "diagnosis"),
            "intervention_category": self.enum(
                row,
                "intervention_category",
                MOBILE_INTERVENTION_CATEGORY,
                "Routine",
            ),
            "treatment": self.text(row, "treatment"),
            "medications_used": self.medications(row, route_fallback="Oral"),
            "follow_up_required": self.follow_up_required(row),
            "follow_up_date": dates.follow_up,
        }

    def export_value(self, record: Any, attribute: str) -> Any:
        if attribute == "medications_used":
            return medication_names(record.medications_used)
        if attribute == "follow_up_required":
            return "Yes" if record.follow_up_required else "No"
        if attribute.endswith("_count") and attribute.partition("_")[0] in SPECIES:
            return species_value(record.animal_counts, attribute)
        return super().export_value(record, attribute)
