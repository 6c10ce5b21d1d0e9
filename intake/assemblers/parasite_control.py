"""
intake/assemblers/parasite_control.py

Parasite-control treatment rows.
"""

from __future__ import annotations

from typing import Any

from db.models.client import Client
from db.models.parasite_control_record import ParasiteControlRecord
from intake.aliases import PARASITE_CONTROL_FIELD_ALIASES, SPECIES
from intake.assemblers.base import RecordAssembler, VisitDates, register_assembler, species_value
from intake.domains import Domain
from intake.enums import COMPLIANCE, INSECTICIDE_STATUS, PARASITE_HERD_HEALTH
from intake.field_resolver import Row

HERD_METRICS: tuple[str, ...] = ("total", "young", "female", "treated")

_INSECTICIDE_COLUMNS: dict[str, str] = {
    "insecticide_type": "type",
    "insecticide_method": "method",
    "insecticide_volume": "volume_ml",
    "insecticide_status": "status",
    "insecticide_category": "category",
}


@register_assembler
class ParasiteControlAssembler(RecordAssembler):
    domain = Domain.PARASITE_CONTROL
    model = ParasiteControlRecord
    field_aliases = PARASITE_CONTROL_FIELD_ALIASES
    template_fields = (
        "serial_no",
        "date",
        "client_name",
        "client_national_id",
        "client_birth_date",
        "client_phone",
        "holding_code",
        "herd_location",
        "longitude",
        "latitude",
        "supervisor",
        "vehicle_no",
        *(f"{species}_{metric}" for species in SPECIES for metric in HERD_METRICS),
        "insecticide_type",
        "insecticide_method",
        "insecticide_volume",
        "insecticide_category",
        "insecticide_status",
        "animal_barn_size",
        "breeding_sites",
        "parasite_control_volume",
        "parasite_control_status",
        "herd_health_status",
        "complying_to_instructions",
        "request_date",
        "request_situation",
        "request_fulfilling_date",
        "remarks",
    )

    def build_attributes(self, row: Row, *, client: Client, dates: VisitDates) -> dict[str, Any]:
        herd_counts = {
            species: {metric: self.count(row, f"{species}_{metric}") for metric in HERD_METRICS}
            for species in SPECIES
        }
        insecticide_volume = self.count(row, "insecticide_volume")
        insecticide_status = self.enum(row, "insecticide_status", INSECTICIDE_STATUS, "Sprayed")
        return {
            "herd_location": self.text(row, "herd_location"),
            "herd_counts": herd_counts,
            "insecticide": {
                "type": self.text(row, "insecticide_type"),
                "method": self.text(row, "insecticide_method"),
                "volume_ml": insecticide_volume,
                "status": insecticide_status,
                "category": self.text(row, "insecticide_category"),
            },
            "insecticide_status": insecticide_status,
            "animal_barn_size_sqm": self.count(row, "animal_barn_size"),
            "breeding_sites": self.text(row, "breeding_sites"),
            # Sheets without a dedicated column report the sprayed volume only.
            "parasite_control_volume": self.count(row, "parasite_control_volume", insecticide_volume),
            "parasite_control_status": self.text(row, "parasite_control_status"),
            "herd_health_status": self.enum(row, "herd_health_status", PARASITE_HERD_HEALTH, "Healthy"),
            "complying_to_instructions": self.enum(row, "complying_to_instructions", COMPLIANCE, "Comply"),
        }

    def export_value(self, record: Any, attribute: str) -> Any:
        if attribute in _INSECTICIDE_COLUMNS:
            return (record.insecticide or {}).get(_INSECTICIDE_COLUMNS[attribute])
        if attribute == "animal_barn_size":
            return record.animal_barn_size_sqm
        if attribute.partition("_")[0] in SPECIES:
            return species_value(record.herd_counts, attribute)
        return super().export_value(record, attribute)
