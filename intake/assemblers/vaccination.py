"""
intake/assemblers/vaccination.py

Vaccination campaign rows.
"""

from __future__ import annotations

from typing import Any

from db.models.client import Client
from db.models.vaccination_record import VaccinationRecord
from intake.aliases import SPECIES, VACCINATION_FIELD_ALIASES
from intake.assemblers.base import RecordAssembler, VisitDates, register_assembler, species_value
from intake.domains import Domain
from intake.enums import ANIMALS_HANDLING, HERD_HEALTH, LABOURS, REACHABLE_LOCATION, VACCINE_CATEGORY
from intake.field_resolver import Row

HERD_METRICS: tuple[str, ...] = ("total", "young", "female", "vaccinated")


@register_assembler
class VaccinationAssembler(RecordAssembler):
    domain = Domain.VACCINATION
    model = VaccinationRecord
    field_aliases = VACCINATION_FIELD_ALIASES
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
        "team",
        "vehicle_no",
        *(f"{species}_{metric}" for species in SPECIES for metric in ("total", "female", "vaccinated")),
        "vaccine_type",
        "vaccine_category",
        "herd_health",
        "animals_handling",
        "labours",
        "reachable_location",
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
        return {
            "farm_location": self.text(row, "farm_location"),
            "team": self.text(row, "team") or None,
            "vaccine_type": self.text(row, "vaccine_type") or None,
            "vaccine_category": self.enum(row, "vaccine_category", VACCINE_CATEGORY, "Preventive"),
            "herd_counts": herd_counts,
            "herd_health": self.enum(row, "herd_health", HERD_HEALTH, "Healthy"),
            "animals_handling": self.enum(row, "animals_handling", ANIMALS_HANDLING, "Easy"),
            "labours": self.enum(row, "labours", LABOURS, "Available"),
            "reachable_location": self.enum(row, "reachable_location", REACHABLE_LOCATION, "Easy"),
        }

    def export_value(self, record: Any, attribute: str) -> Any:
        species = attribute.partition("_")[0]
        if species in SPECIES:
            return species_value(record.herd_counts, attribute)
        return super().export_value(record, attribute)
