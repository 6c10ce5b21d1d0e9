"""
intake/assemblers/laboratory.py

Laboratory sample rows. Sample sheets carry no service request, and the
record keeps a copy of the owner's identity next to the client reference.
"""

from __future__ import annotations

import json
from typing import Any

from db.models.client import Client
from db.models.laboratory_record import LaboratoryRecord
from intake.aliases import LABORATORY_FIELD_ALIASES, SPECIES
from intake.assemblers.base import RecordAssembler, VisitDates, register_assembler, species_value
from intake.coercion import parse_json_list
from intake.domains import Domain
from intake.enums import SAMPLE_TYPE
from intake.field_resolver import Row

DEFAULT_SAMPLE_TYPE = "Blood"

_DENORMALIZED_CLIENT_COLUMNS: dict[str, str] = {
    "client_name": "client_name",
    "client_national_id": "client_national_id",
    "client_phone": "client_phone",
    "client_birth_date": "client_birth_date",
}


@register_assembler
class LaboratoryAssembler(RecordAssembler):
    domain = Domain.LABORATORIES
    model = LaboratoryRecord
    field_aliases = LABORATORY_FIELD_ALIASES
    tracks_request = False
    template_fields = (
        "serial_no",
        "date",
        "sample_code",
        "client_name",
        "client_national_id",
        "client_birth_date",
        "client_phone",
        "holding_code",
        "farm_location",
        "longitude",
        "latitude",
        *(f"{species}_count" for species in SPECIES),
        "other_species",
        "collector",
        "sample_type",
        "sample_number",
        "positive_cases",
        "negative_cases",
        "test_results",
        "remarks",
    )

    def resolve_serial(self, row: Row) -> str:
        """
        Digit-only serials lose their leading zeros; any other supplied serial
        is kept as written.
        """
        supplied = self.text(row, "serial_no")
        if supplied.isdecimal():
            return str(int(supplied))
        return supplied or self.generate_serial()

    def build_attributes(self, row: Row, *, client: Client, dates: VisitDates) -> dict[str, Any]:
        species_counts: dict[str, Any] = {
            species: self.count(row, f"{species}_count") for species in SPECIES
        }
        species_counts["other"] = self.text(row, "other_species")
        return {
            "sample_code": self.text(row, "sample_code") or self.generate_serial(),
            "farm_location": self.text(row, "farm_location"),
            "collector": self.text(row, "collector"),
            "sample_type": self.sample_type(row),
            "sample_number": self.text(row, "sample_number"),
            "positive_cases": self.count(row, "positive_cases"),
            "negative_cases": self.count(row, "negative_cases"),
            "species_counts": species_counts,
            "test_results": self.test_results(row),
            "client_name": client.name,
            "client_national_id": client.national_id,
            "client_phone": client.phone,
            "client_birth_date": client.birth_date,
        }

    def sample_type(self, row: Row) -> str:
        raw = self.text(row, "sample_type")
        return self._enums[SAMPLE_TYPE].normalize(raw, raw) or DEFAULT_SAMPLE_TYPE

    def test_results(self, row: Row) -> list[dict[str, Any]]:
        cell = self.value(row, "test_results")
        entries = parse_json_list(cell)
        if entries is None:
            text = self.text(row, "test_results")
            return [{"result": text}] if text else []
        return [entry if isinstance(entry, dict) else {"result": str(entry)} for entry in entries]

    def export_value(self, record: Any, attribute: str) -> Any:
        if attribute in _DENORMALIZED_CLIENT_COLUMNS:
            return getattr(record, _DENORMALIZED_CLIENT_COLUMNS[attribute])
        if attribute == "other_species":
            return (record.species_counts or {}).get("other", "")
        if attribute == "test_results":
            return json.dumps(record.test_results or [], ensure_ascii=False)
        if attribute.endswith("_count") and attribute.partition("_")[0] in SPECIES:
            return species_value(record.species_counts, attribute)
        return super().export_value(record, attribute)
