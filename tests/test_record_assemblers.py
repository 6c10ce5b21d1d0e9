"""
tests/test_record_assemblers.py

Per-domain row assembly: attribute building, defaults, failure categories
and the template/export column contract.
"""

from __future__ import annotations

import re
from datetime import date
from typing import Any

import pytest
from sqlalchemy.orm import Session

from intake.assemblers import (
    EquineHealthAssembler,
    LaboratoryAssembler,
    MobileClinicAssembler,
    ParasiteControlAssembler,
    RecordAssembler,
    VaccinationAssembler,
    get_assembler_class,
    register_assembler,
    registered_domains,
)
from intake.dates import DateNormalizer
from intake.domains import Domain
from intake.entity_resolver import UNSPECIFIED
from intake.outcomes import RowFailureCategory, RowProcessingError

TODAY = date(2025, 3, 14)

OWNER: dict[str, Any] = {"Name": "Ali", "ID": "1234567890", "Phone": "0501234567"}


def _build(cls: type[RecordAssembler], session: Session, clock, rng) -> RecordAssembler:
    return cls(
        session,
        date_normalizer=DateNormalizer(today=lambda: TODAY),
        clock=clock,
        rng=rng,
    )


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


class TestRegistry:
    def test_every_domain_has_an_assembler(self) -> None:
        assert set(registered_domains()) == set(Domain)
        assert get_assembler_class(Domain.LABORATORIES) is LaboratoryAssembler

    def test_duplicate_registration_is_rejected(self) -> None:
        with pytest.raises(ValueError):

            @register_assembler
            class DuplicateAssembler(VaccinationAssembler):
                domain = Domain.VACCINATION


# ---------------------------------------------------------------------------
# Vaccination
# ---------------------------------------------------------------------------


class TestVaccinationAssembler:
    def test_builds_record_with_counts_enums_and_request(self, session: Session, clock, rng) -> None:
        assembler = _build(VaccinationAssembler, session, clock, rng)
        row = {
            **OWNER,
            "Serial No": "V001",
            "Date": "2024-01-10",
            "Sheep": "78",
            "sheepFemale": 40,
            "Vaccinated Camels": "12 head",
            "Category": "urgent",
            "Labours": "avaialable",
            "Request Date": "2024-01-05",
            "Request Fulfilling Date": "2024-01-01",
            "N": "24.5",
            "E": "46.7",
            "Extra Column": "kept",
        }

        record = assembler.assemble(row, "u1", 1)

        assert record.serial_no == "V001"
        assert record.date == date(2024, 1, 10)
        assert record.herd_counts["sheep"] == {"total": 78, "young": 0, "female": 40, "vaccinated": 0}
        assert record.herd_counts["camel"]["vaccinated"] == 12
        assert record.vaccine_category == "Emergency"
        assert record.labours == "Available"
        assert record.herd_health == "Healthy"
        assert record.reachable_location == "Easy"
        assert record.request == {
            "date": "2024-01-05",
            "situation": "Ongoing",
            "fulfilling_date": "2024-01-05",
        }
        assert record.request_situation == "Ongoing"
        assert record.coordinates == {"latitude": 24.5, "longitude": 46.7}
        assert record.custom_import_data["unmapped"] == {"Extra Column": "kept"}
        assert record.custom_import_data["original_data"]["Sheep"] == "78"
        assert record.client.name == "Ali"
        assert record.created_by == "u1"

    def test_missing_date_and_serial_get_defaults(self, session: Session, clock, rng) -> None:
        record = _build(VaccinationAssembler, session, clock, rng).assemble(dict(OWNER), None, 1)

        assert record.date == TODAY
        assert re.fullmatch(r"VAC-\d{8}-[0-9a-z]{4}", record.serial_no)
        assert record.request["date"] == TODAY.isoformat()

    def test_invalid_counts_fall_back_to_zero(self, session: Session, clock, rng) -> None:
        record = _build(VaccinationAssembler, session, clock, rng).assemble(
            {**OWNER, "Sheep": "many"}, None, 1
        )

        assert record.herd_counts["sheep"]["total"] == 0

    def test_negative_count_is_a_record_failure(self, session: Session, clock, rng) -> None:
        assembler = _build(VaccinationAssembler, session, clock, rng)

        with pytest.raises(RowProcessingError) as excinfo:
            assembler.assemble({**OWNER, "sheepTotal": "-3"}, None, 4)

        assert excinfo.value.category == RowFailureCategory.RECORD
        assert excinfo.value.row_index == 4
        assert "cannot be negative" in excinfo.value.message

    def test_template_headers_use_preferred_aliases(self, session: Session, clock, rng) -> None:
        headers = _build(VaccinationAssembler, session, clock, rng).template_headers()

        assert headers[:6] == ["Serial No", "Date", "Name", "ID", "Birth Date", "Phone"]
        assert "Sheep" in headers
        assert "Vaccinated Sheep" in headers
        assert headers[-1] == "Remarks"

    def test_exported_row_reimports_to_same_values(self, session: Session, clock, rng) -> None:
        assembler = _build(VaccinationAssembler, session, clock, rng)
        original = assembler.assemble(
            {**OWNER, "Serial No": "V7", "Date": "2024-02-01", "Sheep": 9, "Herd Health": "sick"},
            None,
            1,
        )

        exported = dict(zip(assembler.template_headers(), assembler.export_row(original)))
        copy = assembler.assemble(exported, None, 2)

        assert copy.serial_no == "V7"
        assert copy.date == date(2024, 2, 1)
        assert copy.client_id == original.client_id
        assert copy.herd_counts["sheep"]["total"] == 9
        assert copy.herd_health == "Sick"


# ---------------------------------------------------------------------------
# Parasite control
# ---------------------------------------------------------------------------


class TestParasiteControlAssembler:
    def test_insecticide_document_and_volume_fallback(self, session: Session, clock, rng) -> None:
        record = _build(ParasiteControlAssembler, session, clock, rng).assemble(
            {
                **OWNER,
                "Insecticide Used": "Cypermethrin",
                "Type": "Pour-on",
                "Volume (ml)": "250",
                "Status": "not-sprayed",
                "Herd Health Status": "sporadic",
                "Complying to instructions": "partial",
                "Total Sheep": "30",
                "Treated Sheep": "28",
            },
            None,
            1,
        )

        assert record.insecticide == {
            "type": "Cypermethrin",
            "method": "Pour-on",
            "volume_ml": 250,
            "status": "Not Sprayed",
            "category": "",
        }
        assert record.insecticide_status == "Not Sprayed"
        assert record.parasite_control_volume == 250
        assert record.herd_health_status == "Sporadic Cases"
        assert record.complying_to_instructions == "Partially Comply"
        assert record.herd_counts["sheep"]["total"] == 30
        assert record.herd_counts["sheep"]["treated"] == 28

    def test_defaults(self, session: Session, clock, rng) -> None:
        record = _build(ParasiteControlAssembler, session, clock, rng).assemble(dict(OWNER), None, 1)

        assert record.insecticide_status == "Sprayed"
        assert record.herd_health_status == "Healthy"
        assert record.complying_to_instructions == "Comply"
        assert record.serial_no.startswith("PAR-")


# ---------------------------------------------------------------------------
# Mobile clinics
# ---------------------------------------------------------------------------


class TestMobileClinicAssembler:
    def test_comma_separated_medications_share_row_route(self, session: Session, clock, rng) -> None:
        record = _build(MobileClinicAssembler, session, clock, rng).assemble(
            {
                **OWNER,
                "Medications Used": "Ivermectin, Oxytetracycline",
                "Administration Route": "im",
                "Intervention Category": "urgent",
                "Follow Up Required": "نعم",
                "Follow Up Date": "20/03/2024",
                "Goats": "7",
            },
            None,
            1,
        )

        assert [item["name"] for item in record.medications_used] == ["Ivermectin", "Oxytetracycline"]
        assert {item["route"] for item in record.medications_used} == {"Intramuscular"}
        assert record.intervention_category == "Emergency"
        assert record.follow_up_required is True
        assert record.follow_up_date == date(2024, 3, 20)
        assert record.animal_counts["goats"] == 7

    def test_json_medications(self, session: Session, clock, rng) -> None:
        record = _build(MobileClinicAssembler, session, clock, rng).assemble(
            {
                **OWNER,
                "Medications Used": '[{"name": "Penicillin", "dosage": "5ml", "quantity": "2", "route": "iv"}, {"dosage": "x"}]',
            },
            None,
            1,
        )

        assert record.medications_used == [
            {"name": "Penicillin", "dosage": "5ml", "quantity": 2, "route": "Intravenous"}
        ]
        assert record.intervention_category == "Routine"
        assert record.follow_up_required is False


# ---------------------------------------------------------------------------
# Equine health
# ---------------------------------------------------------------------------


class TestEquineHealthAssembler:
    def test_horse_details_are_zipped_by_position(self, session: Session, clock, rng) -> None:
        record = _build(EquineHealthAssembler, session, clock, rng).assemble(
            {
                **OWNER,
                "Village": "Qassim",
                "Horse Count": "2",
                "Breed": "Arabian, Barb",
                "Age": "5, 7",
                "Gender": "mare, stallion",
                "Color": "Bay",
                "Intervention Category": "emergency, scan, surgery",
            },
            None,
            1,
        )

        assert record.horse_count == 2
        assert record.horse_details == [
            {"breed": "Arabian", "age": 5, "gender": "Female", "color": "Bay", "health_status": "Healthy"},
            {"breed": "Barb", "age": 7, "gender": "Male", "color": UNSPECIFIED, "health_status": "Healthy"},
        ]
        assert record.intervention_categories == ["Surgical Operation", "Ultrasonography"]
        assert record.intervention_category == "Surgical Operation"
        assert record.farm_location == "Qassim"

    def test_defaults(self, session: Session, clock, rng) -> None:
        record = _build(EquineHealthAssembler, session, clock, rng).assemble(
            {**OWNER, "Medications Used": "Flunixin"},
            None,
            1,
        )

        assert record.intervention_category == "Clinical Examination"
        assert record.diagnosis == UNSPECIFIED
        assert record.treatment == UNSPECIFIED
        assert record.horse_count == 1
        assert record.medications_used[0]["route"] == "Injection"


# ---------------------------------------------------------------------------
# Laboratories
# ---------------------------------------------------------------------------


class TestLaboratoryAssembler:
    def test_numeric_serial_and_denormalized_client(self, session: Session, clock, rng) -> None:
        record = _build(LaboratoryAssembler, session, clock, rng).assemble(
            {
                **OWNER,
                "Serial No": "0042",
                "Sample Code": "S-1",
                "Sample Type": "serum",
                "Positive Cases": "3",
                "Test Results": "negative",
                "Camel": "4",
                "Other (Species)": "Donkeys",
            },
            None,
            1,
        )

        assert record.serial_no == "42"
        assert record.sample_code == "S-1"
        assert record.sample_type == "Serum"
        assert record.positive_cases == 3
        assert record.test_results == [{"result": "negative"}]
        assert record.species_counts["camel"] == 4
        assert record.species_counts["other"] == "Donkeys"
        assert record.client_name == "Ali"
        assert record.client_national_id == "1234567890"
        assert not hasattr(record, "request_situation")

    def test_fallbacks(self, session: Session, clock, rng) -> None:
        record = _build(LaboratoryAssembler, session, clock, rng).assemble(
            {
                **OWNER,
                "Serial No": "",
                "Sample Type": "hair",
                "Test Results": '[{"test": "Brucella", "result": "negative"}, "pending"]',
            },
            None,
            1,
        )

        assert re.fullmatch(r"LAB-\d{8}-[0-9a-z]{4}", record.serial_no)
        assert record.sample_type == "hair"
        assert re.fullmatch(r"LAB-\d{8}-[0-9a-z]{4}", record.sample_code)
        assert record.test_results == [
            {"test": "Brucella", "result": "negative"},
            {"result": "pending"},
        ]

    def test_non_numeric_serial_is_kept(self, session: Session, clock, rng) -> None:
        record = _build(LaboratoryAssembler, session, clock, rng).assemble(
            {"Serial No": "LAB-A17", "Name": "Ali"},
            None,
            1,
        )

        assert record.serial_no == "LAB-A17"

    def test_lowercase_code_column_is_only_the_sample_code(self, session: Session, clock, rng) -> None:
        record = _build(LaboratoryAssembler, session, clock, rng).assemble(
            {**OWNER, "code": "S-9"},
            None,
            1,
        )

        assert record.sample_code == "S-9"
        assert record.holding_code is None
