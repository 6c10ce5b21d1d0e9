"""
tests/test_filter_builder.py

FilterBuilder value expansion, pagination and sort parsing, and the
per-domain predicates executed against an in-memory database.
"""

from __future__ import annotations

from datetime import date

import pytest
from sqlalchemy.orm import Session

from app.services.field_record_service import FieldRecordService
from intake.dates import DateNormalizer
from intake.domains import Domain
from intake.filters import FilterBuilder, MultiValueFilter
from intake.orchestrator import ImportOrchestrator

TODAY = date(2025, 3, 14)


@pytest.fixture()
def builder() -> FilterBuilder:
    return FilterBuilder(date_normalizer=DateNormalizer(today=lambda: TODAY))


def _import(session: Session, domain: Domain, rows: list[dict], clock) -> None:
    report = ImportOrchestrator(session, domain, clock=clock).run(rows, "tester")
    assert report.failure_count == 0, report.errors


def _serials(session: Session, domain: Domain, params: dict) -> list[str]:
    page = FieldRecordService().list_records(db=session, domain=domain, params=params)
    return sorted(record["serial_no"] for record in page.records)


# ---------------------------------------------------------------------------
# Value expansion
# ---------------------------------------------------------------------------


class TestNormalizeFilterValues:
    def test_hyphenated_value_expands_to_casing_variants(self, builder: FilterBuilder) -> None:
        assert builder.normalize_filter_values(["not-sprayed"]) == {
            "not-sprayed",
            "Not-Sprayed",
            "not sprayed",
            "Not Sprayed",
            "not_sprayed",
            "Not_Sprayed",
        }

    def test_underscored_value_expands_to_casing_variants(self, builder: FilterBuilder) -> None:
        assert builder.normalize_filter_values(["sporadic_cases"]) == {
            "sporadic_cases",
            "Sporadic_Cases",
            "sporadic cases",
            "Sporadic Cases",
            "sporadic-cases",
            "Sporadic-Cases",
        }

    def test_spaced_values_match_underscore_storage(self, builder: FilterBuilder) -> None:
        variants = builder.normalize_filter_values(["Not Sprayed", "not-sprayed"])

        assert "Not_Sprayed" in variants
        assert "not_sprayed" in variants
        assert "Not-Sprayed" in variants

    def test_plain_value_gets_title_and_lower_case(self, builder: FilterBuilder) -> None:
        assert builder.normalize_filter_values(["HEALTHY"]) == {"HEALTHY", "Healthy", "healthy"}

    def test_blank_values_are_dropped(self, builder: FilterBuilder) -> None:
        assert builder.normalize_filter_values(["", "  ", None]) == set()


class TestMultiValueFilter:
    def test_comma_string_with_exclusion(self, builder: FilterBuilder) -> None:
        result = builder.build_multi_value_filter("healthy, !sick")

        assert result is not None
        assert "Healthy" in result.included
        assert "Sick" in result.excluded
        assert "Sick" not in result.included

    def test_list_input(self, builder: FilterBuilder) -> None:
        result = builder.build_multi_value_filter(["Easy", "", "!Difficult"])

        assert result == MultiValueFilter(
            included=frozenset({"Easy", "easy"}),
            excluded=frozenset({"Difficult", "difficult"}),
        )

    @pytest.mark.parametrize("value", [None, "", " , ", [], "!"])
    def test_empty_input_is_none(self, builder: FilterBuilder, value: object) -> None:
        assert builder.build_multi_value_filter(value) is None


class TestPaginationAndSort:
    def test_defaults(self, builder: FilterBuilder) -> None:
        pagination = builder.build_pagination()

        assert (pagination.limit, pagination.page, pagination.offset) == (30, 1, 0)

    def test_limit_is_capped_and_page_floored(self, builder: FilterBuilder) -> None:
        pagination = builder.build_pagination("5000", "0")

        assert (pagination.limit, pagination.page) == (1000, 1)

    def test_offset_from_page(self, builder: FilterBuilder) -> None:
        assert builder.build_pagination("20", "3").offset == 40

    def test_garbage_values_use_defaults(self, builder: FilterBuilder) -> None:
        pagination = builder.build_pagination("abc", "-2")

        assert (pagination.limit, pagination.page) == (30, 1)

    def test_unknown_sort_column_falls_back_to_date(self, builder: FilterBuilder) -> None:
        from db.models.vaccination_record import VaccinationRecord

        clauses = builder.build_sort(VaccinationRecord, "dropTable", "asc")

        assert str(clauses[0]).endswith("date ASC")

    def test_camel_case_sort_column(self, builder: FilterBuilder) -> None:
        from db.models.vaccination_record import VaccinationRecord

        clauses = builder.build_sort(VaccinationRecord, "serialNo", None)

        assert str(clauses[0]).endswith("serial_no DESC")


def test_bad_date_bounds_are_ignored(builder: FilterBuilder) -> None:
    from db.models.vaccination_record import VaccinationRecord

    assert builder.build_date_filter(VaccinationRecord.date, "not-a-date", None) == []
    assert len(builder.build_date_filter(VaccinationRecord.date, "2024-01-01", "2024-02-01")) == 2


# ---------------------------------------------------------------------------
# Per-domain predicates against stored records
# ---------------------------------------------------------------------------


@pytest.fixture()
def vaccination_records(session: Session, clock) -> None:
    _import(
        session,
        Domain.VACCINATION,
        [
            {
                "Serial No": "V001",
                "Date": "2024-01-10",
                "Name": "Ali",
                "ID": "1111111111",
                "Phone": "0500000001",
                "Supervisor": "Dr. Khalid",
                "Herd Health": "healthy",
            },
            {
                "Serial No": "V002",
                "Date": "2024-02-10",
                "Name": "Sara",
                "ID": "2222222222",
                "Phone": "0500000002",
                "Supervisor": "Omar",
                "Herd Health": "sick",
                "Request Situation": "closed",
            },
            {
                "Serial No": "V003",
                "Date": "2024-03-10",
                "Name": "Hassan",
                "ID": "3333333333",
                "Phone": "0500000003",
                "Supervisor": "khalid",
                "Herd Health": "under treatment",
            },
        ],
        clock,
    )


@pytest.mark.usefixtures("vaccination_records")
class TestVaccinationFilters:
    def test_categorical_filter_matches_any_casing(self, session: Session) -> None:
        assert _serials(session, Domain.VACCINATION, {"herdHealth": "SICK"}) == ["V002"]

    def test_exclusion(self, session: Session) -> None:
        assert _serials(session, Domain.VACCINATION, {"herdHealth": "!sick"}) == ["V001", "V003"]

    def test_separator_variants_match(self, session: Session) -> None:
        assert _serials(session, Domain.VACCINATION, {"herdHealth": "under_treatment"}) == ["V003"]

    def test_supervisor_substring(self, session: Session) -> None:
        assert _serials(session, Domain.VACCINATION, {"supervisor": "KHALID"}) == ["V001", "V003"]

    def test_date_range_is_inclusive(self, session: Session) -> None:
        params = {"startDate": "2024-02-01", "endDate": "2024-03-10"}

        assert _serials(session, Domain.VACCINATION, params) == ["V002", "V003"]

    def test_search_reaches_client_name(self, session: Session) -> None:
        assert _serials(session, Domain.VACCINATION, {"search": "sara"}) == ["V002"]

    def test_request_situation(self, session: Session) -> None:
        assert _serials(session, Domain.VACCINATION, {"request_situation": "closed"}) == ["V002"]
        assert _serials(session, Domain.VACCINATION, {"request_situation": "ongoing"}) == ["V001", "V003"]

    def test_pagination_and_sort(self, session: Session) -> None:
        page = FieldRecordService().list_records(
            db=session,
            domain=Domain.VACCINATION,
            params={"sortBy": "date", "sortOrder": "asc", "limit": "2", "page": "2"},
        )

        assert [record["serial_no"] for record in page.records] == ["V003"]
        assert page.total == 3
        assert page.pages == 2
        assert page.records[0]["date"] == date(2024, 3, 10).isoformat()
        assert page.records[0]["client"]["name"] == "Hassan"


class TestOtherDomainFilters:
    def test_equine_intervention_filter_uses_synonyms(self, session: Session, clock) -> None:
        _import(
            session,
            Domain.EQUINE_HEALTH,
            [
                {"Serial No": "E1", "Name": "A", "ID": "1000000001", "Phone": "0500000011",
                 "Intervention Category": "surgery"},
                {"Serial No": "E2", "Name": "B", "ID": "1000000002", "Phone": "0500000012",
                 "Intervention Category": "routine"},
            ],
            clock,
        )

        assert _serials(session, Domain.EQUINE_HEALTH, {"interventionCategory": "emergency"}) == ["E1"]
        assert _serials(session, Domain.EQUINE_HEALTH, {"interventionCategory": "!emergency"}) == ["E2"]
        assert _serials(session, Domain.EQUINE_HEALTH, {"interventionCategory": "bogus"}) == ["E1", "E2"]

    def test_mobile_clinic_follow_up_flag(self, session: Session, clock) -> None:
        _import(
            session,
            Domain.MOBILE_CLINICS,
            [
                {"Serial No": "M1", "Name": "A", "ID": "1000000003", "Phone": "0500000013",
                 "Follow Up Required": "yes"},
                {"Serial No": "M2", "Name": "B", "ID": "1000000004", "Phone": "0500000014",
                 "Follow Up Required": "no"},
            ],
            clock,
        )

        assert _serials(session, Domain.MOBILE_CLINICS, {"followUpRequired": "true"}) == ["M1"]
        assert _serials(session, Domain.MOBILE_CLINICS, {"followUpRequired": "false"}) == ["M2"]

    def test_parasite_insecticide_document_filters(self, session: Session, clock) -> None:
        _import(
            session,
            Domain.PARASITE_CONTROL,
            [
                {"Serial No": "P1", "Name": "A", "ID": "1000000005", "Phone": "0500000015",
                 "Insecticide Used": "Cypermethrin", "Status": "not sprayed"},
                {"Serial No": "P2", "Name": "B", "ID": "1000000006", "Phone": "0500000016",
                 "Insecticide Used": "Ivermectin", "Status": "sprayed"},
            ],
            clock,
        )

        assert _serials(session, Domain.PARASITE_CONTROL, {"insecticideType": "cypermethrin"}) == ["P1"]
        assert _serials(session, Domain.PARASITE_CONTROL, {"insecticideStatus": "not-sprayed"}) == ["P1"]

    def test_laboratory_collector_and_sample_type(self, session: Session, clock) -> None:
        _import(
            session,
            Domain.LABORATORIES,
            [
                {"Serial No": "1", "Name": "A", "ID": "1000000007", "Phone": "0500000017",
                 "Sample Collector": "Nasser", "Sample Type": "serum"},
                {"Serial No": "2", "Name": "B", "ID": "1000000008", "Phone": "0500000018",
                 "Sample Collector": "Fahad", "Sample Type": "blood"},
            ],
            clock,
        )

        assert _serials(session, Domain.LABORATORIES, {"collector": "nas"}) == ["1"]
        assert _serials(session, Domain.LABORATORIES, {"sampleType": "blood"}) == ["2"]
        assert _serials(session, Domain.LABORATORIES, {"search": "1000000008"}) == ["2"]
