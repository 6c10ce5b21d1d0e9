"""
tests/test_field_import_router.py

HTTP surface: JSON and CSV imports, templates, exports and record listing,
served by the real application with the database swapped for SQLite.
"""

from __future__ import annotations

from collections.abc import Iterator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from app.main import create_app
from app.services.field_import_service import FieldImportService, get_field_import_service
from db.session import get_db

OWNER = {"Name": "Ali", "ID": "1234567890", "Phone": "0501234567"}


@pytest.fixture()
def client(session: Session, clock) -> Iterator[TestClient]:
    application = create_app()

    def _override_db() -> Iterator[Session]:
        yield session

    application.dependency_overrides[get_db] = _override_db
    application.dependency_overrides[get_field_import_service] = lambda: FieldImportService(
        max_rows=3,
        log_row_errors=False,
        max_reported_errors=1,
        default_creator_id="system",
        client_default_status="active",
        clock=clock,
    )
    # No context manager: the lifespan hook would probe the real database.
    yield TestClient(application)
    application.dependency_overrides.clear()


def test_health(client: TestClient) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


class TestJsonImport:
    def test_bare_array(self, client: TestClient) -> None:
        response = client.post(
            "/imports/vaccination",
            json=[{**OWNER, "Serial No": "V001", "Date": "2024-01-10", "sheepTotal": 78}],
            headers={"X-Creator-Id": "u1"},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["insertedCount"] == 1
        assert body["totalRows"] == 1
        assert body["successRows"] == 1
        assert body["errorRows"] == 0
        assert body["errors"] == []
        assert body["tableType"] == "vaccination"
        assert body["source"] == "dromo-webhook"
        assert body["batchId"].startswith("dromo_1741944413")
        assert body["batchId"].endswith("_vaccination")
        assert body["message"] == "تم استيراد 1 سجل بنجاح"

    @pytest.mark.parametrize("key", ["data", "rows", "validData"])
    def test_wrapped_rows(self, client: TestClient, key: str) -> None:
        response = client.post("/imports/mobile_clinics", json={key: [{**OWNER, "Serial No": "M1"}]})

        assert response.status_code == 200
        assert response.json()["tableType"] == "mobile-clinics"

    def test_row_failures_are_reported_not_raised(self, client: TestClient) -> None:
        response = client.post(
            "/imports/vaccination",
            json=[
                {**OWNER, "Serial No": "V1", "sheepTotal": "-3"},
                "junk",
                {**OWNER, "Serial No": "V3"},
            ],
        )

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is False
        assert (body["totalRows"], body["successRows"], body["errorRows"]) == (3, 1, 2)
        # The response carries at most max_reported_errors entries.
        assert len(body["errors"]) == 1
        assert body["errors"][0]["rowIndex"] == 1
        assert body["errors"][0]["category"] == "record"
        assert body["errors"][0]["data"]["Serial No"] == "V1"

    def test_payload_without_rows_is_rejected(self, client: TestClient) -> None:
        response = client.post("/imports/vaccination", json={"records": []})

        assert response.status_code == 400

    def test_batch_over_the_limit_is_rejected(self, client: TestClient) -> None:
        response = client.post("/imports/vaccination", json=[dict(OWNER)] * 4)

        assert response.status_code == 413

    def test_unknown_domain(self, client: TestClient) -> None:
        response = client.post("/imports/dentistry", json=[])

        assert response.status_code == 404


class TestCsvImport:
    def test_upload(self, client: TestClient) -> None:
        content = "\ufeffSerial No,Date,Name,ID,Phone,Sample Type\n1,15/01/2024,Ali,1234567890,0501234567,serum\n,,,,,\n"

        response = client.post(
            "/imports/laboratories/csv",
            files={"file": ("samples.csv", content.encode("utf-8"), "text/csv")},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["totalRows"] == 1
        assert body["success"] is True
        assert body["source"] == "csv-upload"
        assert body["batchId"].startswith("csv_")

    def test_non_csv_file_is_rejected(self, client: TestClient) -> None:
        response = client.post(
            "/imports/laboratories/csv",
            files={"file": ("samples.pdf", b"%PDF", "application/pdf")},
        )

        assert response.status_code == 400

    def test_non_utf8_file_is_rejected(self, client: TestClient) -> None:
        response = client.post(
            "/imports/laboratories/csv",
            files={"file": ("samples.csv", "Name\nعلي\n".encode("cp1256"), "text/csv")},
        )

        assert response.status_code == 400


class TestCsvDownloads:
    def test_template(self, client: TestClient) -> None:
        response = client.get("/imports/equine-health/template")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        assert 'filename="equine-health_template.csv"' in response.headers["content-disposition"]
        assert response.text.splitlines()[0].startswith("Serial No,Date,Name,ID")

    def test_export_after_import(self, client: TestClient) -> None:
        client.post("/imports/equine-health", json=[{**OWNER, "Serial No": "E1", "Breed": "Arabian"}])

        response = client.get("/imports/equine-health/export")

        lines = response.text.splitlines()
        assert len(lines) == 2
        assert lines[1].startswith("E1,")
        assert "Arabian" in lines[1]


class TestRecordListing:
    def test_filters_and_pagination(self, client: TestClient) -> None:
        client.post(
            "/imports/vaccination",
            json=[
                {**OWNER, "Serial No": "V1", "Date": "2024-01-01", "Herd Health": "sick"},
                {**OWNER, "Serial No": "V2", "Date": "2024-01-02", "Herd Health": "healthy"},
                {**OWNER, "Serial No": "V3", "Date": "2024-01-03", "Herd Health": "sick"},
            ],
        )

        response = client.get("/records/vaccination", params={"herdHealth": "Sick", "limit": 1})

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["pagination"] == {"page": 1, "limit": 1, "total": 2, "pages": 2}
        assert [record["serial_no"] for record in body["data"]] == ["V3"]
        assert body["data"][0]["client"]["national_id"] == "1234567890"

    def test_repeated_query_params_are_combined(self, client: TestClient) -> None:
        client.post(
            "/imports/vaccination",
            json=[
                {**OWNER, "Serial No": "V1", "Herd Health": "sick"},
                {**OWNER, "Serial No": "V2", "Herd Health": "healthy"},
                {**OWNER, "Serial No": "V3", "Herd Health": "under treatment"},
            ],
        )

        response = client.get("/records/vaccination?herdHealth=sick&herdHealth=healthy")

        assert sorted(record["serial_no"] for record in response.json()["data"]) == ["V1", "V2"]
