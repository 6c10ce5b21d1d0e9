"""
app/api/routers/field_import.py

Field-visit import HTTP endpoints.

POST /imports/{domain}            JSON rows (bare array or {data|rows|validData: [...]})
POST /imports/{domain}/csv        multipart CSV upload
GET  /imports/{domain}/template   header-only CSV in canonical column order
GET  /imports/{domain}/export     stored records as CSV in the same order

Row failures never fail the request; they are reported in ``errors`` and
flip ``success`` to false.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, Response, UploadFile, status
from sqlalchemy.orm import Session

from app.api.dependencies import get_creator_id, get_csv_upload, get_domain
from app.schemas.field_import import ImportBatchResponse, ImportRowErrorResponse
from app.services.csv_exchange_service import CSVExchangeService, get_csv_exchange_service
from app.services.field_import_service import (
    CSVImportError,
    FieldImportService,
    ImportBatchResult,
    ImportBatchTooLargeError,
    ImportPayloadError,
    get_field_import_service,
)
from db.session import get_db
from intake.domains import Domain

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/imports", tags=["imports"])


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _to_response(result: ImportBatchResult) -> ImportBatchResponse:
    report = result.report
    return ImportBatchResponse(
        success=report.succeeded,
        message=result.message,
        inserted_count=report.success_count,
        total_rows=report.total_rows,
        success_rows=report.success_count,
        error_rows=report.failure_count,
        errors=[ImportRowErrorResponse(**entry) for entry in result.error_entries()],
        batch_id=result.batch_id,
        table_type=result.domain.value,
        source=result.source,
    )


def _csv_response(content: str, filename: str) -> Response:
    return Response(
        content=content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@router.post("/{domain}", response_model=ImportBatchResponse, response_model_by_alias=True)
def import_rows(
    payload: Any = Body(...),
    domain: Domain = Depends(get_domain),
    creator_id: str | None = Depends(get_creator_id),
    db: Session = Depends(get_db),
    service: FieldImportService = Depends(get_field_import_service),
) -> ImportBatchResponse:
    """
    Import one webhook batch of rows for ``domain``.
    """

    try:
        result = service.import_payload(db=db, domain=domain, payload=payload, creator_id=creator_id)
    except ImportPayloadError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except ImportBatchTooLargeError as exc:
        raise HTTPException(status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, detail=str(exc)) from exc

    return _to_response(result)


@router.post("/{domain}/csv", response_model=ImportBatchResponse, response_model_by_alias=True)
def import_csv(
    file: UploadFile = Depends(get_csv_upload),
    domain: Domain = Depends(get_domain),
    creator_id: str | None = Depends(get_creator_id),
    db: Session = Depends(get_db),
    service: FieldImportService = Depends(get_field_import_service),
) -> ImportBatchResponse:
    """
    Import one CSV file for ``domain``.
    """

    try:
        result = service.import_csv(db=db, domain=domain, upload_file=file, creator_id=creator_id)
    except CSVImportError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except ImportBatchTooLargeError as exc:
        raise HTTPException(status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, detail=str(exc)) from exc
    finally:
        file.file.close()

    return _to_response(result)


@router.get("/{domain}/template")
def download_template(
    domain: Domain = Depends(get_domain),
    db: Session = Depends(get_db),
    service: CSVExchangeService = Depends(get_csv_exchange_service),
) -> Response:
    return _csv_response(service.template_csv(db=db, domain=domain), f"{domain.value}_template.csv")


@router.get("/{domain}/export")
def export_records(
    domain: Domain = Depends(get_domain),
    db: Session = Depends(get_db),
    service: CSVExchangeService = Depends(get_csv_exchange_service),
) -> Response:
    content = service.export_csv(db=db, domain=domain)
    logger.info("CSV export domain=%r bytes=%d", domain.value, len(content))
    return _csv_response(content, f"{domain.value}_export.csv")
