"""
app/api/routers/field_records.py

Filtered listing of stored field-visit records.

GET /records/{domain}?supervisor=..&search=..&startDate=..&endDate=..&page=..&limit=..

Categorical filters take comma-separated values; a ``!`` prefix excludes a
value (``herdHealth=!Sick``). Any casing or separator style matches.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from app.api.dependencies import get_domain
from app.schemas.field_import import FieldRecordListResponse, PaginationResponse
from app.services.field_record_service import FieldRecordService, get_field_record_service
from db.session import get_db
from intake.domains import Domain

router = APIRouter(prefix="/records", tags=["records"])


@router.get("/{domain}", response_model=FieldRecordListResponse, response_model_by_alias=True)
def list_records(
    request: Request,
    domain: Domain = Depends(get_domain),
    db: Session = Depends(get_db),
    service: FieldRecordService = Depends(get_field_record_service),
) -> FieldRecordListResponse:
    params = {key: ",".join(request.query_params.getlist(key)) for key in request.query_params.keys()}
    page = service.list_records(db=db, domain=domain, params=params)
    return FieldRecordListResponse(
        data=page.records,
        pagination=PaginationResponse(
            page=page.pagination.page,
            limit=page.pagination.limit,
            total=page.total,
            pages=page.pages,
        ),
    )
