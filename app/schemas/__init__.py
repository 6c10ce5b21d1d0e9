"""
app/schemas package marker.
"""

from app.schemas.field_import import (
    FieldRecordListResponse,
    ImportBatchResponse,
    ImportRowErrorResponse,
    PaginationResponse,
)

__all__ = [
    "FieldRecordListResponse",
    "ImportBatchResponse",
    "ImportRowErrorResponse",
    "PaginationResponse",
]
