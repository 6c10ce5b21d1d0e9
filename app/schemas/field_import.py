"""
app/schemas/field_import.py

Request/response schemas for field-visit import and record listing.

Responses serialize with camelCase keys, which is what existing import
widgets and dashboards read.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ImportRowErrorResponse(_CamelModel):
    """
    One failed row: 1-based position, failure category, message and the raw row.
    """

    row_index: int = Field(..., ge=1)
    error: str
    category: str
    data: dict[str, Any] | None = None


class ImportBatchResponse(_CamelModel):
    """
    Batch import summary. ``success`` is false whenever any row failed.
    """

    success: bool
    message: str
    inserted_count: int = Field(..., ge=0)
    total_rows: int = Field(..., ge=0)
    success_rows: int = Field(..., ge=0)
    error_rows: int = Field(..., ge=0)
    errors: list[ImportRowErrorResponse] = Field(default_factory=list)
    batch_id: str
    table_type: str
    source: str


class PaginationResponse(_CamelModel):
    page: int = Field(..., ge=1)
    limit: int = Field(..., ge=1)
    total: int = Field(..., ge=0)
    pages: int = Field(..., ge=0)


class FieldRecordListResponse(_CamelModel):
    """
    One page of stored records for a domain.
    """

    success: bool = True
    data: list[dict[str, Any]] = Field(default_factory=list)
    pagination: PaginationResponse
