"""
db/models/field_visit_base.py

Columns and validation shared by every field-visit record table.
"""

from __future__ import annotations

import uuid
import datetime as dt
from typing import TYPE_CHECKING, Any

from sqlalchemy import Date, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import Mapped, declared_attr, mapped_column, relationship, validates

from db.base import CreatorMixin, JSONDocument, TimestampMixin

if TYPE_CHECKING:
    from db.models.client import Client


def _find_negative_count(value: Any, path: str) -> str | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return path if value < 0 else None
    if isinstance(value, dict):
        for key, child in value.items():
            found = _find_negative_count(child, f"{path}.{key}")
            if found:
                return found
    return None


def ensure_non_negative_counts(field_name: str, value: Any) -> Any:
    """Reject count documents (flat or nested per species) holding negative numbers."""
    offending = _find_negative_count(value, field_name)
    if offending:
        raise ValueError(f"{offending} cannot be negative.")
    return value


class FieldVisitMixin(TimestampMixin, CreatorMixin):
    """
    Identity, visit date, owner reference and import provenance.
    """

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    serial_no: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        index=True,
        comment="Source serial number, or PREFIX-timestamp-suffix when absent",
    )
    date: Mapped[dt.date] = mapped_column(Date, nullable=False, index=True)
    client_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("clients.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    supervisor: Mapped[str | None] = mapped_column(String(255), nullable=True)
    vehicle_no: Mapped[str | None] = mapped_column(String(64), nullable=True)
    holding_code: Mapped[str | None] = mapped_column(String(64), nullable=True)
    coordinates: Mapped[dict[str, float] | None] = mapped_column(JSONDocument, nullable=True)
    remarks: Mapped[str] = mapped_column(Text, nullable=False, default="")
    custom_import_data: Mapped[dict[str, Any] | None] = mapped_column(
        JSONDocument,
        nullable=True,
        comment="Original source row plus columns with no canonical attribute",
    )

    @declared_attr
    def client(cls) -> Mapped["Client"]:
        return relationship("Client", lazy="joined")

    @validates("serial_no")
    def _validate_serial_no(self, key: str, value: str) -> str:
        if not value or not str(value).strip():
            raise ValueError("serial_no is required.")
        return str(value).strip()


class RequestTrackingMixin:
    """
    Service request lifecycle: stored as a document, with the situation
    duplicated into a flat column so it stays filterable.
    """

    request: Mapped[dict[str, Any] | None] = mapped_column(JSONDocument, nullable=True)
    request_situation: Mapped[str | None] = mapped_column(String(32), nullable=True, index=True)
