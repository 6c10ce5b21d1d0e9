"""
intake/assemblers/base.py

Abstract record assembler and the Domain-keyed assembler registry.

An assembler turns one raw row into one persisted record. The shared steps
(client, dates, serial, coordinates, request, remarks, provenance) live
here; each domain contributes its own attribute set via build_attributes().
"""

from __future__ import annotations

import random
import string
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any, Callable, ClassVar, Mapping

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from db.base import Base
from db.models.client import Client
from intake.aliases import (
    CLIENT_FIELD_ALIASES,
    SHARED_FIELD_ALIASES,
    FieldAliasSet,
    build_alias_table,
    preferred_header,
)
from intake.coercion import parse_float, parse_int, parse_json_list, split_csv_cell
from intake.dates import DateNormalizer
from intake.domains import Domain
from intake.entity_resolver import ClientResolver
from intake.enums import (
    ADMINISTRATION_ROUTE,
    FOLLOW_UP_REQUIRED,
    REQUEST_SITUATION,
    EnumNormalizer,
    build_enum_normalizers,
)
from intake.field_resolver import FieldResolver, Row, is_blank
from intake.outcomes import RowFailureCategory, RowProcessingError
from intake.repository import ClientRepository, FieldRecordRepository

DEFAULT_REQUEST_SITUATION = "Ongoing"
_SERIAL_SUFFIX_ALPHABET = string.digits + string.ascii_lowercase


@dataclass(frozen=True)
class VisitDates:
    visit: date
    request: date
    fulfilling: date
    follow_up: date | None


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

_ASSEMBLERS: dict[Domain, type["RecordAssembler"]] = {}


def register_assembler(cls: type["RecordAssembler"]) -> type["RecordAssembler"]:
    """Class decorator binding an assembler to its ``domain``."""

    if cls.domain in _ASSEMBLERS:
        raise ValueError(f"An assembler is already registered for {cls.domain.value!r}.")
    _ASSEMBLERS[cls.domain] = cls
    return cls


def get_assembler_class(domain: Domain) -> type["RecordAssembler"]:
    try:
        return _ASSEMBLERS[domain]
    except KeyError as exc:
        raise ValueError(f"No assembler registered for {domain.value!r}.") from exc


def registered_domains() -> tuple[Domain, ...]:
    return tuple(_ASSEMBLERS)


# ---------------------------------------------------------------------------
# Base assembler
# ---------------------------------------------------------------------------


class RecordAssembler(ABC):
    """
    Builds and persists one canonical record per source row.

    Subclasses declare ``domain``, ``model``, their own alias table and the
    canonical column order used for CSV templates and exports.
    """

    domain: ClassVar[Domain]
    model: ClassVar[type[Base]]
    field_aliases: ClassVar[Mapping[str, FieldAliasSet]] = {}
    template_fields: ClassVar[tuple[str, ...]] = ()
    tracks_request: ClassVar[bool] = True

    def __init__(
        self,
        session: Session,
        *,
        field_resolver: FieldResolver | None = None,
        date_normalizer: DateNormalizer | None = None,
        enum_normalizers: Mapping[str, EnumNormalizer] | None = None,
        client_resolver: ClientResolver | None = None,
        aliases: Mapping[str, FieldAliasSet] | None = None,
        clock: Callable[[], datetime] | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self._fields = field_resolver or FieldResolver()
        self._dates = date_normalizer or DateNormalizer()
        self._enums = dict(enum_normalizers or build_enum_normalizers())
        self._aliases = build_alias_table(
            SHARED_FIELD_ALIASES,
            CLIENT_FIELD_ALIASES,
            self.field_aliases,
            aliases or {},
        )
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._rng = rng or random.Random()
        self._records = FieldRecordRepository(session, self.model)
        self._clients = client_resolver or ClientResolver(
            ClientRepository(session),
            field_resolver=self._fields,
            date_normalizer=self._dates,
            clock=self._clock,
            rng=self._rng,
        )
        self._known_headers = {
            alias.strip().lower() for candidates in self._aliases.values() for alias in candidates
        }

    @property
    def aliases(self) -> dict[str, FieldAliasSet]:
        return dict(self._aliases)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def assemble(self, row: Row, creator_id: str | None, row_index: int) -> Base:
        """
        Resolve, build and flush one record.

        Raises:
            RowProcessingError: with category ``client`` when the owner cannot
                be resolved, ``record`` when the row violates model validation,
                ``persistence`` when the flush fails.
        """
        try:
            client = self._clients.resolve(row, creator_id)
        except (SQLAlchemyError, ValueError) as exc:
            raise RowProcessingError(
                row_index=row_index,
                category=RowFailureCategory.CLIENT,
                message=f"Could not resolve client: {exc}",
                cause=exc,
            ) from exc

        try:
            dates = self.resolve_dates(row)
            attributes = self.common_attributes(row, client=client, dates=dates, creator_id=creator_id)
            attributes.update(self.build_attributes(row, client=client, dates=dates))
            record = self.model(**attributes)
        except (ValueError, TypeError, KeyError) as exc:
            raise RowProcessingError(
                row_index=row_index,
                category=RowFailureCategory.RECORD,
                message=f"Invalid {self.domain.value} row: {exc}",
                cause=exc,
            ) from exc

        try:
            return self._records.add(record)
        except SQLAlchemyError as exc:
            raise RowProcessingError(
                row_index=row_index,
                category=RowFailureCategory.PERSISTENCE,
                message=f"Could not store {self.domain.value} record: {exc.__class__.__name__}",
                cause=exc,
            ) from exc

    @abstractmethod
    def build_attributes(self, row: Row, *, client: Client, dates: VisitDates) -> dict[str, Any]:
        """Domain-specific model attributes for one row."""

    def template_headers(self) -> list[str]:
        return [preferred_header(self._aliases, attribute) for attribute in self.template_fields]

    def export_row(self, record: Any) -> list[Any]:
        return [self.export_value(record, attribute) for attribute in self.template_fields]

    def export_value(self, record: Any, attribute: str) -> Any:
        """
        Value of one template column for a stored record; subclasses extend
        this for domain columns and defer to it for the shared ones.
        """

        client = getattr(record, "client", None)
        coordinates = record.coordinates or {}
        request = getattr(record, "request", None) or {}
        shared: dict[str, Callable[[], Any]] = {
            "client_name": lambda: client.name if client else "",
            "client_national_id": lambda: client.national_id if client else "",
            "client_phone": lambda: client.phone if client else "",
            "client_birth_date": lambda: client.birth_date if client else None,
            "latitude": lambda: coordinates.get("latitude"),
            "longitude": lambda: coordinates.get("longitude"),
            "request_date": lambda: request.get("date"),
            "request_situation": lambda: request.get("situation"),
            "request_fulfilling_date": lambda: request.get("fulfilling_date"),
        }
        if attribute in shared:
            return shared[attribute]()
        return getattr(record, attribute, None)

    # ------------------------------------------------------------------
    # Shared resolution steps
    # ------------------------------------------------------------------

    def common_attributes(
        self,
        row: Row,
        *,
        client: Client,
        dates: VisitDates,
        creator_id: str | None,
    ) -> dict[str, Any]:
        attributes: dict[str, Any] = {
            "serial_no": self.resolve_serial(row),
            "date": dates.visit,
            "client_id": client.id,
            "supervisor": self.text(row, "supervisor") or None,
            "vehicle_no": self.text(row, "vehicle_no") or None,
            "holding_code": self.text(row, "holding_code") or None,
            "coordinates": self.coordinates(row),
            "remarks": self.text(row, "remarks"),
            "custom_import_data": self.custom_import_data(row),
            "created_by": creator_id,
        }
        if self.tracks_request:
            situation = self.enum(row, "request_situation", REQUEST_SITUATION, DEFAULT_REQUEST_SITUATION)
            attributes["request"] = {
                "date": dates.request.isoformat(),
                "situation": situation,
                "fulfilling_date": dates.fulfilling.isoformat(),
            }
            attributes["request_situation"] = situation
        return attributes

    def resolve_dates(self, row: Row) -> VisitDates:
        visit = self._dates.parse_or_default(self.value(row, "date"))
        request = self._dates.parse_or_default(self.value(row, "request_date"), visit)
        fulfilling = self._dates.parse_or_default(self.value(row, "request_fulfilling_date"), request)
        if fulfilling < request:
            fulfilling = request
        follow_up = self._dates.parse(self.value(row, "follow_up_date"))
        return VisitDates(visit=visit, request=request, fulfilling=fulfilling, follow_up=follow_up)

    def resolve_serial(self, row: Row) -> str:
        supplied = self.text(row, "serial_no")
        return supplied or self.generate_serial()

    def generate_serial(self) -> str:
        millis = str(int(self._clock().timestamp() * 1000))
        suffix = "".join(self._rng.choice(_SERIAL_SUFFIX_ALPHABET) for _ in range(4))
        return f"{self.domain.serial_prefix}-{millis[-8:]}-{suffix}"

    def coordinates(self, row: Row) -> dict[str, float]:
        return {
            "latitude": parse_float(self.value(row, "latitude")),
            "longitude": parse_float(self.value(row, "longitude")),
        }

    def custom_import_data(self, row: Row) -> dict[str, Any]:
        original = {str(key): _jsonable(value) for key, value in row.items()}
        unmapped = {
            key: value
            for key, value in original.items()
            if key.strip().lower() not in self._known_headers and not is_blank(value)
        }
        return {"original_data": original, "unmapped": unmapped}

    def medications(self, row: Row, *, route_fallback: str) -> list[dict[str, Any]]:
        """
        Medications from a JSON array cell or a comma-separated list of names.
        """

        routes = self._enums[ADMINISTRATION_ROUTE]
        row_route = routes.normalize(self.value(row, "administration_route"), route_fallback)
        cell = self.value(row, "medications_used")

        entries = parse_json_list(cell)
        if entries is None:
            entries = split_csv_cell(cell)

        medications: list[dict[str, Any]] = []
        for entry in entries:
            if isinstance(entry, Mapping):
                name = str(entry.get("name") or "").strip()
                if not name:
                    continue
                medications.append(
                    {
                        "name": name,
                        "dosage": str(entry.get("dosage") or "").strip(),
                        "quantity": parse_int(entry.get("quantity"), 1),
                        "route": routes.normalize(entry.get("route"), row_route),
                    }
                )
            elif not is_blank(entry):
                medications.append(
                    {"name": str(entry).strip(), "dosage": "", "quantity": 1, "route": row_route}
                )
        return medications

    def follow_up_required(self, row: Row) -> bool:
        return self.enum(row, "follow_up_required", FOLLOW_UP_REQUIRED, "No") == "Yes"

    # ------------------------------------------------------------------
    # Field access helpers
    # ------------------------------------------------------------------

    def value(self, row: Row, attribute: str) -> Any | None:
        return self._fields.resolve(row, self._aliases.get(attribute, ()))

    def text(self, row: Row, attribute: str, default: str = "") -> str:
        return self._fields.resolve_text(row, self._aliases.get(attribute, ()), default)

    def count(self, row: Row, attribute: str, default: int = 0) -> int:
        return parse_int(self.value(row, attribute), default)

    def enum(self, row: Row, attribute: str, table: str, fallback: str) -> str:
        return self._enums[table].normalize(self.value(row, attribute), fallback)


def _jsonable(value: Any) -> Any:
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, (list, tuple)):
        return [_jsonable(item) for item in value]
    if isinstance(value, Mapping):
        return {str(key): _jsonable(item) for key, item in value.items()}
    return str(value)


def species_value(document: Mapping[str, Any] | None, attribute: str) -> Any:
    """
    Read ``sheep_total`` style template columns out of a per-species document:
    ``{"sheep": {"total": 3}}`` for herd counts, ``{"sheep": 3}`` for head counts.
    """

    species, _, metric = attribute.partition("_")
    entry = (document or {}).get(species)
    if isinstance(entry, Mapping):
        return entry.get(metric)
    return entry
