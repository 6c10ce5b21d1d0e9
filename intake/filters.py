"""
intake/filters.py

Query-side normalization of list filters for field-visit records.

Import keeps whatever casing a sheet used for free-text categorical values,
so filter values are expanded into every casing/separator variant before
being matched against stored columns.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Mapping, Sequence

from sqlalchemy import and_, or_
from sqlalchemy.sql.elements import ColumnElement

from db.models.client import Client
from db.models.equine_health_record import EquineHealthRecord
from db.models.laboratory_record import LaboratoryRecord
from db.models.mobile_clinic_record import MobileClinicRecord
from db.models.parasite_control_record import ParasiteControlRecord
from db.models.vaccination_record import VaccinationRecord
from intake.dates import DateNormalizer
from intake.domains import Domain
from intake.enums import DEFAULT_ENUM_MAPS, EQUINE_INTERVENTION_CATEGORY, EnumNormalizer, title_case_words

DEFAULT_LIMIT = 30
MAX_LIMIT = 1000
DEFAULT_SORT_FIELD = "date"

_SEPARATOR_RUN_RE = re.compile(r"[-_]+")
_WHITESPACE_RUN_RE = re.compile(r"\s+")
_CAMEL_BOUNDARY_RE = re.compile(r"(?<!^)(?=[A-Z])")


def _title_join(value: str, separator: str) -> str:
    return separator.join(
        part[:1].upper() + part[1:].lower() for part in value.split(separator) if part
    )


@dataclass(frozen=True)
class MultiValueFilter:
    """
    Included and ``!``-excluded value sets, each already casing-expanded.
    """

    included: frozenset[str] = frozenset()
    excluded: frozenset[str] = frozenset()

    def to_predicate(self, column: Any) -> ColumnElement[bool]:
        clauses = []
        if self.included:
            clauses.append(column.in_(sorted(self.included)))
        if self.excluded:
            clauses.append(or_(column.is_(None), column.not_in(sorted(self.excluded))))
        return and_(*clauses)


@dataclass(frozen=True)
class Pagination:
    limit: int
    page: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


@dataclass(frozen=True)
class RecordQuery:
    predicates: tuple[ColumnElement[bool], ...]
    order_by: tuple[Any, ...]
    pagination: Pagination


class FilterBuilder:
    """
    Turns raw query-string values into SQLAlchemy predicates.
    """

    def __init__(
        self,
        *,
        default_limit: int = DEFAULT_LIMIT,
        max_limit: int = MAX_LIMIT,
        date_normalizer: DateNormalizer | None = None,
        equine_categories: EnumNormalizer | None = None,
    ) -> None:
        self._default_limit = max(1, default_limit)
        self._max_limit = max(self._default_limit, max_limit)
        self._dates = date_normalizer or DateNormalizer()
        self._equine_categories = equine_categories or EnumNormalizer(
            DEFAULT_ENUM_MAPS[EQUINE_INTERVENTION_CATEGORY]
        )
        self._domain_builders: dict[Domain, Callable[[Mapping[str, Any]], list[ColumnElement[bool]]]] = {
            Domain.VACCINATION: self.build_vaccination_filters,
            Domain.PARASITE_CONTROL: self.build_parasite_control_filters,
            Domain.MOBILE_CLINICS: self.build_mobile_clinic_filters,
            Domain.EQUINE_HEALTH: self.build_equine_health_filters,
            Domain.LABORATORIES: self.build_laboratory_filters,
        }

    # ------------------------------------------------------------------
    # Value normalization
    # ------------------------------------------------------------------

    def normalize_filter_values(self, values: Iterable[Any]) -> set[str]:
        """
        Expand each value into its casing/separator variants: the value as
        given, hyphen- and underscore-preserving title case, the
        space-separated form, and its title and lower case. Multi-word values
        are also rejoined with `-` and `_` in title and lower case, so
        "Not Sprayed" matches a stored "Not_Sprayed".
        """

        normalized: set[str] = set()
        for value in values:
            if value is None:
                continue
            text = str(value).strip()
            if not text:
                continue

            normalized.add(text)
            if "-" in text:
                normalized.add(_title_join(text, "-"))
            if "_" in text:
                normalized.add(_title_join(text, "_"))

            spaced = _WHITESPACE_RUN_RE.sub(" ", _SEPARATOR_RUN_RE.sub(" ", text)).strip()
            if spaced:
                normalized.add(spaced)
                normalized.add(title_case_words(spaced))
                normalized.add(spaced.lower())
                if " " in spaced:
                    for separator in ("-", "_"):
                        joined = spaced.replace(" ", separator)
                        normalized.add(_title_join(joined, separator))
                        normalized.add(joined.lower())

        normalized.discard("")
        return normalized

    def split_values(self, value: Any) -> tuple[list[str], list[str]]:
        """Split a comma-joined string or list into (included, excluded) terms."""

        if value is None:
            return [], []
        if isinstance(value, str):
            raw_values: Sequence[Any] = value.split(",")
        elif isinstance(value, (list, tuple, set)):
            raw_values = list(value)
        else:
            raw_values = [value]

        terms = [str(item).strip() for item in raw_values if item is not None and str(item).strip()]
        included = [term for term in terms if not term.startswith("!")]
        excluded = [term[1:] for term in terms if term.startswith("!") and term[1:].strip()]
        return included, excluded

    def build_multi_value_filter(self, value: Any) -> MultiValueFilter | None:
        included, excluded = self.split_values(value)
        if not included and not excluded:
            return None
        return MultiValueFilter(
            included=frozenset(self.normalize_filter_values(included)),
            excluded=frozenset(self.normalize_filter_values(excluded)),
        )

    # ------------------------------------------------------------------
    # Generic predicates
    # ------------------------------------------------------------------

    def build_date_filter(self, column: Any, start_date: Any, end_date: Any) -> list[ColumnElement[bool]]:
        """
        Inclusive day range on a DATE column; unparseable bounds are ignored.
        """

        predicates: list[ColumnElement[bool]] = []
        start = self._dates.parse(start_date)
        if start is not None:
            predicates.append(column >= start)
        end = self._dates.parse(end_date)
        if end is not None:
            predicates.append(column <= end)
        return predicates

    def build_text_search_filter(
        self,
        term: Any,
        columns: Sequence[Any],
        *,
        client_columns: Sequence[Any] = (),
        client_relationship: Any = None,
    ) -> ColumnElement[bool] | None:
        if term is None or not str(term).strip() or (not columns and not client_columns):
            return None

        pattern = f"%{_escape_like(str(term).strip())}%"
        conditions = [column.ilike(pattern, escape="\\") for column in columns]
        if client_columns and client_relationship is not None:
            conditions.append(
                client_relationship.has(
                    or_(*(column.ilike(pattern, escape="\\") for column in client_columns))
                )
            )
        return or_(*conditions)

    def build_substring_filter(self, column: Any, value: Any) -> ColumnElement[bool] | None:
        if value is None or not str(value).strip():
            return None
        return column.ilike(f"%{_escape_like(str(value).strip())}%", escape="\\")

    def build_pagination(self, limit: Any = None, page: Any = None) -> Pagination:
        resolved_limit = _positive_int(limit) or self._default_limit
        return Pagination(
            limit=min(resolved_limit, self._max_limit),
            page=max(_positive_int(page) or 1, 1),
        )

    def build_sort(self, model: Any, sort_by: Any = None, sort_order: Any = None) -> tuple[Any, ...]:
        """
        Sort clause for ``sort_by`` (camelCase tolerated); unknown columns fall
        back to the visit date. Descending unless ``sort_order`` is ``asc``.
        """

        field_name = _to_snake_case(str(sort_by or DEFAULT_SORT_FIELD).strip())
        columns = model.__table__.columns
        column = getattr(model, field_name) if field_name in columns else getattr(model, DEFAULT_SORT_FIELD)
        ascending = str(sort_order or "").strip().lower() == "asc"
        return (column.asc() if ascending else column.desc(), model.id.asc())

    # ------------------------------------------------------------------
    # Per-domain builders
    # ------------------------------------------------------------------

    def build_query(self, domain: Domain, model: Any, params: Mapping[str, Any]) -> RecordQuery:
        return RecordQuery(
            predicates=tuple(self._domain_builders[domain](params)),
            order_by=self.build_sort(model, _param(params, "sort_by", "sortBy"), _param(params, "sort_order", "sortOrder")),
            pagination=self.build_pagination(_param(params, "limit"), _param(params, "page")),
        )

    def build_vaccination_filters(self, params: Mapping[str, Any]) -> list[ColumnElement[bool]]:
        model = VaccinationRecord
        predicates = self._visit_filters(
            model,
            params,
            search_columns=(model.supervisor, model.serial_no, model.farm_location),
        )
        self._add_multi(predicates, model.vaccine_type, _param(params, "vaccine_type", "vaccineType", "vaccine.type"))
        self._add_multi(
            predicates,
            model.vaccine_category,
            _param(params, "vaccine_category", "vaccineCategory", "vaccine.category"),
        )
        self._add_multi(predicates, model.herd_health, _param(params, "herd_health", "herdHealth", "herdHealthStatus"))
        self._add_multi(predicates, model.animals_handling, _param(params, "animals_handling", "animalsHandling"))
        self._add_multi(predicates, model.labours, _param(params, "labours"))
        self._add_multi(
            predicates,
            model.reachable_location,
            _param(params, "reachable_location", "reachableLocation"),
        )
        self._add_multi(
            predicates,
            model.request_situation,
            _param(params, "request_situation", "vaccinationStatus", "request.situation"),
        )
        return predicates

    def build_parasite_control_filters(self, params: Mapping[str, Any]) -> list[ColumnElement[bool]]:
        model = ParasiteControlRecord
        predicates = self._visit_filters(
            model,
            params,
            search_columns=(model.supervisor, model.serial_no, model.herd_location),
        )
        for key, names in (
            ("method", ("insecticide_method", "insecticideMethod")),
            ("category", ("insecticide_category", "insecticideCategory")),
            ("type", ("insecticide_type", "insecticideType")),
        ):
            self._add_multi(predicates, model.insecticide[key].as_string(), _param(params, *names))
        self._add_multi(
            predicates,
            model.insecticide_status,
            _param(params, "insecticide_status", "insecticideStatus"),
        )
        self._add_multi(
            predicates,
            model.herd_health_status,
            _param(params, "herd_health_status", "herdHealthStatus"),
        )
        self._add_multi(
            predicates,
            model.complying_to_instructions,
            _param(params, "complying_to_instructions", "complyingToInstructions"),
        )
        self._add_multi(
            predicates,
            model.request_situation,
            _param(params, "request_situation", "parasiteControlStatus", "request.situation"),
        )
        return predicates

    def build_mobile_clinic_filters(self, params: Mapping[str, Any]) -> list[ColumnElement[bool]]:
        model = MobileClinicRecord
        predicates = self._visit_filters(
            model,
            params,
            search_columns=(model.supervisor, model.serial_no, model.diagnosis, model.treatment),
        )
        self._add_multi(predicates, model.diagnosis, _param(params, "diagnosis"))
        self._add_multi(
            predicates,
            model.intervention_category,
            _param(params, "intervention_category", "interventionCategory"),
        )
        follow_up = _param(params, "follow_up_required", "followUpRequired")
        if follow_up is not None and str(follow_up).strip():
            predicates.append(model.follow_up_required == (str(follow_up).strip().lower() == "true"))
        self._add_multi(
            predicates,
            model.request_situation,
            _param(params, "request_situation", "mobileClinicStatus", "request.situation"),
        )
        return predicates

    def build_equine_health_filters(self, params: Mapping[str, Any]) -> list[ColumnElement[bool]]:
        model = EquineHealthRecord
        predicates = self._visit_filters(
            model,
            params,
            search_columns=(model.serial_no, model.supervisor, model.vehicle_no, model.diagnosis),
        )

        intervention = self.build_multi_value_filter(
            _param(params, "intervention_category", "interventionCategory")
        )
        if intervention is not None:
            # Stored categories are canonical labels, so filter terms go through
            # the same synonym map rather than the casing expansion.
            canonical = MultiValueFilter(
                included=frozenset(self._equine_categories.normalize_list(intervention.included)),
                excluded=frozenset(self._equine_categories.normalize_list(intervention.excluded)),
            )
            if canonical.included or canonical.excluded:
                predicates.append(canonical.to_predicate(model.intervention_category))

        self._add_multi(
            predicates,
            model.request_situation,
            _param(params, "request_situation", "request.situation"),
        )
        return predicates

    def build_laboratory_filters(self, params: Mapping[str, Any]) -> list[ColumnElement[bool]]:
        model = LaboratoryRecord
        predicates = self.build_date_filter(
            model.date,
            _param(params, "start_date", "startDate"),
            _param(params, "end_date", "endDate"),
        )
        collector = self.build_substring_filter(model.collector, _param(params, "collector"))
        if collector is not None:
            predicates.append(collector)
        search = self.build_text_search_filter(
            _param(params, "search"),
            (model.collector, model.client_name, model.client_national_id, model.sample_code),
        )
        if search is not None:
            predicates.append(search)
        self._add_multi(predicates, model.sample_type, _param(params, "sample_type", "sampleType"))
        return predicates

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _visit_filters(
        self,
        model: Any,
        params: Mapping[str, Any],
        *,
        search_columns: Sequence[Any],
    ) -> list[ColumnElement[bool]]:
        predicates = self.build_date_filter(
            model.date,
            _param(params, "start_date", "startDate"),
            _param(params, "end_date", "endDate"),
        )
        supervisor = self.build_substring_filter(model.supervisor, _param(params, "supervisor"))
        if supervisor is not None:
            predicates.append(supervisor)
        search = self.build_text_search_filter(
            _param(params, "search"),
            search_columns,
            client_columns=(Client.name, Client.national_id, Client.phone, Client.village),
            client_relationship=model.client,
        )
        if search is not None:
            predicates.append(search)
        return predicates

    def _add_multi(self, predicates: list[ColumnElement[bool]], column: Any, value: Any) -> None:
        multi = self.build_multi_value_filter(value)
        if multi is not None:
            predicates.append(multi.to_predicate(column))


def _param(params: Mapping[str, Any], *names: str) -> Any:
    for name in names:
        value = params.get(name)
        if value is not None and value != "":
            return value
    return None


def _positive_int(value: Any) -> int | None:
    try:
        parsed = int(str(value).strip())
    except (TypeError, ValueError):
        return None
    return parsed if parsed > 0 else None


def _to_snake_case(value: str) -> str:
    return _CAMEL_BOUNDARY_RE.sub("_", value).lower()


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
