"""
intake/dates.py

Date normalization for heterogeneous field-sheet values.

Day/month ambiguity is settled once for the whole pipeline: numeric
``D/M/YYYY`` and ``D-M-YYYY`` strings are always read day-first.
"""

from __future__ import annotations

import re
from datetime import date, datetime, timedelta
from typing import Any, Callable, Mapping

MONTH_ABBREVIATIONS: dict[str, int] = {
    "jan": 1,
    "feb": 2,
    "mar": 3,
    "apr": 4,
    "may": 5,
    "jun": 6,
    "jul": 7,
    "aug": 8,
    "sep": 9,
    "oct": 10,
    "nov": 11,
    "dec": 12,
}

# Excel's day zero once its phantom 1900-02-29 is accounted for.
EXCEL_EPOCH = date(1899, 12, 30)
_MAX_EXCEL_SERIAL = 2958465  # 9999-12-31

_ARABIC_DIGITS = str.maketrans(
    "٠١٢٣٤٥٦٧٨٩۰۱۲۳۴۵۶۷۸۹",
    "01234567890123456789",
)

_DAY_MONTH_RE = re.compile(r"^(\d{1,2})-([A-Za-z]{3})$")
_NUMERIC_RE = re.compile(r"^\d+(\.\d+)?$")
_YEAR_FIRST_RE = re.compile(r"^(\d{4})[-/](\d{1,2})[-/](\d{1,2})$")
_ISO_DATETIME_RE = re.compile(r"^\d{4}-\d{2}-\d{2}[T ]")
_DAY_FIRST_RE = re.compile(r"^(\d{1,2})[/.-](\d{1,2})[/.-](\d{4})$")

_TEXTUAL_FORMATS: tuple[str, ...] = (
    "%d %b %Y",
    "%d %B %Y",
    "%b %d, %Y",
    "%B %d, %Y",
    "%b %d %Y",
    "%d-%b-%Y",
    "%d-%B-%Y",
)


def _safe_date(year: int, month: int, day: int) -> date | None:
    try:
        return date(year, month, day)
    except ValueError:
        return None


class DateNormalizer:
    """
    Parses raw date cells into calendar dates.

    Two failure policies are exposed and callers pick one explicitly:
    ``parse`` yields None (query side), ``parse_or_default`` yields a caller
    default or today's date (ingestion side).
    """

    def __init__(
        self,
        *,
        today: Callable[[], date] | None = None,
        month_table: Mapping[str, int] | None = None,
    ) -> None:
        self._today = today or date.today
        self._months = {key.lower(): value for key, value in (month_table or MONTH_ABBREVIATIONS).items()}

    def today(self) -> date:
        return self._today()

    def parse(self, raw: Any) -> date | None:
        if raw is None or isinstance(raw, bool):
            return None
        if isinstance(raw, datetime):
            return raw.date()
        if isinstance(raw, date):
            return raw
        if isinstance(raw, (int, float)):
            return self._from_excel_serial(float(raw))

        text = str(raw).strip().translate(_ARABIC_DIGITS)
        if not text:
            return None

        match = _DAY_MONTH_RE.match(text)
        if match:
            month = self._months.get(match.group(2).lower())
            if month is None:
                return None
            return _safe_date(self._today().year, month, int(match.group(1)))

        if _NUMERIC_RE.match(text):
            return self._from_excel_serial(float(text))

        match = _YEAR_FIRST_RE.match(text)
        if match:
            year, month, day = (int(part) for part in match.groups())
            return _safe_date(year, month, day)

        if _ISO_DATETIME_RE.match(text):
            try:
                return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
            except ValueError:
                return None

        match = _DAY_FIRST_RE.match(text)
        if match:
            day, month, year = (int(part) for part in match.groups())
            return _safe_date(year, month, day)

        for fmt in _TEXTUAL_FORMATS:
            try:
                return datetime.strptime(text, fmt).date()
            except ValueError:
                continue

        return None

    def parse_or_default(self, raw: Any, default: date | None = None) -> date:
        """
        Ingestion policy: unparseable or missing values become ``default``,
        or today's date when no default is given.
        """

        parsed = self.parse(raw)
        if parsed is not None:
            return parsed
        return default if default is not None else self._today()

    def _from_excel_serial(self, serial: float) -> date | None:
        if serial <= 0 or serial > _MAX_EXCEL_SERIAL:
            return None
        return EXCEL_EPOCH + timedelta(days=int(serial))
