"""
intake/coercion.py

Lenient scalar coercion for spreadsheet cells.

Numbers follow leading-prefix semantics: "12 head" is 12, "3.7" is 3 for
integers, and anything without a numeric prefix falls back to the default.
"""

from __future__ import annotations

import json
import re
from typing import Any

_ARABIC_DIGITS = str.maketrans("٠١٢٣٤٥٦٧٨٩۰۱۲۳۴۵۶۷۸۹", "01234567890123456789")
_LEADING_INT_RE = re.compile(r"^[+-]?\d+")
_LEADING_FLOAT_RE = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?")


def _clean(value: Any) -> str:
    return str(value).strip().translate(_ARABIC_DIGITS).replace(",", "")


def parse_int(value: Any, default: int = 0) -> int:
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value == value and abs(value) != float("inf") else default
    match = _LEADING_INT_RE.match(_clean(value))
    return int(match.group(0)) if match else default


def parse_float(value: Any, default: float = 0.0) -> float:
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        result = float(value)
        return result if result == result else default
    match = _LEADING_FLOAT_RE.match(_clean(value))
    return float(match.group(0)) if match else default


def parse_json_list(value: Any) -> list[Any] | None:
    """
    Decode a JSON array cell. Returns None when the cell is not a JSON array,
    so callers can fall back to treating it as plain text.
    """

    if isinstance(value, list):
        return list(value)
    if value is None:
        return None
    text = str(value).strip()
    if not text.startswith("["):
        return None
    try:
        decoded = json.loads(text)
    except ValueError:
        return None
    return decoded if isinstance(decoded, list) else None


def split_csv_cell(value: Any) -> list[str]:
    """Split a comma-joined cell into stripped, non-empty parts."""

    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [str(part).strip() for part in value if str(part).strip()]
    return [part.strip() for part in str(value).split(",") if part.strip()]
