"""
intake/field_resolver.py

Alias-driven lookup of canonical attributes in free-form source rows.
"""

from __future__ import annotations

from typing import Any, Mapping, Sequence

Row = Mapping[str, Any]


def _normalize_key(key: Any) -> str:
    return str(key).strip().lower()


def is_blank(value: Any) -> bool:
    """True for None and for values that are empty once stringified and trimmed."""

    if value is None:
        return True
    return str(value).strip() == ""


class FieldResolver:
    """
    Resolves one canonical attribute from a row given its ordered aliases.

    Two passes are made: exact key match first, then a case- and
    whitespace-insensitive pass over a lower-cased copy of the row keys.
    Within each pass the first alias with a non-empty value wins.
    """

    def resolve(self, row: Row, aliases: Sequence[str]) -> Any | None:
        for alias in aliases:
            value = row.get(alias)
            if not is_blank(value):
                return value

        normalized_row: dict[str, Any] = {}
        for key, value in row.items():
            normalized_key = _normalize_key(key)
            # Keep the first non-empty value when two source keys collapse together.
            if normalized_key not in normalized_row or is_blank(normalized_row[normalized_key]):
                normalized_row[normalized_key] = value

        for alias in aliases:
            value = normalized_row.get(_normalize_key(alias))
            if not is_blank(value):
                return value

        return None

    def resolve_text(self, row: Row, aliases: Sequence[str], default: str = "") -> str:
        """
        Resolve a free-text attribute as a stripped string.
        """

        value = self.resolve(row, aliases)
        if value is None:
            return default
        return str(value).strip()
