"""
app/config.py

Application-level configuration helpers.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from db.config import load_env_files
from db.models.client import ACTIVE_CLIENT_STATUS


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Ensure project `.env` files are loaded once before reading app settings.
    """

    load_env_files()


def _get_bool_env(name: str, default: bool) -> bool:
    """
    Read a boolean from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    return raw_value.strip().lower() in {"1", "true", "yes", "on"}


def _get_int_env(name: str, default: int) -> int:
    """
    Read an integer from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return int(raw_value)
    except ValueError:
        return default


def _get_str_env(name: str, default: str) -> str:
    """
    Read a string from environment variables with fallback.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return default
    stripped = value.strip()
    return stripped if stripped else default


@dataclass(frozen=True)
class ImportSettings:
    """
    Runtime settings for batch imports.
    """

    max_rows: int = 5000
    log_row_errors: bool = True
    max_reported_errors: int = 500
    default_creator_id: str = "system"
    client_default_status: str = ACTIVE_CLIENT_STATUS


@dataclass(frozen=True)
class QuerySettings:
    """
    Pagination bounds for record listing.
    """

    default_limit: int = 30
    max_limit: int = 1000


@lru_cache(maxsize=1)
def get_import_settings() -> ImportSettings:
    """
    Return cached import settings from environment variables.
    """

    return ImportSettings(
        max_rows=max(1, _get_int_env("IMPORT_MAX_ROWS", 5000)),
        log_row_errors=_get_bool_env("IMPORT_LOG_ROW_ERRORS", True),
        max_reported_errors=max(1, _get_int_env("IMPORT_MAX_REPORTED_ERRORS", 500)),
        default_creator_id=_get_str_env("IMPORT_DEFAULT_CREATOR_ID", "system"),
        client_default_status=_get_str_env("IMPORT_CLIENT_DEFAULT_STATUS", ACTIVE_CLIENT_STATUS),
    )


@lru_cache(maxsize=1)
def get_query_settings() -> QuerySettings:
    """
    Return cached record-query settings from environment variables.
    """

    default_limit = max(1, _get_int_env("QUERY_DEFAULT_LIMIT", 30))
    return QuerySettings(
        default_limit=default_limit,
        max_limit=max(default_limit, _get_int_env("QUERY_MAX_LIMIT", 1000)),
    )
