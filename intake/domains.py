"""
intake/domains.py

Field-visit record domains and their per-domain constants.
"""

from __future__ import annotations

from enum import Enum


class Domain(str, Enum):
    VACCINATION = "vaccination"
    PARASITE_CONTROL = "parasite-control"
    MOBILE_CLINICS = "mobile-clinics"
    EQUINE_HEALTH = "equine-health"
    LABORATORIES = "laboratories"

    @property
    def serial_prefix(self) -> str:
        return SERIAL_PREFIXES[self]

    @classmethod
    def from_value(cls, value: str) -> "Domain":
        """
        Resolve a URL segment or table name; underscores and case are tolerated.
        """

        normalized = (value or "").strip().lower().replace("_", "-")
        for domain in cls:
            if domain.value == normalized:
                return domain
        raise ValueError(f"Unsupported import domain: {value!r}")


SERIAL_PREFIXES: dict[Domain, str] = {
    Domain.VACCINATION: "VAC",
    Domain.PARASITE_CONTROL: "PAR",
    Domain.MOBILE_CLINICS: "MC",
    Domain.EQUINE_HEALTH: "EH",
    Domain.LABORATORIES: "LAB",
}
