"""
intake/assemblers package marker.

Importing the package registers one assembler per Domain.
"""

from intake.assemblers.base import (
    RecordAssembler,
    VisitDates,
    get_assembler_class,
    register_assembler,
    registered_domains,
)
from intake.assemblers.equine_health import EquineHealthAssembler
from intake.assemblers.laboratory import LaboratoryAssembler
from intake.assemblers.mobile_clinic import MobileClinicAssembler
from intake.assemblers.parasite_control import ParasiteControlAssembler
from intake.assemblers.vaccination import VaccinationAssembler

__all__ = [
    "EquineHealthAssembler",
    "LaboratoryAssembler",
    "MobileClinicAssembler",
    "ParasiteControlAssembler",
    "RecordAssembler",
    "VaccinationAssembler",
    "VisitDates",
    "get_assembler_class",
    "register_assembler",
    "registered_domains",
]
