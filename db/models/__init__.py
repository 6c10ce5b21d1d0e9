"""
Model package exports.

Import all SQLAlchemy models here so metadata registration and Alembic
autogeneration work without extra imports.
"""

from db.models.client import Client
from db.models.equine_health_record import EquineHealthRecord
from db.models.laboratory_record import LaboratoryRecord
from db.models.mobile_clinic_record import MobileClinicRecord
from db.models.parasite_control_record import ParasiteControlRecord
from db.models.vaccination_record import VaccinationRecord

__all__ = [
    "Client",
    "VaccinationRecord",
    "ParasiteControlRecord",
    "MobileClinicRecord",
    "EquineHealthRecord",
    "LaboratoryRecord",
]
