"""
app/services package marker.
"""

from app.services.csv_exchange_service import CSVExchangeService, get_csv_exchange_service
from app.services.field_import_service import (
    CSVImportError,
    FieldImportService,
    ImportBatchTooLargeError,
    ImportPayloadError,
    get_field_import_service,
)
from app.services.field_record_service import FieldRecordService, get_field_record_service

__all__ = [
    "CSVExchangeService",
    "get_csv_exchange_service",
    "CSVImportError",
    "FieldImportService",
    "ImportBatchTooLargeError",
    "ImportPayloadError",
    "get_field_import_service",
    "FieldRecordService",
    "get_field_record_service",
]
