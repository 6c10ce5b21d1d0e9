"""
app/api/routers package marker.
"""

from app.api.routers.field_import import router as field_import_router
from app.api.routers.field_records import router as field_records_router

__all__ = [
    "field_import_router",
    "field_records_router",
]
