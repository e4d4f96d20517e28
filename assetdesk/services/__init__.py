"""
Services package for AssetDesk.
Contains business logic separated from routes.
"""

from assetdesk.services.booking_service import (
    BookingService,
    BookingValidationError,
    Conflict,
    ConflictResult,
)
from assetdesk.services.report_service import ReportService

__all__ = [
    'BookingService',
    'BookingValidationError',
    'Conflict',
    'ConflictResult',
    'ReportService',
]
