# Booking engine services
from guesthouse.services.booking_service import BookingService
from guesthouse.services.availability import AvailabilityProjector
from guesthouse.services.report_service import ReportService
from guesthouse.services.overlap_checker import OverlapChecker
from guesthouse.services.audit_service import AuditService

__all__ = [
    'BookingService', 'AvailabilityProjector', 'ReportService',
    'OverlapChecker', 'AuditService'
]
