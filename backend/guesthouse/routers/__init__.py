# API Routers
from guesthouse.routers import bookings, beds, reports

__all__ = ['bookings', 'beds', 'reports']
