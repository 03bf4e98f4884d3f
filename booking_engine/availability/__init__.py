from booking_engine.availability.oracle import AvailabilityOracle, CalendarClient
from booking_engine.availability.static_client import StaticCalendarClient

__all__ = ["AvailabilityOracle", "CalendarClient", "StaticCalendarClient"]
