"""Booking conflict resolution and team assignment engine."""

from booking_engine.availability.oracle import AvailabilityOracle, CalendarClient
from booking_engine.booking.service import BookingService, InvalidStatusTransitionError
from booking_engine.conflict.detector import ConflictDetector
from booking_engine.errors import BookingEngineError
from booking_engine.routing.orchestrator import (
    AssignmentConfigurationError,
    AssignmentOrchestrator,
    EventNotFoundError,
)
from booking_engine.storage.base import ReservationNotFoundError, SlotConflictError, Storage
from booking_engine.storage.memory import InMemoryStorage

__all__ = [
    "AvailabilityOracle", "CalendarClient",
    "BookingService", "InvalidStatusTransitionError",
    "ConflictDetector",
    "BookingEngineError",
    "AssignmentOrchestrator", "AssignmentConfigurationError", "EventNotFoundError",
    "Storage", "InMemoryStorage", "SlotConflictError", "ReservationNotFoundError",
]
