from booking_engine.conflict.detector import ConflictDetector
from booking_engine.conflict.slots import AvailabilityWindow, SlotAvailability, list_open_slots
from booking_engine.utils import intervals_overlap

__all__ = [
    "ConflictDetector", "AvailabilityWindow", "SlotAvailability",
    "list_open_slots", "intervals_overlap",
]
