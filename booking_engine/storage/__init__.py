from booking_engine.storage.base import ReservationNotFoundError, SlotConflictError, Storage
from booking_engine.storage.memory import InMemoryStorage

__all__ = ["Storage", "InMemoryStorage", "SlotConflictError", "ReservationNotFoundError"]
