"""
Conflict detection for booking requests.

A candidate slot conflicts when it overlaps any pending or confirmed
reservation on the same event. The check is read-only and lock-free; the
final guard against two simultaneous requests for one slot is
``Storage.create_reservation``.
"""

from datetime import date, datetime
from typing import Optional, Sequence

from booking_engine.conflict.slots import AvailabilityWindow, SlotAvailability, list_open_slots
from booking_engine.logging_context import get_attempt_logger
from booking_engine.schemas.event_schema import BookableEvent
from booking_engine.storage.base import Storage
from booking_engine.utils import intervals_overlap, utc_now

logger = get_attempt_logger(__name__)


class ConflictDetector:
    """Checks candidate slots against an event's active reservations."""

    def __init__(self, storage: Storage) -> None:
        self.storage = storage

    async def has_conflict(
        self, event_id: str, candidate_start: datetime, candidate_end: datetime
    ) -> bool:
        """Return True if ``[candidate_start, candidate_end)`` is already taken.

        The caller guarantees ``candidate_end == candidate_start + duration``.
        Storage errors propagate.
        """
        reservations = await self.storage.list_active_reservations(event_id)
        for reservation in reservations:
            if intervals_overlap(candidate_start, candidate_end, reservation.start, reservation.end):
                logger.info(
                    "Slot %s-%s on %s conflicts with %s",
                    candidate_start.isoformat(), candidate_end.isoformat(),
                    event_id, reservation.id,
                )
                return True
        return False

    async def open_slots(
        self,
        event: BookableEvent,
        day: date,
        windows: Sequence[AvailabilityWindow],
        now: Optional[datetime] = None,
        slot_interval_minutes: Optional[int] = None,
    ) -> list[SlotAvailability]:
        """Every candidate slot of ``day`` with its availability flag."""
        reservations = await self.storage.list_active_reservations(event.id)
        return list_open_slots(
            event,
            day,
            windows,
            reservations,
            now=now or utc_now(),
            slot_interval_minutes=slot_interval_minutes,
        )
