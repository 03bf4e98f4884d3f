"""
Buffer-aware slot listing for one day of an event's availability.

Candidate starts are generated every ``slot_interval_minutes`` inside each
daily availability window. A slot is open when it is in the future and
``[start, start + duration + buffer)`` does not overlap any active
reservation extended by the same buffer.
"""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import Optional, Sequence

from booking_engine.config import settings
from booking_engine.schemas.event_schema import BookableEvent
from booking_engine.schemas.reservation_schema import Reservation
from booking_engine.utils import intervals_overlap


@dataclass(frozen=True)
class AvailabilityWindow:
    """A bookable stretch of the host's day, e.g. 09:00-17:00."""
    start: time
    end: time

    def __post_init__(self) -> None:
        if self.end <= self.start:
            raise ValueError(f"Window end {self.end} must be after start {self.start}")


@dataclass(frozen=True)
class SlotAvailability:
    start: datetime
    end: datetime
    available: bool


def generate_slot_starts(
    day: date,
    windows: Sequence[AvailabilityWindow],
    duration: timedelta,
    interval: timedelta,
    tz: tzinfo = timezone.utc,
) -> list[datetime]:
    """Sorted, de-duplicated starts whose meeting fits inside a window."""
    starts: set[datetime] = set()
    for window in windows:
        cursor = datetime.combine(day, window.start, tzinfo=tz)
        window_end = datetime.combine(day, window.end, tzinfo=tz)
        while cursor + duration <= window_end:
            starts.add(cursor)
            cursor += interval
    return sorted(starts)


def list_open_slots(
    event: BookableEvent,
    day: date,
    windows: Sequence[AvailabilityWindow],
    reservations: Sequence[Reservation],
    now: datetime,
    slot_interval_minutes: Optional[int] = None,
    tz: tzinfo = timezone.utc,
) -> list[SlotAvailability]:
    interval = timedelta(
        minutes=slot_interval_minutes or settings.scheduling.slot_interval_minutes
    )
    active = [r for r in reservations if r.is_active]

    slots = []
    for start in generate_slot_starts(day, windows, event.duration, interval, tz):
        end = event.end_for(start)
        blocked_until = end + event.buffer
        taken = any(
            intervals_overlap(start, blocked_until, r.start, r.end + event.buffer)
            for r in active
        )
        slots.append(SlotAvailability(start=start, end=end, available=start > now and not taken))
    return slots
