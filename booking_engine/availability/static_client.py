"""
Static calendar client backed by an in-memory busy map.

Used by the console demo and tests in place of a live calendar provider.
People can be marked busy over intervals, made to fail (simulating
expired credentials or API errors), or made slow (simulating timeouts).
"""

import asyncio
import logging
from datetime import datetime
from typing import Optional

from booking_engine.utils import intervals_overlap

logger = logging.getLogger(__name__)


class CalendarUnavailableError(Exception):
    """Simulated provider failure."""


class StaticCalendarClient:
    """``CalendarClient`` whose answers come from preset data."""

    def __init__(self) -> None:
        self._busy: dict[str, list[tuple[datetime, datetime]]] = {}
        self._failing: set[str] = set()
        self._delays: dict[str, float] = {}
        self.calls: list[str] = []

    def mark_busy(self, person_id: str, start: datetime, end: datetime) -> None:
        self._busy.setdefault(person_id, []).append((start, end))

    def fail_for(self, person_id: str) -> None:
        self._failing.add(person_id)

    def delay_for(self, person_id: str, seconds: float) -> None:
        self._delays[person_id] = seconds

    def reset(self, person_id: Optional[str] = None) -> None:
        if person_id is None:
            self._busy.clear()
            self._failing.clear()
            self._delays.clear()
            self.calls.clear()
            return
        self._busy.pop(person_id, None)
        self._failing.discard(person_id)
        self._delays.pop(person_id, None)

    async def check_free(self, person_id: str, start: datetime, end: datetime) -> bool:
        self.calls.append(person_id)
        delay = self._delays.get(person_id)
        if delay:
            await asyncio.sleep(delay)
        if person_id in self._failing:
            raise CalendarUnavailableError(f"Calendar unavailable for {person_id}")
        return not any(
            intervals_overlap(start, end, busy_start, busy_end)
            for busy_start, busy_end in self._busy.get(person_id, [])
        )
