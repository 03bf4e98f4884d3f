"""
In-memory storage for tests, the console demo and local development.

In production this would be backed by the application database, with the
reservation insert protected by a uniqueness/exclusion constraint on
event + interval. Here an ``asyncio.Lock`` plays that role.
"""

import asyncio
import logging
from datetime import datetime, timedelta
from typing import Callable, Optional

from booking_engine.schemas.event_schema import BookableEvent
from booking_engine.schemas.reservation_schema import (
    Reservation,
    ReservationStatus,
    RoutingResponseRecord,
)
from booking_engine.schemas.team_schema import TeamMember
from booking_engine.storage.base import ReservationNotFoundError, SlotConflictError, Storage
from booking_engine.utils import intervals_overlap, utc_now

logger = logging.getLogger(__name__)


class InMemoryStorage(Storage):
    """Dict-backed ``Storage`` implementation."""

    def __init__(self, clock: Callable[[], datetime] = utc_now) -> None:
        self._clock = clock
        self._events: dict[str, BookableEvent] = {}
        self._members: dict[str, TeamMember] = {}
        self._reservations: dict[str, Reservation] = {}
        self._routing_responses: list[RoutingResponseRecord] = []
        self._create_lock = asyncio.Lock()

    # --- Seeding helpers (not part of the Storage interface) ---

    def add_event(self, event: BookableEvent) -> BookableEvent:
        self._events[event.id] = event
        return event

    def add_member(self, member: TeamMember) -> TeamMember:
        self._members[member.id] = member
        return member

    def add_reservation(self, reservation: Reservation) -> Reservation:
        """Insert without the overlap check, e.g. to load historical data."""
        self._reservations[reservation.id] = reservation
        return reservation

    def get_member(self, member_id: str) -> Optional[TeamMember]:
        return self._members.get(member_id)

    def all_reservations(self, event_id: Optional[str] = None) -> list[Reservation]:
        return [
            r for r in self._reservations.values()
            if event_id is None or r.event_id == event_id
        ]

    def reset(self) -> None:
        """Clear all state. Used by test fixtures for isolation."""
        self._events.clear()
        self._members.clear()
        self._reservations.clear()
        self._routing_responses.clear()

    # --- Storage interface ---

    async def get_event(self, event_id: str) -> Optional[BookableEvent]:
        return self._events.get(event_id)

    async def list_active_reservations(self, event_id: str) -> list[Reservation]:
        return [
            r for r in self._reservations.values()
            if r.event_id == event_id and r.is_active
        ]

    async def list_team_members(
        self, team_id: str, active_only: bool = True
    ) -> list[TeamMember]:
        return [
            m for m in self._members.values()
            if m.team_id == team_id and (m.active or not active_only)
        ]

    async def count_recent_assignments(self, person_id: str, since_days: int) -> int:
        since = self._clock() - timedelta(days=since_days)
        return sum(
            1 for r in self._reservations.values()
            if r.assignee_id == person_id and r.created_at >= since
        )

    async def touch_last_assigned(self, member_id: str, timestamp: datetime) -> None:
        member = self._members.get(member_id)
        if member is None:
            logger.warning("touch_last_assigned: unknown member %s", member_id)
            return
        self._members[member_id] = member.model_copy(update={"last_assigned_at": timestamp})

    async def create_reservation(self, reservation: Reservation) -> Reservation:
        async with self._create_lock:
            for existing in self._reservations.values():
                if (
                    existing.event_id == reservation.event_id
                    and existing.is_active
                    and intervals_overlap(
                        reservation.start, reservation.end, existing.start, existing.end
                    )
                ):
                    raise SlotConflictError(
                        reservation.event_id, reservation.start, reservation.end
                    )
            self._reservations[reservation.id] = reservation
        logger.debug("Reservation stored: %s on %s", reservation.id, reservation.event_id)
        return reservation

    async def get_reservation(self, reservation_id: str) -> Optional[Reservation]:
        return self._reservations.get(reservation_id)

    async def update_reservation_status(
        self, reservation_id: str, status: ReservationStatus
    ) -> Reservation:
        reservation = self._reservations.get(reservation_id)
        if reservation is None:
            raise ReservationNotFoundError(f"Reservation {reservation_id} not found")
        updated = reservation.model_copy(update={"status": status})
        self._reservations[reservation_id] = updated
        return updated

    async def record_routing_response(self, record: RoutingResponseRecord) -> None:
        self._routing_responses.append(record)

    async def list_routing_responses(self, event_id: str) -> list[RoutingResponseRecord]:
        return [r for r in self._routing_responses if r.event_id == event_id]
