"""
Storage interface the engine depends on.

Persistence technology is out of scope; strategies, the conflict
detector and the booking flow only ever talk to this interface, injected
at construction time. Each call is atomic on its own. Only
``create_reservation`` is required to serialize against concurrent
callers, since it is the step that enforces the no-double-booking
invariant.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from booking_engine.errors import BookingEngineError
from booking_engine.schemas.event_schema import BookableEvent
from booking_engine.schemas.reservation_schema import (
    Reservation,
    ReservationStatus,
    RoutingResponseRecord,
)
from booking_engine.schemas.team_schema import TeamMember


class SlotConflictError(BookingEngineError):
    """Raised when a reservation would overlap an active one on the same event."""

    def __init__(self, event_id: str, start: datetime, end: datetime) -> None:
        super().__init__(
            f"Slot {start.isoformat()}-{end.isoformat()} on event '{event_id}' is already booked"
        )
        self.event_id = event_id
        self.start = start
        self.end = end


class ReservationNotFoundError(BookingEngineError):
    """Raised when a reservation id does not exist."""


class Storage(ABC):
    """Persistence collaborator for events, rosters and reservations."""

    @abstractmethod
    async def get_event(self, event_id: str) -> Optional[BookableEvent]:
        ...

    @abstractmethod
    async def list_active_reservations(self, event_id: str) -> list[Reservation]:
        """Reservations on the event with status pending or confirmed."""

    @abstractmethod
    async def list_team_members(
        self, team_id: str, active_only: bool = True
    ) -> list[TeamMember]:
        """Team roster in stable roster order."""

    @abstractmethod
    async def count_recent_assignments(self, person_id: str, since_days: int) -> int:
        """Reservations assigned to ``person_id`` created in the last ``since_days``."""

    @abstractmethod
    async def touch_last_assigned(self, member_id: str, timestamp: datetime) -> None:
        ...

    @abstractmethod
    async def create_reservation(self, reservation: Reservation) -> Reservation:
        """Insert a reservation, re-checking overlap atomically.

        Raises:
            SlotConflictError: If an active reservation on the same event
                overlaps the new one.
        """

    @abstractmethod
    async def get_reservation(self, reservation_id: str) -> Optional[Reservation]:
        ...

    @abstractmethod
    async def update_reservation_status(
        self, reservation_id: str, status: ReservationStatus
    ) -> Reservation:
        """Persist a status change.

        Raises:
            ReservationNotFoundError: If the reservation does not exist.
        """

    @abstractmethod
    async def record_routing_response(self, record: RoutingResponseRecord) -> None:
        ...

    @abstractmethod
    async def list_routing_responses(self, event_id: str) -> list[RoutingResponseRecord]:
        ...
