"""Reservation lifecycle and routing response records."""

import uuid
from enum import Enum
from typing import Optional

from pydantic import AwareDatetime, BaseModel, Field, model_validator

from booking_engine.schemas.answer_schema import QualificationResponse
from booking_engine.utils import utc_now


class ReservationStatus(str, Enum):
    """Lifecycle status of a reservation."""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


# Statuses that hold a slot and take part in conflict checks
ACTIVE_STATUSES = frozenset({ReservationStatus.PENDING, ReservationStatus.CONFIRMED})

VALID_NEXT: dict[ReservationStatus, frozenset[ReservationStatus]] = {
    ReservationStatus.PENDING: frozenset({ReservationStatus.CONFIRMED, ReservationStatus.CANCELLED}),
    ReservationStatus.CONFIRMED: frozenset({ReservationStatus.CANCELLED, ReservationStatus.COMPLETED}),
    ReservationStatus.CANCELLED: frozenset(),
    ReservationStatus.COMPLETED: frozenset(),
}


def _new_reservation_id() -> str:
    return f"RES-{uuid.uuid4().hex[:8].upper()}"


class Reservation(BaseModel):
    """A concrete time-boxed booking against an event."""
    id: str = Field(default_factory=_new_reservation_id)
    event_id: str
    start: AwareDatetime
    end: AwareDatetime
    status: ReservationStatus = ReservationStatus.PENDING
    assignee_id: Optional[str] = None
    collective_assignee_ids: list[str] = Field(default_factory=list)
    created_at: AwareDatetime = Field(default_factory=utc_now)

    @model_validator(mode="after")
    def _end_after_start(self) -> "Reservation":
        if self.end <= self.start:
            raise ValueError("Reservation end must be after start")
        return self

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_STATUSES


class RoutingResponseRecord(BaseModel):
    """Qualification answers stored alongside a team booking."""
    event_id: str
    reservation_id: str
    assignee_id: Optional[str] = None
    responses: QualificationResponse
    submitted_at: AwareDatetime = Field(default_factory=utc_now)
