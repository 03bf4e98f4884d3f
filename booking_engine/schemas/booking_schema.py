"""Booking request and outcome models for the public booking flow."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from pydantic import AwareDatetime, BaseModel

from booking_engine.schemas.reservation_schema import Reservation
from booking_engine.schemas.result_schema import AssigneeResult


class BookingRequest(BaseModel):
    """Validated booking request data."""
    event_id: str
    start: AwareDatetime
    responses: Optional[dict[str, Any]] = None
    legacy_form_data: Optional[dict[str, Any]] = None


class BookingRejection(str, Enum):
    """Expected, user-facing reasons a booking is refused."""
    SLOT_TAKEN = "slot_taken"
    NO_MEMBER_AVAILABLE = "no_member_available"


@dataclass
class BookingOutcome:
    """Result of a booking attempt."""
    success: bool
    message: str
    reservation: Optional[Reservation] = None
    rejection: Optional[BookingRejection] = None
    assignment: Optional[AssigneeResult] = None
