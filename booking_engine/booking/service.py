"""
Booking flow: the public surface callers use to book a slot.

Order within one attempt is fixed: the conflict check must pass before
the orchestrator is asked for an assignee, and nothing is persisted until
both succeed. The final insert goes through ``Storage.create_reservation``,
which re-checks overlap atomically, so two simultaneous requests for the
same slot cannot both win.

Usage:
    service = BookingService(storage, orchestrator)
    outcome = await service.create_booking(BookingRequest(event_id="evt-1", start=start))
    if not outcome.success:
        ...  # show outcome.message, e.g. "please pick another time"
"""

from datetime import datetime
from typing import Callable, Optional

from booking_engine.conflict.detector import ConflictDetector
from booking_engine.errors import BookingEngineError
from booking_engine.logging_context import get_attempt_logger, new_attempt_id
from booking_engine.routing.insights import RoutingInsights, RoutingInsightsReport
from booking_engine.routing.orchestrator import (
    AssignmentOrchestrator,
    LegacyInput,
    ResponsesInput,
    coerce_responses,
)
from booking_engine.schemas.answer_schema import QualificationResponse
from booking_engine.schemas.booking_schema import BookingOutcome, BookingRejection, BookingRequest
from booking_engine.schemas.event_schema import BookableEvent
from booking_engine.schemas.reservation_schema import (
    VALID_NEXT,
    Reservation,
    ReservationStatus,
    RoutingResponseRecord,
)
from booking_engine.schemas.result_schema import AssignedCollective, AssigneeResult, NotATeamEvent
from booking_engine.storage.base import ReservationNotFoundError, SlotConflictError, Storage
from booking_engine.utils import utc_now

logger = get_attempt_logger(__name__)

SLOT_TAKEN_MESSAGE = "That time slot is already booked. Please pick another time."
NO_MEMBER_MESSAGE = "No team member is available for the selected time slot. Please pick another time."


class InvalidStatusTransitionError(BookingEngineError):
    """Raised when a reservation status change is not allowed."""


class BookingService:
    """Conflict check, team assignment and reservation lifecycle."""

    def __init__(
        self,
        storage: Storage,
        orchestrator: AssignmentOrchestrator,
        detector: Optional[ConflictDetector] = None,
        insights: Optional[RoutingInsights] = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.storage = storage
        self.orchestrator = orchestrator
        self.detector = detector or ConflictDetector(storage)
        self.insights = insights or RoutingInsights()
        self.clock = clock

    async def detect_conflict(self, event_id: str, start: datetime, end: datetime) -> bool:
        return await self.detector.has_conflict(event_id, start, end)

    async def assign_team_member(
        self,
        event_id: str,
        start: datetime,
        end: datetime,
        responses: ResponsesInput = None,
        legacy_form_data: LegacyInput = None,
    ) -> AssigneeResult:
        return await self.orchestrator.assign(event_id, start, end, responses, legacy_form_data)

    async def preview_assignment(
        self,
        event_id: str,
        start: datetime,
        end: Optional[datetime] = None,
        responses: ResponsesInput = None,
        legacy_form_data: LegacyInput = None,
    ) -> AssigneeResult:
        """Who would be assigned, without touching round-robin bookkeeping."""
        if end is None:
            event = await self.orchestrator.load_event(event_id)
            end = event.end_for(start)
        return await self.orchestrator.assign(
            event_id, start, end, responses, legacy_form_data, dry_run=True
        )

    async def create_booking(self, request: BookingRequest) -> BookingOutcome:
        new_attempt_id()
        event = await self.orchestrator.load_event(request.event_id)
        start = request.start
        end = event.end_for(start)
        logger.info("Booking request for %s at %s", event.id, start.isoformat())

        if await self.detect_conflict(event.id, start, end):
            return BookingOutcome(
                success=False, message=SLOT_TAKEN_MESSAGE, rejection=BookingRejection.SLOT_TAKEN
            )

        responses = coerce_responses(event, request.responses)
        # Round-robin bookkeeping is written here and is kept if the insert below loses a race
        assignment = await self.orchestrator.assign(
            event.id, start, end, responses, request.legacy_form_data
        )
        if not assignment.is_assigned and not isinstance(assignment, NotATeamEvent):
            return BookingOutcome(
                success=False,
                message=NO_MEMBER_MESSAGE,
                rejection=BookingRejection.NO_MEMBER_AVAILABLE,
                assignment=assignment,
            )

        reservation = Reservation(
            event_id=event.id,
            start=start,
            end=end,
            status=(
                ReservationStatus.PENDING if event.requires_confirmation
                else ReservationStatus.CONFIRMED
            ),
            assignee_id=(
                assignment.assignee_ids[0] if assignment.is_assigned else event.owner_id
            ),
            collective_assignee_ids=(
                list(assignment.assignee_ids) if isinstance(assignment, AssignedCollective) else []
            ),
            created_at=self.clock(),
        )
        try:
            stored = await self.storage.create_reservation(reservation)
        except SlotConflictError:
            logger.info("Slot taken by a concurrent booking")
            return BookingOutcome(
                success=False,
                message=SLOT_TAKEN_MESSAGE,
                rejection=BookingRejection.SLOT_TAKEN,
                assignment=assignment,
            )

        await self._record_routing_response(event, stored, responses)
        logger.info(
            "Booking %s created (%s) for %s",
            stored.id, stored.status.value, stored.assignee_id or "host",
        )
        return BookingOutcome(
            success=True,
            message=f"Booking confirmed. Reference number: {stored.id}.",
            reservation=stored,
            assignment=assignment,
        )

    async def _record_routing_response(
        self,
        event: BookableEvent,
        reservation: Reservation,
        responses: Optional[QualificationResponse],
    ) -> None:
        if not (event.is_team_event and event.routing_enabled and event.form_schema):
            return
        if responses is None or responses.is_empty:
            return
        await self.storage.record_routing_response(RoutingResponseRecord(
            event_id=event.id,
            reservation_id=reservation.id,
            assignee_id=reservation.assignee_id,
            responses=responses,
            submitted_at=self.clock(),
        ))

    # --- Lifecycle ---

    async def _transition(self, reservation_id: str, target: ReservationStatus) -> Reservation:
        reservation = await self.storage.get_reservation(reservation_id)
        if reservation is None:
            raise ReservationNotFoundError(f"Reservation {reservation_id} not found")
        if target not in VALID_NEXT[reservation.status]:
            raise InvalidStatusTransitionError(
                f"Cannot move reservation {reservation_id} from "
                f"'{reservation.status.value}' to '{target.value}'"
            )
        updated = await self.storage.update_reservation_status(reservation_id, target)
        logger.info("Reservation %s: %s -> %s", reservation_id, reservation.status.value, target.value)
        return updated

    async def confirm_booking(self, reservation_id: str) -> Reservation:
        return await self._transition(reservation_id, ReservationStatus.CONFIRMED)

    async def cancel_booking(self, reservation_id: str) -> Reservation:
        return await self._transition(reservation_id, ReservationStatus.CANCELLED)

    async def complete_booking(self, reservation_id: str) -> Reservation:
        return await self._transition(reservation_id, ReservationStatus.COMPLETED)

    # --- Routing analytics ---

    async def routing_insights(self, event_id: str) -> RoutingInsightsReport:
        event = await self.orchestrator.load_event(event_id)
        records = await self.storage.list_routing_responses(event_id)
        return self.insights.build(event, records)

    async def export_routing_responses(self, event_id: str) -> str:
        event = await self.orchestrator.load_event(event_id)
        records = await self.storage.list_routing_responses(event_id)
        return self.insights.export_csv(event, records)
