"""Shared test fixtures and helpers."""

from datetime import datetime, timedelta, timezone
from typing import Optional

import pytest

from booking_engine.availability.oracle import AvailabilityOracle
from booking_engine.availability.static_client import StaticCalendarClient
from booking_engine.booking.service import BookingService
from booking_engine.routing.orchestrator import AssignmentOrchestrator
from booking_engine.routing.state_machine import AssignmentStateMachine
from booking_engine.schemas.event_schema import (
    AssignmentStrategy,
    BookableEvent,
    Question,
    QuestionType,
    Rule,
)
from booking_engine.schemas.reservation_schema import Reservation, ReservationStatus
from booking_engine.schemas.team_schema import TeamMember
from booking_engine.storage.memory import InMemoryStorage

TEAM_ID = "team-1"
DAY = datetime(2025, 3, 18, tzinfo=timezone.utc)
START_OF_TESTS = datetime(2025, 3, 17, 8, 0, tzinfo=timezone.utc)


class TickingClock:
    """Deterministic clock that advances one second per reading."""

    def __init__(self, start: datetime = START_OF_TESTS) -> None:
        self.now = start

    def __call__(self) -> datetime:
        self.now += timedelta(seconds=1)
        return self.now


def at(hour: int, minute: int = 0) -> datetime:
    """A time on the test day (2025-03-18, UTC)."""
    return DAY.replace(hour=hour, minute=minute)


@pytest.fixture
def clock():
    return TickingClock()


@pytest.fixture
def storage(clock):
    return InMemoryStorage(clock=clock)


@pytest.fixture
def calendar():
    return StaticCalendarClient()


@pytest.fixture
def oracle(calendar):
    return AvailabilityOracle(calendar, timeout_seconds=0.2)


@pytest.fixture
def orchestrator(storage, oracle, clock):
    return AssignmentOrchestrator(storage, oracle, clock=clock)


@pytest.fixture
def service(storage, orchestrator, clock):
    return BookingService(storage, orchestrator, clock=clock)


@pytest.fixture
def state_machine():
    return AssignmentStateMachine()


def make_member(
    person_id: str,
    team_id: str = TEAM_ID,
    skills: Optional[list[str]] = None,
    languages: Optional[list[str]] = None,
    active: bool = True,
    calendar_sync_enabled: bool = True,
    last_assigned_at: Optional[datetime] = None,
) -> TeamMember:
    """Helper to create a TeamMember whose membership id is ``tm-<person_id>``."""
    return TeamMember(
        id=f"tm-{person_id}",
        person_id=person_id,
        team_id=team_id,
        name=person_id.title(),
        skills=skills or [],
        languages=languages or [],
        active=active,
        calendar_sync_enabled=calendar_sync_enabled,
        last_assigned_at=last_assigned_at,
    )


def make_event(
    event_id: str = "evt-1",
    strategy: AssignmentStrategy = AssignmentStrategy.ROUND_ROBIN,
    team_id: Optional[str] = TEAM_ID,
    duration_minutes: int = 30,
    buffer_minutes: int = 0,
    routing_enabled: bool = False,
    rules: Optional[list[Rule]] = None,
    form_schema: Optional[list[Question]] = None,
    requires_confirmation: bool = False,
    owner_id: Optional[str] = "host",
) -> BookableEvent:
    """Helper to create a BookableEvent with sensible defaults."""
    return BookableEvent(
        id=event_id,
        name=f"Event {event_id}",
        owner_id=owner_id,
        duration_minutes=duration_minutes,
        buffer_minutes=buffer_minutes,
        team_id=team_id,
        assignment_strategy=strategy,
        routing_enabled=routing_enabled,
        rules=rules or [],
        form_schema=form_schema,
        requires_confirmation=requires_confirmation,
    )


def make_reservation(
    start: datetime,
    minutes: int = 30,
    event_id: str = "evt-1",
    status: ReservationStatus = ReservationStatus.CONFIRMED,
    assignee_id: Optional[str] = None,
    created_at: Optional[datetime] = None,
) -> Reservation:
    """Helper to create a Reservation ``minutes`` long."""
    return Reservation(
        event_id=event_id,
        start=start,
        end=start + timedelta(minutes=minutes),
        status=status,
        assignee_id=assignee_id,
        created_at=created_at or START_OF_TESTS,
    )


def routing_questions() -> list[Question]:
    """Qualification form used by routing tests."""
    return [
        Question(id="language", text="Preferred language", type=QuestionType.DROPDOWN,
                 options=["english", "spanish", "german"]),
        Question(id="urgency", text="Urgency", type=QuestionType.MULTIPLE_CHOICE,
                 options=["low", "high"]),
        Question(id="topics", text="Topics", type=QuestionType.CHECKBOXES,
                 options=["billing", "onboarding", "integrations"]),
        Question(id="notes", text="Anything else?"),
    ]
