"""
Offline console demo: runs team booking scenarios without any API keys.

Uses the real conflict detector, orchestrator, strategies and booking
service over in-memory storage and a static calendar. No network calls.

Usage:
    python console_demo.py
    python console_demo.py --scenario smart
    python console_demo.py --scenario collective
"""

import argparse
import asyncio
import sys
from datetime import datetime, timedelta, timezone

from booking_engine.availability.oracle import AvailabilityOracle
from booking_engine.availability.static_client import StaticCalendarClient
from booking_engine.booking.service import BookingService
from booking_engine.config import settings
from booking_engine.routing.orchestrator import AssignmentOrchestrator
from booking_engine.schemas.booking_schema import BookingOutcome, BookingRequest
from booking_engine.schemas.event_schema import (
    AssignmentStrategy,
    BookableEvent,
    Question,
    QuestionType,
    Rule,
    RuleOperator,
)
from booking_engine.schemas.team_schema import TeamMember
from booking_engine.storage.memory import InMemoryStorage

GREEN = "\033[92m"
YELLOW = "\033[93m"
RED = "\033[91m"
DIM = "\033[2m"
RESET = "\033[0m"
BOLD = "\033[1m"

TEAM_ID = "team-support"

DEMO_QUESTIONS = [
    Question(id="language", text="Preferred language", type=QuestionType.DROPDOWN,
             options=["english", "spanish", "german"]),
    Question(id="urgency", text="How urgent is this?", type=QuestionType.MULTIPLE_CHOICE,
             options=["low", "high"]),
    Question(id="topic", text="What do you need help with?"),
]

DEMO_MEMBERS = [
    TeamMember(id="tm-ana", person_id="ana", team_id=TEAM_ID, name="Ana",
               skills=["billing"], languages=["spanish", "english"],
               calendar_sync_enabled=True),
    TeamMember(id="tm-ben", person_id="ben", team_id=TEAM_ID, name="Ben",
               skills=["onboarding"], languages=["english"],
               calendar_sync_enabled=True),
    TeamMember(id="tm-cleo", person_id="cleo", team_id=TEAM_ID, name="Cleo",
               skills=["integrations"], languages=["german", "english"],
               calendar_sync_enabled=True),
]


class ConsoleSession:
    """Drives the engine through a scripted scenario and prints each step."""

    SCENARIOS = ("round_robin", "smart", "collective", "conflict", "rules")

    def __init__(self) -> None:
        self.now = datetime(2025, 3, 17, 8, 0, tzinfo=timezone.utc)
        self.storage = InMemoryStorage(clock=self._clock)
        self.calendar = StaticCalendarClient()
        oracle = AvailabilityOracle(self.calendar, timeout_seconds=settings.oracle.timeout_seconds)
        self.orchestrator = AssignmentOrchestrator(self.storage, oracle, clock=self._clock)
        self.service = BookingService(self.storage, self.orchestrator, clock=self._clock)
        for member in DEMO_MEMBERS:
            self.storage.add_member(member)

    def _clock(self) -> datetime:
        self.now += timedelta(seconds=1)
        return self.now

    def say(self, text: str) -> None:
        print(f"{GREEN}{BOLD}[engine]{RESET} {GREEN}{text}{RESET}")

    def system_log(self, text: str) -> None:
        print(f"{DIM}  >> {text}{RESET}")

    def _event(self, strategy: AssignmentStrategy, **overrides) -> BookableEvent:
        fields = dict(
            id=f"evt-{strategy.value}",
            name=f"Support call ({strategy.value})",
            owner_id="ana",
            duration_minutes=30,
            team_id=TEAM_ID,
            assignment_strategy=strategy,
            form_schema=DEMO_QUESTIONS,
        )
        fields.update(overrides)
        return self.storage.add_event(BookableEvent(**fields))

    def _slot(self, hour: int, minute: int = 0) -> datetime:
        return datetime(2025, 3, 18, hour, minute, tzinfo=timezone.utc)

    def _report(self, outcome: BookingOutcome) -> None:
        if outcome.success and outcome.reservation is not None:
            res = outcome.reservation
            who = ", ".join(res.collective_assignee_ids) or res.assignee_id
            self.say(f"{outcome.message} {res.start:%H:%M}-{res.end:%H:%M} with {who}")
        else:
            print(f"{YELLOW}{BOLD}[engine]{RESET} {YELLOW}{outcome.message}{RESET}")
        if outcome.assignment is not None and outcome.assignment.trace:
            self.system_log("trace: " + " -> ".join(outcome.assignment.trace))

    async def _book(self, event: BookableEvent, start: datetime, **kwargs) -> BookingOutcome:
        self.system_log(f"request {event.id} at {start:%H:%M} {kwargs or ''}")
        outcome = await self.service.create_booking(
            BookingRequest(event_id=event.id, start=start, **kwargs)
        )
        self._report(outcome)
        return outcome

    async def run_round_robin(self) -> None:
        event = self._event(AssignmentStrategy.ROUND_ROBIN)
        for hour in (9, 10, 11, 12):
            await self._book(event, self._slot(hour))

    async def run_smart(self) -> None:
        event = self._event(AssignmentStrategy.SMART)
        await self._book(event, self._slot(9), responses={"language": "spanish"})
        await self._book(event, self._slot(10), responses={"topic": "need help with integrations"})
        await self._book(event, self._slot(11), legacy_form_data={"message": "Hallo, danke!"})

    async def run_collective(self) -> None:
        event = self._event(AssignmentStrategy.COLLECTIVE)
        await self._book(event, self._slot(9))
        self.calendar.mark_busy("cleo", self._slot(10), self._slot(11))
        self.system_log("cleo is busy 10:00-11:00")
        await self._book(event, self._slot(10))

    async def run_conflict(self) -> None:
        event = self._event(AssignmentStrategy.ROUND_ROBIN)
        await self._book(event, self._slot(10))
        await self._book(event, self._slot(10, 15))
        await self._book(event, self._slot(10, 30))

    async def run_rules(self) -> None:
        event = self._event(
            AssignmentStrategy.SMART,
            routing_enabled=True,
            rules=[Rule(question_id="urgency", operator=RuleOperator.EQUALS,
                        expected_value="high", assignee_id="cleo")],
        )
        await self._book(event, self._slot(9), responses={"urgency": "high", "language": "spanish"})
        await self._book(event, self._slot(10), responses={"urgency": "low", "language": "spanish"})
        report = await self.service.routing_insights(event.id)
        for item in report.assignment_accuracy:
            self.system_log(
                f"answer '{item.answer}': {item.accuracy}% -> {item.top_assignee_id}"
            )

    async def run_scenario(self, scenario: str) -> None:
        if scenario not in self.SCENARIOS:
            print(f"{RED}Unknown scenario: {scenario}. Choose from: {', '.join(self.SCENARIOS)}{RESET}")
            sys.exit(1)
        print(f"\n{BOLD}=== Scenario: {scenario} ==={RESET}\n")
        await getattr(self, f"run_{scenario}")()

    async def run_all(self) -> None:
        for scenario in self.SCENARIOS:
            await ConsoleSession().run_scenario(scenario)


def main() -> None:
    parser = argparse.ArgumentParser(description="Offline team booking demo.")
    parser.add_argument(
        "--scenario",
        choices=ConsoleSession.SCENARIOS,
        default=None,
        help="Run one scenario (default: all).",
    )
    args = parser.parse_args()

    session = ConsoleSession()
    if args.scenario:
        asyncio.run(session.run_scenario(args.scenario))
    else:
        asyncio.run(session.run_all())


if __name__ == "__main__":
    main()
