"""
Assignment orchestrator: the single entry point for team assignment.

Loads the event and its active roster, then dispatches to the strategy
registered for the event's configured ``AssignmentStrategy``. Callers
must go through ``AssignmentOrchestrator.assign`` rather than invoking
strategies directly.
"""

from datetime import datetime
from typing import Any, Callable, Optional, Union

from booking_engine.availability.oracle import AvailabilityOracle
from booking_engine.config import ScoringConfig
from booking_engine.errors import BookingEngineError
from booking_engine.logging_context import get_attempt_logger
from booking_engine.routing.registry import get_strategy
from booking_engine.routing.rules import RuleEvaluator
from booking_engine.routing.scoring import MatchScorer
from booking_engine.routing.strategies import AssignmentContext
from booking_engine.schemas.answer_schema import QualificationResponse
from booking_engine.schemas.event_schema import AssignmentStrategy, BookableEvent
from booking_engine.schemas.legacy_schema import LegacyFormData
from booking_engine.schemas.result_schema import AssigneeResult, NotATeamEvent
from booking_engine.storage.base import Storage
from booking_engine.utils import utc_now

logger = get_attempt_logger(__name__)

ResponsesInput = Union[QualificationResponse, dict[str, Any], None]
LegacyInput = Union[LegacyFormData, dict[str, Any], None]


class EventNotFoundError(BookingEngineError):
    """Raised when the bookable event does not exist."""


class AssignmentConfigurationError(BookingEngineError):
    """Raised when an event's team/strategy configuration is inconsistent."""


def coerce_responses(event: BookableEvent, responses: ResponsesInput) -> Optional[QualificationResponse]:
    if responses is None or isinstance(responses, QualificationResponse):
        return responses
    return QualificationResponse.parse(responses, event.form_schema)


def coerce_legacy(form_data: LegacyInput) -> Optional[LegacyFormData]:
    if form_data is None or isinstance(form_data, LegacyFormData):
        return form_data
    return LegacyFormData.model_validate(form_data)


class AssignmentOrchestrator:
    """Resolves the strategy for an event and runs it."""

    def __init__(
        self,
        storage: Storage,
        oracle: AvailabilityOracle,
        rule_evaluator: Optional[RuleEvaluator] = None,
        scorer: Optional[MatchScorer] = None,
        scoring_config: Optional[ScoringConfig] = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.storage = storage
        self.oracle = oracle
        self.rule_evaluator = rule_evaluator or RuleEvaluator()
        self.scoring_config = scoring_config
        self.scorer = scorer
        self.clock = clock

    async def load_event(self, event_id: str) -> BookableEvent:
        event = await self.storage.get_event(event_id)
        if event is None:
            raise EventNotFoundError(f"Event '{event_id}' not found")
        return event

    async def assign(
        self,
        event_id: str,
        start: datetime,
        end: datetime,
        responses: ResponsesInput = None,
        legacy_form_data: LegacyInput = None,
        dry_run: bool = False,
    ) -> AssigneeResult:
        """
        Pick the assignee(s) for ``[start, end)`` on a team event.

        Args:
            responses: Qualification answers, tagged or raw (parsed against
                the event's form schema).
            legacy_form_data: Unstructured form fields from the old flow.
            dry_run: Run the strategy without updating ``last_assigned_at``.

        Raises:
            EventNotFoundError: If the event does not exist.
            AssignmentConfigurationError: If a team strategy is configured
                on an event without a team.
        """
        event = await self.load_event(event_id)
        strategy = event.assignment_strategy

        if not event.is_team_event:
            if strategy is not AssignmentStrategy.INDIVIDUAL:
                raise AssignmentConfigurationError(
                    f"Event '{event_id}' uses {strategy.value} assignment but has no team"
                )
            return NotATeamEvent()

        if strategy is AssignmentStrategy.INDIVIDUAL:
            logger.info("Event %s has a team but individual assignment; skipping team logic", event_id)
            return NotATeamEvent()

        try:
            implementation = get_strategy(strategy)
        except KeyError as exc:
            raise AssignmentConfigurationError(str(exc)) from exc

        members = await self.storage.list_team_members(event.team_id, active_only=True)
        handler = implementation(
            self.storage,
            self.oracle,
            rule_evaluator=self.rule_evaluator,
            scorer=self.scorer,
            scoring_config=self.scoring_config,
            clock=self.clock,
        )
        ctx = AssignmentContext(
            event=event,
            members=members,
            start=start,
            end=end,
            responses=coerce_responses(event, responses),
            legacy_form_data=coerce_legacy(legacy_form_data),
            dry_run=dry_run,
        )

        logger.info(
            "Assigning %s via %s across %d active member(s)%s",
            event_id, strategy.value, len(members), " (dry run)" if dry_run else "",
        )
        result = await handler.assign(ctx)
        logger.info("Assignment for %s finished: %s", event_id, " -> ".join(result.trace))
        return result
