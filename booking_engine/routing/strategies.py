"""
Team assignment strategies.

Three algorithms for team-owned events (Individual events never reach
this module):

1. CollectiveStrategy - every eligible member must be free; all attend
2. RoundRobinStrategy - least recently assigned free member, checked one
                        at a time until the first success
3. SmartStrategy      - all eligible members checked concurrently, free
                        ones ranked by workload and match score

Round-robin and smart consult manual routing rules first. "Nobody
available" is an ``Unassigned`` result; storage errors propagate.
"""

import asyncio
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Optional

from booking_engine.availability.oracle import AvailabilityOracle
from booking_engine.config import ScoringConfig, settings
from booking_engine.logging_context import get_attempt_logger
from booking_engine.routing.rules import RuleEvaluator
from booking_engine.routing.scoring import MatchScorer, ScoringStrategy
from booking_engine.routing.state_machine import AssignmentStateMachine, AssignmentTrigger
from booking_engine.schemas.answer_schema import QualificationResponse
from booking_engine.schemas.event_schema import AssignmentStrategy, BookableEvent
from booking_engine.schemas.legacy_schema import LegacyFormData
from booking_engine.schemas.result_schema import (
    Assigned,
    AssignedCollective,
    AssigneeResult,
    Unassigned,
)
from booking_engine.schemas.team_schema import TeamMember
from booking_engine.storage.base import Storage
from booking_engine.utils import utc_now

logger = get_attempt_logger(__name__)

_NEVER = datetime.min.replace(tzinfo=timezone.utc)

NO_ELIGIBLE_MEMBERS = "no eligible team members"
NO_MEMBER_AVAILABLE = "no team member available"


@dataclass(frozen=True)
class AssignmentContext:
    """Everything a strategy needs for one booking attempt."""
    event: BookableEvent
    members: list[TeamMember]
    start: datetime
    end: datetime
    responses: Optional[QualificationResponse] = None
    legacy_form_data: Optional[LegacyFormData] = None
    dry_run: bool = False


@dataclass(frozen=True)
class ScoredCandidate:
    member: TeamMember
    recent_assignments: int
    match_bonus: int
    score: int


def order_by_last_assigned(members: list[TeamMember]) -> list[TeamMember]:
    """Never-assigned members first, then oldest assignment first; roster order breaks ties."""
    return sorted(
        members,
        key=lambda m: (m.last_assigned_at is not None, m.last_assigned_at or _NEVER),
    )


class BaseStrategy(ABC):
    """Shared plumbing: eligibility, rule precedence, bookkeeping."""

    strategy: AssignmentStrategy

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
        self.scoring_config = scoring_config or settings.scoring
        self.scorer = scorer or MatchScorer(self.scoring_config)
        self.clock = clock

    @abstractmethod
    async def assign(self, ctx: AssignmentContext) -> AssigneeResult:
        ...

    @staticmethod
    def eligible_members(ctx: AssignmentContext) -> list[TeamMember]:
        return [m for m in ctx.members if m.is_eligible]

    async def _is_free(self, member: TeamMember, ctx: AssignmentContext) -> bool:
        return await self.oracle.is_available(member.person_id, ctx.start, ctx.end)

    async def _record_assignment(self, member: TeamMember, ctx: AssignmentContext) -> None:
        if ctx.dry_run:
            return
        await self.storage.touch_last_assigned(member.id, self.clock())

    def _unassigned(
        self, reason: str, ctx: AssignmentContext, sm: AssignmentStateMachine
    ) -> Unassigned:
        logger.info("%s assignment for %s failed: %s", self.strategy.value, ctx.event.id, reason)
        return Unassigned(reason=reason, strategy=self.strategy, trace=sm.get_state_trace())

    async def _assign_by_rule(
        self, ctx: AssignmentContext, sm: AssignmentStateMachine
    ) -> Optional[Assigned]:
        """Rule-based precedence: the matched member wins if eligible and free."""
        sm.transition(AssignmentTrigger.BEGIN_RULE_CHECK)

        person_id = None
        if ctx.event.routing_enabled:
            person_id = self.rule_evaluator.evaluate(ctx.event.rules, ctx.responses)
        if person_id is None:
            sm.transition(AssignmentTrigger.NO_RULE_MATCH)
            return None

        member = next((m for m in ctx.members if m.person_id == person_id), None)
        if member is None or not member.is_eligible:
            logger.info("Rule target %s is not an eligible team member; falling back", person_id)
            sm.transition(AssignmentTrigger.NO_RULE_MATCH)
            return None
        if not await self._is_free(member, ctx):
            logger.info("Rule target %s is busy; falling back", person_id)
            sm.transition(AssignmentTrigger.NO_RULE_MATCH)
            return None

        await self._record_assignment(member, ctx)
        sm.transition(AssignmentTrigger.RULE_MATCHED)
        return Assigned(
            assignee_id=member.person_id,
            strategy=self.strategy,
            via_rule=True,
            trace=sm.get_state_trace(),
        )


class CollectiveStrategy(BaseStrategy):
    """All eligible members must be free for the whole window."""

    strategy = AssignmentStrategy.COLLECTIVE

    async def assign(self, ctx: AssignmentContext) -> AssigneeResult:
        sm = AssignmentStateMachine()
        sm.transition(AssignmentTrigger.SKIP_RULES)

        eligible = self.eligible_members(ctx)
        if not eligible:
            sm.transition(AssignmentTrigger.NO_ELIGIBLE_MEMBERS)
            return self._unassigned(NO_ELIGIBLE_MEMBERS, ctx, sm)

        # Every active member attends, including ones the oracle cannot check
        active = [m for m in ctx.members if m.active]
        unchecked = len(active) - len(eligible)
        if unchecked:
            sm.transition(AssignmentTrigger.NO_ELIGIBLE_MEMBERS)
            return self._unassigned(
                f"{unchecked} of {len(active)} members have no calendar sync", ctx, sm
            )

        person_ids = [m.person_id for m in eligible]
        results = await self.oracle.check_many(person_ids, ctx.start, ctx.end)
        busy = [pid for pid, free in zip(person_ids, results) if not free]
        if busy:
            sm.transition(AssignmentTrigger.NONE_AVAILABLE)
            return self._unassigned(
                f"{len(busy)} of {len(person_ids)} members unavailable", ctx, sm
            )

        sm.transition(AssignmentTrigger.MEMBER_SELECTED)
        return AssignedCollective(assignee_ids=tuple(person_ids), trace=sm.get_state_trace())


class RoundRobinStrategy(BaseStrategy):
    """Fair rotation by ``last_assigned_at``, stopping at the first free member."""

    strategy = AssignmentStrategy.ROUND_ROBIN

    async def assign(self, ctx: AssignmentContext) -> AssigneeResult:
        sm = AssignmentStateMachine()
        ruled = await self._assign_by_rule(ctx, sm)
        if ruled is not None:
            return ruled

        ordered = order_by_last_assigned(self.eligible_members(ctx))
        if not ordered:
            sm.transition(AssignmentTrigger.NO_ELIGIBLE_MEMBERS)
            return self._unassigned(NO_ELIGIBLE_MEMBERS, ctx, sm)

        for member in ordered:
            if await self._is_free(member, ctx):
                await self._record_assignment(member, ctx)
                sm.transition(AssignmentTrigger.MEMBER_SELECTED)
                logger.info("Round-robin assigned %s", member.person_id)
                return Assigned(
                    assignee_id=member.person_id,
                    strategy=self.strategy,
                    trace=sm.get_state_trace(),
                )

        sm.transition(AssignmentTrigger.NONE_AVAILABLE)
        return self._unassigned(NO_MEMBER_AVAILABLE, ctx, sm)


class SmartStrategy(BaseStrategy):
    """Workload- and affinity-ranked choice among free members."""

    strategy = AssignmentStrategy.SMART

    def workload_score(self, recent_assignments: int) -> int:
        """Base score minus the recent-workload penalty."""
        cfg = self.scoring_config
        return cfg.base_score - cfg.workload_penalty * recent_assignments

    async def _evaluate(
        self, member: TeamMember, ctx: AssignmentContext, scoring: ScoringStrategy
    ) -> Optional[ScoredCandidate]:
        if not await self._is_free(member, ctx):
            return None
        recent = await self.storage.count_recent_assignments(
            member.person_id, self.scoring_config.recent_window_days
        )
        bonus = scoring.score(member)
        return ScoredCandidate(
            member=member,
            recent_assignments=recent,
            match_bonus=bonus,
            score=self.workload_score(recent) + bonus,
        )

    async def rank(self, ctx: AssignmentContext) -> list[ScoredCandidate]:
        """Free eligible members, best first; roster order breaks ties."""
        scoring = self.scorer.strategy_for(ctx.responses, ctx.legacy_form_data)
        evaluated = await asyncio.gather(
            *(self._evaluate(m, ctx, scoring) for m in self.eligible_members(ctx))
        )
        available = [c for c in evaluated if c is not None]
        return sorted(available, key=lambda c: -c.score)

    async def assign(self, ctx: AssignmentContext) -> AssigneeResult:
        sm = AssignmentStateMachine()
        ruled = await self._assign_by_rule(ctx, sm)
        if ruled is not None:
            return ruled

        if not self.eligible_members(ctx):
            sm.transition(AssignmentTrigger.NO_ELIGIBLE_MEMBERS)
            return self._unassigned(NO_ELIGIBLE_MEMBERS, ctx, sm)

        ranked = await self.rank(ctx)
        if not ranked:
            sm.transition(AssignmentTrigger.NONE_AVAILABLE)
            return self._unassigned(NO_MEMBER_AVAILABLE, ctx, sm)

        sm.transition(AssignmentTrigger.CANDIDATES_AVAILABLE)
        best = ranked[0]
        await self._record_assignment(best.member, ctx)
        sm.transition(AssignmentTrigger.BEST_SELECTED)
        logger.info(
            "Smart assigned %s (score %d: %d recent, +%d match) over %d candidate(s)",
            best.member.person_id, best.score, best.recent_assignments,
            best.match_bonus, len(ranked),
        )
        return Assigned(
            assignee_id=best.member.person_id,
            strategy=self.strategy,
            score=best.score,
            trace=sm.get_state_trace(),
        )
