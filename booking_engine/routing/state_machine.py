"""
Finite state machine for one team assignment attempt.

    requested -> rule_check -> availability_check -> scoring -> assigned
                     |                |                           ^
                     |                +---------------------------+
                     +--> assigned (rule match)     any check --> unassigned

Strategies drive the machine as they progress, so every result carries a
deterministic trace of how the assignee was (or was not) found.

Usage:
    sm = AssignmentStateMachine()
    sm.transition(AssignmentTrigger.BEGIN_RULE_CHECK)
    assert sm.current_state == AssignmentState.RULE_CHECK
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from booking_engine.errors import BookingEngineError
from booking_engine.logging_context import get_attempt_logger

logger = get_attempt_logger(__name__)


class AssignmentState(str, Enum):
    """All states of an assignment attempt."""
    REQUESTED = "requested"
    RULE_CHECK = "rule_check"
    AVAILABILITY_CHECK = "availability_check"
    SCORING = "scoring"
    ASSIGNED = "assigned"
    UNASSIGNED = "unassigned"


class AssignmentTrigger(str, Enum):
    """Events that cause state transitions."""
    BEGIN_RULE_CHECK = "begin_rule_check"
    SKIP_RULES = "skip_rules"
    RULE_MATCHED = "rule_matched"
    NO_RULE_MATCH = "no_rule_match"
    NO_ELIGIBLE_MEMBERS = "no_eligible_members"
    CANDIDATES_AVAILABLE = "candidates_available"
    MEMBER_SELECTED = "member_selected"
    NONE_AVAILABLE = "none_available"
    BEST_SELECTED = "best_selected"


@dataclass
class Transition:
    """A single valid state transition."""
    from_state: AssignmentState
    to_state: AssignmentState
    trigger: AssignmentTrigger


@dataclass
class StateEntry:
    """Recorded history entry for a state visit."""
    state: AssignmentState
    entered_at: datetime
    trigger: Optional[AssignmentTrigger] = None


class InvalidTransitionError(BookingEngineError):
    """Raised when a transition is not valid from the current state."""


class AssignmentStateMachine:
    """Deterministic state machine for a single booking attempt's assignment."""

    TRANSITIONS: list[Transition] = [
        # --- Entry ---
        Transition(AssignmentState.REQUESTED, AssignmentState.RULE_CHECK,
                   AssignmentTrigger.BEGIN_RULE_CHECK),
        Transition(AssignmentState.REQUESTED, AssignmentState.AVAILABILITY_CHECK,
                   AssignmentTrigger.SKIP_RULES),

        # --- Manual routing rules ---
        Transition(AssignmentState.RULE_CHECK, AssignmentState.ASSIGNED,
                   AssignmentTrigger.RULE_MATCHED),
        Transition(AssignmentState.RULE_CHECK, AssignmentState.AVAILABILITY_CHECK,
                   AssignmentTrigger.NO_RULE_MATCH),

        # --- Availability ---
        Transition(AssignmentState.AVAILABILITY_CHECK, AssignmentState.UNASSIGNED,
                   AssignmentTrigger.NO_ELIGIBLE_MEMBERS),
        Transition(AssignmentState.AVAILABILITY_CHECK, AssignmentState.UNASSIGNED,
                   AssignmentTrigger.NONE_AVAILABLE),
        Transition(AssignmentState.AVAILABILITY_CHECK, AssignmentState.ASSIGNED,
                   AssignmentTrigger.MEMBER_SELECTED),
        Transition(AssignmentState.AVAILABILITY_CHECK, AssignmentState.SCORING,
                   AssignmentTrigger.CANDIDATES_AVAILABLE),

        # --- Scoring ---
        Transition(AssignmentState.SCORING, AssignmentState.ASSIGNED,
                   AssignmentTrigger.BEST_SELECTED),
    ]

    TERMINAL_STATES = frozenset({AssignmentState.ASSIGNED, AssignmentState.UNASSIGNED})

    def __init__(self) -> None:
        self._current_state = AssignmentState.REQUESTED
        self._history: list[StateEntry] = [
            StateEntry(state=AssignmentState.REQUESTED, entered_at=datetime.now(timezone.utc))
        ]

    @property
    def current_state(self) -> AssignmentState:
        return self._current_state

    def transition(self, trigger: AssignmentTrigger) -> AssignmentState:
        """
        Execute a state transition.

        Raises:
            InvalidTransitionError: If no valid transition exists.
        """
        for t in self.TRANSITIONS:
            if t.from_state == self._current_state and t.trigger == trigger:
                old_state = self._current_state
                self._current_state = t.to_state
                self._history.append(StateEntry(
                    state=self._current_state,
                    entered_at=datetime.now(timezone.utc),
                    trigger=trigger,
                ))
                logger.debug(
                    "Assignment transition: %s -> %s (trigger: %s)",
                    old_state.value, self._current_state.value, trigger.value,
                )
                return self._current_state

        valid = [t.value for t in self.get_valid_triggers()]
        raise InvalidTransitionError(
            f"No valid transition from '{self._current_state.value}' "
            f"with trigger '{trigger.value}'. Valid triggers: {valid}"
        )

    def get_valid_triggers(self) -> list[AssignmentTrigger]:
        """Return all triggers valid from the current state."""
        return [t.trigger for t in self.TRANSITIONS if t.from_state == self._current_state]

    def get_history(self) -> list[StateEntry]:
        return list(self._history)

    def get_state_trace(self) -> tuple[str, ...]:
        """Ordered names of the states visited."""
        return tuple(entry.state.value for entry in self._history)

    def is_terminal(self) -> bool:
        return self._current_state in self.TERMINAL_STATES
