"""Outcomes of a team assignment attempt.

``AssigneeResult`` is one of four variants. Only ``Assigned`` and
``AssignedCollective`` allow a reservation to be persisted; ``Unassigned``
is a business rejection, not an error.
"""

from dataclasses import dataclass
from typing import Optional, Union

from booking_engine.schemas.event_schema import AssignmentStrategy


@dataclass(frozen=True)
class NotATeamEvent:
    """The event is individually owned; no team logic applies."""
    strategy: AssignmentStrategy = AssignmentStrategy.INDIVIDUAL
    trace: tuple[str, ...] = ()

    @property
    def is_assigned(self) -> bool:
        return False

    @property
    def assignee_ids(self) -> tuple[str, ...]:
        return ()


@dataclass(frozen=True)
class Assigned:
    """A single team member was picked."""
    assignee_id: str
    strategy: AssignmentStrategy
    via_rule: bool = False
    score: Optional[int] = None
    trace: tuple[str, ...] = ()

    @property
    def is_assigned(self) -> bool:
        return True

    @property
    def assignee_ids(self) -> tuple[str, ...]:
        return (self.assignee_id,)


@dataclass(frozen=True)
class AssignedCollective:
    """Every eligible member attends."""
    assignee_ids: tuple[str, ...]
    strategy: AssignmentStrategy = AssignmentStrategy.COLLECTIVE
    trace: tuple[str, ...] = ()

    @property
    def is_assigned(self) -> bool:
        return True


@dataclass(frozen=True)
class Unassigned:
    """Nobody could take the slot."""
    reason: str
    strategy: AssignmentStrategy
    trace: tuple[str, ...] = ()

    @property
    def is_assigned(self) -> bool:
        return False

    @property
    def assignee_ids(self) -> tuple[str, ...]:
        return ()


AssigneeResult = Union[NotATeamEvent, Assigned, AssignedCollective, Unassigned]
