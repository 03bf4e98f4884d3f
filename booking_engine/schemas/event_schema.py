"""Bookable event, qualification form and routing rule models."""

from datetime import datetime, timedelta
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, model_validator


class AssignmentStrategy(str, Enum):
    """How a team-owned event picks its assignee(s)."""
    INDIVIDUAL = "individual"
    COLLECTIVE = "collective"
    ROUND_ROBIN = "round_robin"
    SMART = "smart"


class QuestionType(str, Enum):
    """Qualification form field types."""
    TEXT = "text"
    MULTIPLE_CHOICE = "multiple_choice"
    DROPDOWN = "dropdown"
    CHECKBOXES = "checkboxes"

    @property
    def is_choice(self) -> bool:
        return self is not QuestionType.TEXT

    @property
    def is_multi(self) -> bool:
        return self is QuestionType.CHECKBOXES


class Question(BaseModel):
    """One question on an event's qualification form."""
    id: str
    text: str
    type: QuestionType = QuestionType.TEXT
    options: list[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def _choice_needs_options(self) -> "Question":
        if self.type.is_choice and not self.options:
            raise ValueError(f"Question '{self.id}' of type {self.type.value} needs options")
        return self


class RuleOperator(str, Enum):
    """Comparison applied by a manual routing rule."""
    EQUALS = "equals"
    CONTAINS = "contains"
    INCLUDES = "includes"


class Rule(BaseModel):
    """If the answer to ``question_id`` matches, assign to ``assignee_id``."""
    question_id: str
    operator: RuleOperator = RuleOperator.EQUALS
    expected_value: str
    assignee_id: str = ""


class BookableEvent(BaseModel):
    """A meeting type guests can reserve slots against."""
    id: str
    name: str = ""
    owner_id: Optional[str] = None
    duration_minutes: int = Field(gt=0)
    buffer_minutes: int = Field(default=0, ge=0)
    team_id: Optional[str] = None
    assignment_strategy: AssignmentStrategy = AssignmentStrategy.INDIVIDUAL
    routing_enabled: bool = False
    rules: list[Rule] = Field(default_factory=list)
    form_schema: Optional[list[Question]] = None
    requires_confirmation: bool = False

    @property
    def is_team_event(self) -> bool:
        return self.team_id is not None

    @property
    def duration(self) -> timedelta:
        return timedelta(minutes=self.duration_minutes)

    @property
    def buffer(self) -> timedelta:
        return timedelta(minutes=self.buffer_minutes)

    def end_for(self, start: datetime) -> datetime:
        """End of a reservation starting at ``start``."""
        return start + self.duration

    def question(self, question_id: str) -> Optional[Question]:
        for q in self.form_schema or []:
            if q.id == question_id:
                return q
        return None
