"""
Qualification answers as a tagged union.

Guests answer an event's qualification form before booking. Each answer
is one of three variants, so rule evaluation and scoring dispatch on the
variant rather than coercing loosely typed values:

    TextAnswer         free text ("text" questions)
    ChoiceAnswer       one option ("multiple_choice" / "dropdown")
    MultiChoiceAnswer  several options ("checkboxes")
"""

from typing import Annotated, Any, Iterator, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from booking_engine.schemas.event_schema import Question


class TextAnswer(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["text"] = "text"
    value: str


class ChoiceAnswer(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["choice"] = "choice"
    value: str


class MultiChoiceAnswer(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["multi_choice"] = "multi_choice"
    values: tuple[str, ...]


Answer = Annotated[
    Union[TextAnswer, ChoiceAnswer, MultiChoiceAnswer],
    Field(discriminator="kind"),
]


def answer_as_text(answer: Answer) -> str:
    """Flatten an answer to display text (multi-choice joined with ', ')."""
    if isinstance(answer, MultiChoiceAnswer):
        return ", ".join(answer.values)
    return answer.value


def _to_answer(raw: Any, question: Optional[Question]) -> Optional[Answer]:
    if isinstance(raw, (list, tuple)):
        values = tuple(str(v) for v in raw if str(v).strip())
        return MultiChoiceAnswer(values=values) if values else None
    if isinstance(raw, str):
        if not raw.strip():
            return None
        if question is not None and question.type.is_choice:
            if question.type.is_multi:
                return MultiChoiceAnswer(values=(raw,))
            return ChoiceAnswer(value=raw)
        return TextAnswer(value=raw)
    raise ValueError(f"Unsupported answer type: {type(raw).__name__}")


class QualificationResponse(BaseModel):
    """Immutable mapping of question id to answer for one booking attempt."""

    model_config = ConfigDict(frozen=True)

    answers: dict[str, Answer] = Field(default_factory=dict)

    @classmethod
    def parse(
        cls,
        raw: Optional[dict[str, Any]],
        form_schema: Optional[list[Question]] = None,
    ) -> "QualificationResponse":
        """Build tagged answers from loosely typed form input.

        Question types decide the variant when a schema is supplied;
        otherwise strings become free text and lists become multi-choice.
        Empty answers are dropped.
        """
        by_id = {q.id: q for q in form_schema or []}
        answers: dict[str, Answer] = {}
        for question_id, value in (raw or {}).items():
            if value is None:
                continue
            answer = _to_answer(value, by_id.get(question_id))
            if answer is not None:
                answers[question_id] = answer
        return cls(answers=answers)

    def get(self, question_id: str) -> Optional[Answer]:
        return self.answers.get(question_id)

    def items(self) -> Iterator[tuple[str, Answer]]:
        return iter(self.answers.items())

    @property
    def is_empty(self) -> bool:
        return not self.answers
