"""
Routing insights over stored qualification responses.

Summarizes how guests answered an event's qualification form and how
consistently each answer led to the same assignee, plus a CSV export of
the raw responses for offline analysis.
"""

import csv
import io
import logging
from dataclasses import dataclass, field
from typing import Optional, Sequence

from booking_engine.errors import BookingEngineError
from booking_engine.schemas.answer_schema import answer_as_text
from booking_engine.schemas.event_schema import BookableEvent, QuestionType
from booking_engine.schemas.reservation_schema import RoutingResponseRecord

logger = logging.getLogger(__name__)


class RoutingNotEnabledError(BookingEngineError):
    """Raised when insights are requested for an event without routing forms."""


@dataclass
class QuestionInsight:
    question_id: str
    text: str
    type: QuestionType
    response_counts: dict[str, int] = field(default_factory=dict)


@dataclass
class AnswerAccuracy:
    """How often one answer value was routed to its most common assignee."""
    answer: str
    total_responses: int
    top_assignee_id: Optional[str]
    assignment_count: int
    accuracy: int


@dataclass
class RoutingInsightsReport:
    total_responses: int
    questions: list[QuestionInsight]
    assignment_accuracy: list[AnswerAccuracy]


def _require_routing(event: BookableEvent) -> None:
    if not event.form_schema or not event.routing_enabled:
        raise RoutingNotEnabledError(f"Routing forms not enabled for event '{event.id}'")


class RoutingInsights:
    """Builds insight reports and CSV exports for one event."""

    def build(
        self, event: BookableEvent, records: Sequence[RoutingResponseRecord]
    ) -> RoutingInsightsReport:
        _require_routing(event)

        counts: dict[str, dict[str, int]] = {q.id: {} for q in event.form_schema or []}
        per_answer: dict[str, dict[str, int]] = {}
        totals: dict[str, int] = {}

        for record in records:
            for question_id, answer in record.responses.items():
                key = answer_as_text(answer)
                question_counts = counts.setdefault(question_id, {})
                question_counts[key] = question_counts.get(key, 0) + 1

                totals[key] = totals.get(key, 0) + 1
                members = per_answer.setdefault(key, {})
                if record.assignee_id:
                    members[record.assignee_id] = members.get(record.assignee_id, 0) + 1

        accuracy = []
        for answer, total in totals.items():
            top_id, top_count = None, 0
            for assignee_id, count in per_answer.get(answer, {}).items():
                if count > top_count:
                    top_id, top_count = assignee_id, count
            accuracy.append(AnswerAccuracy(
                answer=answer,
                total_responses=total,
                top_assignee_id=top_id,
                assignment_count=top_count,
                accuracy=round(top_count / total * 100) if total else 0,
            ))

        questions = [
            QuestionInsight(
                question_id=q.id, text=q.text, type=q.type,
                response_counts=counts.get(q.id, {}),
            )
            for q in event.form_schema or []
        ]
        logger.debug("Built routing insights for %s from %d response(s)", event.id, len(records))
        return RoutingInsightsReport(
            total_responses=len(records),
            questions=questions,
            assignment_accuracy=accuracy,
        )

    def export_csv(
        self, event: BookableEvent, records: Sequence[RoutingResponseRecord]
    ) -> str:
        """Newest-first CSV of every stored response, one column per question."""
        _require_routing(event)
        questions = event.form_schema or []

        buffer = io.StringIO()
        writer = csv.writer(buffer)
        writer.writerow(
            ["Reservation ID", "Assigned Member", *(q.text for q in questions), "Submitted At"]
        )
        for record in sorted(records, key=lambda r: r.submitted_at, reverse=True):
            answers = []
            for q in questions:
                answer = record.responses.get(q.id)
                answers.append(answer_as_text(answer) if answer is not None else "")
            writer.writerow([
                record.reservation_id,
                record.assignee_id or "Unassigned",
                *answers,
                record.submitted_at.isoformat(),
            ])
        return buffer.getvalue()
