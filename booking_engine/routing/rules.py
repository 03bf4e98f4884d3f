"""
Manual routing rules: "if answer X then assign to Y".

Rules are evaluated in declaration order and the first match wins. A rule
match always takes precedence over the round-robin and smart algorithms,
provided the matched member is eligible and free.
"""

from typing import Optional, Sequence

from booking_engine.logging_context import get_attempt_logger
from booking_engine.schemas.answer_schema import (
    Answer,
    ChoiceAnswer,
    MultiChoiceAnswer,
    QualificationResponse,
    TextAnswer,
)
from booking_engine.schemas.event_schema import Rule, RuleOperator

logger = get_attempt_logger(__name__)


def rule_matches(rule: Rule, answer: Answer) -> bool:
    """Apply ``rule.operator`` to one answer, dispatching on its variant."""
    if isinstance(answer, (TextAnswer, ChoiceAnswer)):
        if rule.operator is RuleOperator.EQUALS:
            return answer.value == rule.expected_value
        if rule.operator is RuleOperator.CONTAINS:
            return rule.expected_value.lower() in answer.value.lower()
        return False
    if isinstance(answer, MultiChoiceAnswer):
        if rule.operator is RuleOperator.INCLUDES:
            return rule.expected_value in answer.values
        return False
    return False


class RuleEvaluator:
    """Finds the assignee named by the first matching rule."""

    def evaluate(
        self,
        rules: Sequence[Rule],
        responses: Optional[QualificationResponse],
    ) -> Optional[str]:
        if not rules or responses is None or responses.is_empty:
            return None

        for index, rule in enumerate(rules):
            if not rule.assignee_id:
                continue
            answer = responses.get(rule.question_id)
            if answer is None:
                continue
            if rule_matches(rule, answer):
                logger.info(
                    "Routing rule #%d (%s %s %r) matched -> %s",
                    index, rule.question_id, rule.operator.value,
                    rule.expected_value, rule.assignee_id,
                )
                return rule.assignee_id
        return None
