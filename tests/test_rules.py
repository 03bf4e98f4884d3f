"""Tests for manual routing rule evaluation and qualification answer parsing."""

import pytest

from booking_engine.routing.rules import RuleEvaluator, rule_matches
from booking_engine.schemas.answer_schema import (
    ChoiceAnswer,
    MultiChoiceAnswer,
    QualificationResponse,
    TextAnswer,
    answer_as_text,
)
from booking_engine.schemas.event_schema import Question, QuestionType, Rule, RuleOperator
from tests.conftest import routing_questions


def _rule(question_id="urgency", operator=RuleOperator.EQUALS, expected="high", assignee="zed"):
    return Rule(question_id=question_id, operator=operator, expected_value=expected,
                assignee_id=assignee)


class TestRuleMatches:
    def test_equals_on_choice(self):
        assert rule_matches(_rule(), ChoiceAnswer(value="high"))
        assert not rule_matches(_rule(), ChoiceAnswer(value="low"))

    def test_equals_is_exact(self):
        assert not rule_matches(_rule(), TextAnswer(value="High"))

    def test_contains_is_case_insensitive(self):
        rule = _rule(question_id="notes", operator=RuleOperator.CONTAINS, expected="Refund")
        assert rule_matches(rule, TextAnswer(value="I want a refund please"))

    def test_includes_on_multi_choice(self):
        rule = _rule(question_id="topics", operator=RuleOperator.INCLUDES, expected="billing")
        assert rule_matches(rule, MultiChoiceAnswer(values=("onboarding", "billing")))
        assert not rule_matches(rule, MultiChoiceAnswer(values=("onboarding",)))

    def test_includes_does_not_apply_to_single_values(self):
        rule = _rule(operator=RuleOperator.INCLUDES)
        assert not rule_matches(rule, ChoiceAnswer(value="high"))

    def test_equals_does_not_apply_to_multi_choice(self):
        assert not rule_matches(_rule(), MultiChoiceAnswer(values=("high",)))


class TestRuleEvaluator:
    def setup_method(self):
        self.evaluator = RuleEvaluator()
        self.responses = QualificationResponse.parse(
            {"urgency": "high", "language": "spanish", "topics": ["billing"]},
            routing_questions(),
        )

    def test_first_matching_rule_wins(self):
        rules = [
            _rule(question_id="language", expected="german", assignee="gus"),
            _rule(question_id="language", expected="spanish", assignee="sol"),
            _rule(assignee="zed"),
        ]
        assert self.evaluator.evaluate(rules, self.responses) == "sol"

    def test_no_match_returns_none(self):
        rules = [_rule(expected="low")]
        assert self.evaluator.evaluate(rules, self.responses) is None

    def test_rule_without_assignee_is_skipped(self):
        rules = [_rule(assignee=""), _rule(question_id="language", expected="spanish", assignee="sol")]
        assert self.evaluator.evaluate(rules, self.responses) == "sol"

    def test_unanswered_question_is_skipped(self):
        rules = [_rule(question_id="notes", operator=RuleOperator.CONTAINS, expected="x")]
        assert self.evaluator.evaluate(rules, self.responses) is None

    def test_no_rules(self):
        assert self.evaluator.evaluate([], self.responses) is None

    def test_no_responses(self):
        assert self.evaluator.evaluate([_rule()], None) is None
        assert self.evaluator.evaluate([_rule()], QualificationResponse()) is None


class TestQualificationResponseParse:
    def test_variants_follow_question_types(self):
        parsed = QualificationResponse.parse(
            {"language": "spanish", "topics": ["billing", "onboarding"], "notes": "hi"},
            routing_questions(),
        )
        assert parsed.get("language") == ChoiceAnswer(value="spanish")
        assert parsed.get("topics") == MultiChoiceAnswer(values=("billing", "onboarding"))
        assert parsed.get("notes") == TextAnswer(value="hi")

    def test_single_string_for_checkboxes_becomes_multi(self):
        parsed = QualificationResponse.parse({"topics": "billing"}, routing_questions())
        assert parsed.get("topics") == MultiChoiceAnswer(values=("billing",))

    def test_without_schema_strings_are_text(self):
        parsed = QualificationResponse.parse({"language": "spanish"})
        assert isinstance(parsed.get("language"), TextAnswer)

    def test_empty_answers_are_dropped(self):
        parsed = QualificationResponse.parse({"notes": "  ", "topics": [], "urgency": None})
        assert parsed.is_empty

    def test_unsupported_value_rejected(self):
        with pytest.raises(ValueError, match="Unsupported answer type"):
            QualificationResponse.parse({"notes": 42})

    def test_tagged_round_trip_through_json(self):
        parsed = QualificationResponse.parse({"topics": ["billing"]}, routing_questions())
        restored = QualificationResponse.model_validate_json(parsed.model_dump_json())
        assert restored == parsed

    def test_answer_as_text_joins_multi_choice(self):
        assert answer_as_text(MultiChoiceAnswer(values=("a", "b"))) == "a, b"
        assert answer_as_text(ChoiceAnswer(value="a")) == "a"


class TestQuestion:
    def test_choice_question_needs_options(self):
        with pytest.raises(ValueError, match="needs options"):
            Question(id="q", text="Pick one", type=QuestionType.DROPDOWN)
