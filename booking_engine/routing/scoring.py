"""
Affinity scoring between a team member and an incoming booking request.

Two interchangeable scoring strategies, chosen by what the guest submitted:

1. QualificationFormScoring - structured answers to the event's form
2. LegacyFreeformScoring    - unstructured ``topic``/``message`` fields from
                              bookings made before qualification forms existed

All terms are additive and non-negative, so the score is always >= 0.

Usage:
    scorer = MatchScorer()
    bonus = scorer.score(member, responses, legacy_form_data)
"""

import re
from abc import ABC, abstractmethod
from typing import Optional

from booking_engine.config import ScoringConfig, settings
from booking_engine.logging_context import get_attempt_logger
from booking_engine.schemas.answer_schema import (
    MultiChoiceAnswer,
    QualificationResponse,
    TextAnswer,
)
from booking_engine.schemas.legacy_schema import LegacyFormData
from booking_engine.schemas.team_schema import TeamMember
from booking_engine.utils import normalize_tag, tokenize

logger = get_attempt_logger(__name__)


def _clean_tags(tags: list[str]) -> list[tuple[str, str]]:
    """(original, normalized) pairs, skipping blank tags."""
    return [(tag, normalize_tag(tag)) for tag in tags if tag.strip()]


class ScoringStrategy(ABC):
    """Scores one member against the request the strategy was built for."""

    name: str = "base"

    @abstractmethod
    def score(self, member: TeamMember) -> int:
        ...


class NoSignalScoring(ScoringStrategy):
    """Nothing submitted to match against."""

    name = "none"

    def score(self, member: TeamMember) -> int:
        return 0


class QualificationFormScoring(ScoringStrategy):
    """Skill/language matching against structured qualification answers."""

    name = "qualification_form"

    def __init__(self, responses: QualificationResponse, config: ScoringConfig) -> None:
        self.responses = responses
        self.config = config

    def _tag_points(self, tags: list[tuple[str, str]], text: str, options: tuple[str, ...],
                    points: int) -> int:
        total = 0
        for original, normalized in tags:
            if (text and normalized in text) or original in options:
                total += points
        return total

    def _keyword_points(self, answer: TextAnswer, skills: list[str], languages: list[str]) -> int:
        total = 0
        for token in tokenize(answer.value):
            if any(s in token or token in s for s in skills):
                total += self.config.keyword_points
            if any(lang in token or token in lang for lang in languages):
                total += self.config.keyword_points
        return total

    def score(self, member: TeamMember) -> int:
        skills = _clean_tags(member.skills)
        languages = _clean_tags(member.languages)
        total = 0

        for _, answer in self.responses.items():
            if isinstance(answer, MultiChoiceAnswer):
                text, options = "", answer.values
            else:
                text, options = answer.value.lower(), ()

            total += self._tag_points(skills, text, options, self.config.skill_points)
            total += self._tag_points(languages, text, options, self.config.language_points)

            # Keyword pass only applies to free text, not picked options
            if isinstance(answer, TextAnswer):
                total += self._keyword_points(
                    answer,
                    [n for _, n in skills],
                    [n for _, n in languages],
                )
        return total


class LegacyFreeformScoring(ScoringStrategy):
    """Backward-compatible heuristics for the pre-qualification-form booking flow."""

    name = "legacy_freeform"

    LANGUAGE_HINTS: dict[str, re.Pattern] = {
        "spanish": re.compile(r"\b(hola|gracias|por favor|necesito)\b", re.IGNORECASE),
        "german": re.compile(r"\b(hallo|danke|bitte|ich brauche)\b", re.IGNORECASE),
    }

    def __init__(self, form_data: LegacyFormData, config: ScoringConfig) -> None:
        self.form_data = form_data
        self.config = config

    def score(self, member: TeamMember) -> int:
        total = 0

        if self.form_data.topic and member.skills:
            topic = self.form_data.topic.lower()
            if any(n in topic for _, n in _clean_tags(member.skills)):
                total += self.config.legacy_topic_points

        if self.form_data.message and member.languages:
            message = self.form_data.message
            for _, language in _clean_tags(member.languages):
                hint = self.LANGUAGE_HINTS.get(language)
                if hint is not None and hint.search(message):
                    total += self.config.legacy_language_points
                elif language == "english":
                    total += self.config.legacy_english_points
        return total


class MatchScorer:
    """Chooses a scoring strategy per request and scores members with it."""

    def __init__(self, config: Optional[ScoringConfig] = None) -> None:
        self.config = config or settings.scoring

    def strategy_for(
        self,
        responses: Optional[QualificationResponse],
        legacy_form_data: Optional[LegacyFormData],
    ) -> ScoringStrategy:
        if responses is not None and not responses.is_empty:
            return QualificationFormScoring(responses, self.config)
        if legacy_form_data is not None and not legacy_form_data.is_empty:
            return LegacyFreeformScoring(legacy_form_data, self.config)
        return NoSignalScoring()

    def score(
        self,
        member: TeamMember,
        responses: Optional[QualificationResponse],
        legacy_form_data: Optional[LegacyFormData] = None,
    ) -> int:
        strategy = self.strategy_for(responses, legacy_form_data)
        result = strategy.score(member)
        logger.debug("Match score for %s via %s: %d", member.person_id, strategy.name, result)
        return result
