"""Answer grading for typed reviews.

The local grader is a pure function of (expected answer, alternatives, submitted
answer). The AI-assisted path delegates to an injected `AnswerScorer` and falls
back to the local grader whenever the scorer is missing or fails in any way.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, replace
from typing import Any, Iterable, Mapping, Protocol

from pydantic import BaseModel, field_validator, model_validator

from .scheduler import Rating

logger = logging.getLogger(__name__)


_PUNCTUATION_RE = re.compile(r"[.,!?;:]")
_WHITESPACE_RE = re.compile(r"\s+")

# Tokens of this length or shorter ("of", "in", "a") are ignored by overlap matching.
MIN_TOKEN_LENGTH = 2

CORRECT_OVERLAP_RATIO = 0.7
PARTIAL_OVERLAP_RATIO = 0.4

EXACT_MATCH_CONFIDENCE = 0.9
CONTAINMENT_CONFIDENCE = 0.75
FALLBACK_CONFIDENCE = 0.6

DEFAULT_AI_CONFIDENCE = 0.8
DEFAULT_AI_RATIONALE = "AI assessment completed"
FALLBACK_RATIONALE_PREFIX = "AI scoring unavailable, used fallback method: "


@dataclass(frozen=True)
class AnswerScore:
    """Graded judgment of a typed answer."""

    quality: Rating
    is_correct: bool
    confidence: float
    rationale: str
    ai_graded: bool


class AnswerScorer(Protocol):
    """External AI grading collaborator.

    Returns the raw verdict mapping produced by the model (keys ``quality``,
    ``reasoning``, ``confidence``, ``isCorrect``) or raises on any failure.
    """

    async def score(
        self,
        question: str,
        expected: str,
        submitted: str,
        presentation_mode: str,
    ) -> Mapping[str, Any]: ...


class ScoringVerdict(BaseModel):
    """Validated AI verdict.

    ``quality`` is mandatory and must be an integer in 0..3; every other field
    falls back to a default when missing or malformed.
    """

    quality: int
    reasoning: str = DEFAULT_AI_RATIONALE
    confidence: float = DEFAULT_AI_CONFIDENCE
    isCorrect: bool | None = None

    @field_validator("quality", mode="before")
    @classmethod
    def _integer_quality(cls, value: Any) -> int:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError("quality must be an integer")
        if isinstance(value, float):
            if not value.is_integer():
                raise ValueError("quality must be an integer")
            value = int(value)
        if not Rating.AGAIN <= value <= Rating.EASY:
            raise ValueError("quality must be between 0 and 3")
        return value

    @field_validator("confidence", mode="before")
    @classmethod
    def _default_confidence(cls, value: Any) -> float:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return DEFAULT_AI_CONFIDENCE
        if not 0 <= value <= 1:
            return DEFAULT_AI_CONFIDENCE
        return float(value)

    @field_validator("reasoning", mode="before")
    @classmethod
    def _default_reasoning(cls, value: Any) -> str:
        if not isinstance(value, str):
            return DEFAULT_AI_RATIONALE
        return value

    @field_validator("isCorrect", mode="before")
    @classmethod
    def _strict_is_correct(cls, value: Any) -> bool | None:
        return value if isinstance(value, bool) else None

    @model_validator(mode="after")
    def _derive_is_correct(self) -> "ScoringVerdict":
        if self.isCorrect is None:
            self.isCorrect = self.quality >= Rating.GOOD
        return self

    def to_score(self) -> AnswerScore:
        return AnswerScore(
            quality=Rating(self.quality),
            is_correct=bool(self.isCorrect),
            confidence=self.confidence,
            rationale=self.reasoning,
            ai_graded=True,
        )


def normalize_answer(text: str) -> str:
    """Lower-case, drop `. , ! ? ; :`, collapse whitespace and trim."""
    text = _PUNCTUATION_RE.sub("", text.lower())
    return _WHITESPACE_RE.sub(" ", text).strip()


def meaningful_tokens(normalized: str) -> list[str]:
    return [token for token in normalized.split() if len(token) > MIN_TOKEN_LENGTH]


def token_overlap_ratio(expected: str, submitted: str) -> float | None:
    """Fraction of expected tokens matched by submitted tokens.

    Both arguments must already be normalized. A submitted token matches when it
    is a substring of, or contains, some expected token. Returns None when
    either side has no meaningful tokens.
    """
    expected_tokens = meaningful_tokens(expected)
    submitted_tokens = meaningful_tokens(submitted)
    if not expected_tokens or not submitted_tokens:
        return None

    matched = [
        token
        for token in submitted_tokens
        if any(token in candidate or candidate in token for candidate in expected_tokens)
    ]
    return len(matched) / len(expected_tokens)


def evaluate_answer(expected: str, alternatives: Iterable[str], submitted: str) -> bool:
    """Return True when ``submitted`` counts as a correct answer."""
    normalized_submitted = normalize_answer(submitted)
    if not normalized_submitted:
        return False

    normalized_expected = normalize_answer(expected)
    if normalized_submitted == normalized_expected:
        return True

    for alternative in alternatives:
        if normalize_answer(alternative) == normalized_submitted:
            return True

    ratio = token_overlap_ratio(normalized_expected, normalized_submitted)
    if ratio is None:
        return False
    return ratio >= CORRECT_OVERLAP_RATIO


def rating_for_correctness(is_correct: bool) -> Rating:
    """Rating applied to a locally graded typed answer."""
    return Rating.GOOD if is_correct else Rating.AGAIN


def _local_score(quality: Rating, rationale: str, confidence: float = FALLBACK_CONFIDENCE) -> AnswerScore:
    return AnswerScore(
        quality=quality,
        is_correct=quality >= Rating.GOOD,
        confidence=confidence,
        rationale=rationale,
        ai_graded=False,
    )


def fallback_score(expected: str, submitted: str, alternatives: Iterable[str] = ()) -> AnswerScore:
    """Estimate a four-level quality without the AI collaborator.

    - exact match (or an acceptable alternative) -> Easy
    - containment in either direction -> Good
    - token overlap >= 70% -> Good
    - token overlap 40-70% -> Hard
    - anything else -> Again
    """
    normalized_submitted = normalize_answer(submitted or "")
    if not normalized_submitted:
        return _local_score(Rating.AGAIN, "No answer provided")

    normalized_expected = normalize_answer(expected)
    normalized_alternatives = {normalize_answer(alternative) for alternative in alternatives}
    if normalized_submitted == normalized_expected or normalized_submitted in normalized_alternatives:
        return _local_score(Rating.EASY, "Exact match", EXACT_MATCH_CONFIDENCE)

    if normalized_submitted in normalized_expected or normalized_expected in normalized_submitted:
        return _local_score(Rating.GOOD, "Partial match found", CONTAINMENT_CONFIDENCE)

    ratio = token_overlap_ratio(normalized_expected, normalized_submitted)
    if ratio is None:
        return _local_score(Rating.AGAIN, "Insufficient content to evaluate")
    if ratio >= CORRECT_OVERLAP_RATIO:
        return _local_score(Rating.GOOD, "Good word overlap (70%+)")
    if ratio >= PARTIAL_OVERLAP_RATIO:
        return _local_score(Rating.HARD, "Some word overlap (40-70%)")
    return _local_score(Rating.AGAIN, "Low word overlap (<40%)")


async def score_answer(
    question: str,
    expected: str,
    submitted: str,
    presentation_mode: str,
    scorer: AnswerScorer | None = None,
    alternatives: Iterable[str] = (),
) -> AnswerScore:
    """Score a typed answer with the AI collaborator, falling back locally.

    Any failure of the scorer (timeout, transport error, unparseable output or an
    invalid quality) is logged and replaced by `fallback_score`; it never reaches
    the caller.
    """
    alternatives = list(alternatives)

    if scorer is not None:
        try:
            raw = await scorer.score(question, expected, submitted, presentation_mode)
            score = ScoringVerdict.model_validate(raw).to_score()
            logger.info(
                f"AI scoring: quality={score.quality.value}, confidence={score.confidence:.2f}"
            )
            return score
        except Exception as e:
            logger.warning(f"AI scoring failed, using fallback grader: {e}")

    fallback = fallback_score(expected, submitted, alternatives)
    return replace(fallback, rationale=FALLBACK_RATIONALE_PREFIX + fallback.rationale)
