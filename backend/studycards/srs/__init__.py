"""SRS core: scheduler, review queue, answer grading and review sessions."""

from .scheduler import Phase, Rating, SchedulingState, advance
from .grading import (
    AnswerScore,
    AnswerScorer,
    ScoringVerdict,
    evaluate_answer,
    fallback_score,
    normalize_answer,
    rating_for_correctness,
    score_answer,
)
from .queue import CardStore, ReviewQueue
from .session_store import ReviewSession, ReviewSessionStore, get_session_store
from .time import (
    utc_now,
    utc_now_iso,
    utc_datetime_to_iso_z,
    parse_iso_z,
    add_interval_days,
)

__all__ = [
    "Phase",
    "Rating",
    "SchedulingState",
    "advance",
    "AnswerScore",
    "AnswerScorer",
    "ScoringVerdict",
    "evaluate_answer",
    "fallback_score",
    "normalize_answer",
    "rating_for_correctness",
    "score_answer",
    "CardStore",
    "ReviewQueue",
    "ReviewSession",
    "ReviewSessionStore",
    "get_session_store",
    "utc_now",
    "utc_now_iso",
    "utc_datetime_to_iso_z",
    "parse_iso_z",
    "add_interval_days",
]
