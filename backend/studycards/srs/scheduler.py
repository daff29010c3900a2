"""Spaced-repetition scheduler.

A card is always in one of two phases:

- LEARNING: short, minute-scale steps (1 minute, then 10 minutes) before graduation.
- REVIEW: day-scale intervals that grow with the card's ease factor.

Each (phase, rating) pair maps to exactly one transition rule below. `advance`
applies the rule, clamps the result into the allowed ranges and stamps the new
due date. It performs no I/O; persisting the returned state is the caller's job.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum, IntEnum
from typing import Callable

from .time import add_interval_days, utc_now

logger = logging.getLogger(__name__)


class Rating(IntEnum):
    """Learner's recall quality."""

    AGAIN = 0
    HARD = 1
    GOOD = 2
    EASY = 3


class Phase(str, Enum):
    LEARNING = "learning"
    REVIEW = "review"


MINUTES_PER_DAY = 24 * 60

LEARNING_STEPS_MINUTES: tuple[int, ...] = (1, 10)
GRADUATING_INTERVAL_DAYS = 1
EASY_INTERVAL_DAYS = 4

MIN_EASE_FACTOR = 1.3
MAX_EASE_FACTOR = 2.5
DEFAULT_EASE_FACTOR = 2.5

MIN_INTERVAL_DAYS = 1 / MINUTES_PER_DAY
MAX_INTERVAL_DAYS = 36500

AGAIN_EASE_PENALTY = 0.2
HARD_EASE_PENALTY = 0.15
EASY_EASE_BONUS = 0.15
HARD_INTERVAL_MULTIPLIER = 1.2
EASY_INTERVAL_BONUS = 1.3


@dataclass(frozen=True)
class SchedulingState:
    """Scheduling subset of a card."""

    interval_days: float = MIN_INTERVAL_DAYS
    ease_factor: float = DEFAULT_EASE_FACTOR
    repetitions: int = 0
    is_learning: bool = True
    learning_step: int = 0
    due_at: datetime | None = None
    last_reviewed_at: datetime | None = None

    @property
    def phase(self) -> Phase:
        return Phase.LEARNING if self.is_learning else Phase.REVIEW


def step_interval_days(step: int) -> float:
    """Interval, in days, of the given learning step."""
    return LEARNING_STEPS_MINUTES[step] / MINUTES_PER_DAY


def _current_step(state: SchedulingState) -> int:
    last = len(LEARNING_STEPS_MINUTES) - 1
    return min(max(state.learning_step, 0), last)


def _graduate(state: SchedulingState, interval_days: float) -> SchedulingState:
    return replace(
        state,
        interval_days=interval_days,
        is_learning=False,
        repetitions=1,
        learning_step=0,
    )


# -- transitions shared by both phases ---------------------------------------


def _relearn(state: SchedulingState) -> SchedulingState:
    """Again: back to the first learning step, with an ease penalty."""
    return replace(
        state,
        interval_days=step_interval_days(0),
        ease_factor=state.ease_factor - AGAIN_EASE_PENALTY,
        repetitions=0,
        is_learning=True,
        learning_step=0,
    )


# -- LEARNING phase ----------------------------------------------------------


def _learning_hard(state: SchedulingState) -> SchedulingState:
    step = max(0, _current_step(state) - 1)
    return replace(
        state,
        interval_days=step_interval_days(step),
        is_learning=True,
        learning_step=step,
    )


def _learning_good(state: SchedulingState) -> SchedulingState:
    step = _current_step(state)
    if step < len(LEARNING_STEPS_MINUTES) - 1:
        return replace(
            state,
            interval_days=step_interval_days(step + 1),
            is_learning=True,
            learning_step=step + 1,
        )
    return _graduate(state, GRADUATING_INTERVAL_DAYS)


def _learning_easy(state: SchedulingState) -> SchedulingState:
    return _graduate(state, EASY_INTERVAL_DAYS)


# -- REVIEW phase ------------------------------------------------------------


def _review_hard(state: SchedulingState) -> SchedulingState:
    return replace(
        state,
        interval_days=max(1, math.ceil(state.interval_days * HARD_INTERVAL_MULTIPLIER)),
        ease_factor=state.ease_factor - HARD_EASE_PENALTY,
    )


def _review_good(state: SchedulingState) -> SchedulingState:
    repetitions = state.repetitions + 1
    grown = math.ceil(state.interval_days * state.ease_factor)
    if repetitions == 1:
        interval = GRADUATING_INTERVAL_DAYS
    elif repetitions == 2:
        interval = max(GRADUATING_INTERVAL_DAYS, grown)
    else:
        interval = grown
    return replace(state, interval_days=interval, repetitions=repetitions)


def _review_easy(state: SchedulingState) -> SchedulingState:
    return replace(
        state,
        interval_days=math.ceil(state.interval_days * state.ease_factor * EASY_INTERVAL_BONUS),
        ease_factor=state.ease_factor + EASY_EASE_BONUS,
        repetitions=state.repetitions + 1,
    )


TransitionRule = Callable[[SchedulingState], SchedulingState]

TRANSITIONS: dict[Phase, dict[Rating, TransitionRule]] = {
    Phase.LEARNING: {
        Rating.AGAIN: _relearn,
        Rating.HARD: _learning_hard,
        Rating.GOOD: _learning_good,
        Rating.EASY: _learning_easy,
    },
    Phase.REVIEW: {
        Rating.AGAIN: _relearn,
        Rating.HARD: _review_hard,
        Rating.GOOD: _review_good,
        Rating.EASY: _review_easy,
    },
}


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def advance(rating: Rating | int, state: SchedulingState, now: datetime | None = None) -> SchedulingState:
    """Return the scheduling state that follows ``state`` after ``rating``.

    Args:
        rating: Again (0), Hard (1), Good (2) or Easy (3)
        state: Current scheduling state of the card
        now: Moment of the grading event; defaults to the current UTC time

    Returns:
        The complete new state, with interval and ease clamped into range,
        ``due_at`` set to ``now + interval`` and ``last_reviewed_at`` set to ``now``.
    """
    rating = Rating(rating)
    if now is None:
        now = utc_now()

    rule = TRANSITIONS[state.phase][rating]
    next_state = rule(state)

    interval = _clamp(next_state.interval_days, MIN_INTERVAL_DAYS, MAX_INTERVAL_DAYS)
    ease = _clamp(next_state.ease_factor, MIN_EASE_FACTOR, MAX_EASE_FACTOR)

    logger.debug(
        "Scheduled %s (%s) -> %.4f days (%s)",
        rating.name,
        state.phase.value,
        interval,
        next_state.phase.value,
    )

    return replace(
        next_state,
        interval_days=interval,
        ease_factor=ease,
        due_at=add_interval_days(now, interval),
        last_reviewed_at=now,
    )
