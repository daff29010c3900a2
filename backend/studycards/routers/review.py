"""Review (SRS) API router."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from studycards.agents import get_scoring_client
from studycards.auth import CurrentUser, get_current_user
from studycards.models import (
    AIScoreResponse,
    AITypedReviewResponse,
    Card,
    CardListResponse,
    CardResponse,
    DueCountResponse,
    PerformanceFeedback,
    RatingRequest,
    ReviewNextResponse,
    ReviewResultResponse,
    TypedAnswerRequest,
    TypedReviewResponse,
)
from studycards.repositories import CardNotFoundError, CardRepository, get_card_repository
from studycards.srs.grading import AnswerScorer, evaluate_answer, rating_for_correctness, score_answer
from studycards.srs.queue import ReviewQueue
from studycards.srs.scheduler import Rating, advance
from studycards.srs.session_store import get_session_store
from studycards.srs.time import parse_iso_z, utc_datetime_to_iso_z, utc_now_iso

logger = logging.getLogger(__name__)


router = APIRouter(prefix="/review", tags=["review"])


def get_answer_scorer() -> AnswerScorer | None:
    """Return the AI scorer, or None when it is not configured."""
    try:
        return get_scoring_client()
    except EnvironmentError as e:
        logger.info(f"AI scoring not configured, using fallback grader: {e}")
        return None


def apply_rating(card: Card, rating: Rating, now: datetime) -> Card:
    """Run the scheduler for a rating and write the new state onto the card.

    This is the single entry point for every grading path (direct rating, typed
    answer, AI-scored answer, manual override).

    Args:
        card: The Card model to update (mutated in place)
        rating: The rating to apply
        now: Moment of the grading event

    Returns:
        The updated card (same reference)
    """
    new_state = advance(rating, card.scheduling_state(), now)
    card.apply_scheduling_state(new_state)
    card.lastRating = int(rating)
    card.updatedAt = utc_datetime_to_iso_z(now)
    return card


def record_answer(card: Card, is_correct: bool) -> Card:
    """Update the performance counters for one graded answer."""
    card.totalReviews += 1
    if is_correct:
        card.correctAnswers += 1
    return card


def _load_card(card_repo: CardRepository, card_id: str, user_id: str) -> Card:
    try:
        return card_repo.get_by_id(card_id, user_id)
    except CardNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Card with ID {card_id} not found",
        )


def _persist(card_repo: CardRepository, card: Card) -> Card:
    try:
        return card_repo.replace(card)
    except CardNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Card with ID {card.id} not found",
        )


def _now() -> tuple[str, datetime]:
    now_iso = utc_now_iso()
    return now_iso, parse_iso_z(now_iso)


def _session_fields(card_repo: CardRepository, user_id: str, graded_card_id: str, now_iso: str) -> dict:
    """Next card and remaining count, skipping the card that was just graded."""
    due = ReviewQueue(card_repo).list_due(user_id, now_iso, exclude_ids={graded_card_id})
    return {
        "nextCard": CardResponse.from_card(due[0]) if due else None,
        "remaining": len(due),
        "completed": not due,
    }


def _rate(card_id: str, rating: Rating, user: CurrentUser, action: str) -> ReviewResultResponse:
    card_repo = get_card_repository()
    now_iso, now = _now()

    card = _load_card(card_repo, card_id, user.user_id)
    apply_rating(card, rating, now)
    updated = _persist(card_repo, card)
    get_session_store().record_review(user.user_id, card_id)

    logger.info(
        f"{action}: user={user.user_id}, card={card_id}, rating={rating.name}, "
        f"interval_days={updated.intervalDays:.4f}, learning={updated.isLearning}, due_at={updated.dueAt}"
    )

    return ReviewResultResponse(
        card=CardResponse.from_card(updated),
        rating=int(rating),
        **_session_fields(card_repo, user.user_id, card_id, now_iso),
    )


@router.get("/next", response_model=ReviewNextResponse)
async def review_next(user: Annotated[CurrentUser, Depends(get_current_user)]) -> ReviewNextResponse:
    """Return the next due card, learning cards first."""
    card_repo = get_card_repository()
    queue = ReviewQueue(card_repo)
    now_iso = utc_now_iso()

    excluded = get_session_store().take_exclusions(user.user_id)
    due = queue.list_due(user.user_id, now_iso, exclude_ids=excluded)
    if due:
        return ReviewNextResponse(
            card=CardResponse.from_card(due[0]),
            remaining=len(due) - 1,
            completed=False,
        )

    # Excluded cards may still be due; report the next card that is not due yet
    next_due_at = queue.next_due_at(user.user_id, after_iso=now_iso)
    return ReviewNextResponse(card=None, completed=True, nextDueAt=next_due_at)


@router.get("/due-count", response_model=DueCountResponse)
async def review_due_count(user: Annotated[CurrentUser, Depends(get_current_user)]) -> DueCountResponse:
    """Count cards that are due now."""
    queue = ReviewQueue(get_card_repository())
    return DueCountResponse(count=queue.count_due(user.user_id, utc_now_iso()))


@router.get("/learning", response_model=CardListResponse)
async def review_learning(user: Annotated[CurrentUser, Depends(get_current_user)]) -> CardListResponse:
    """List due cards that are still in the learning phase."""
    queue = ReviewQueue(get_card_repository())
    cards = queue.list_learning(user.user_id, utc_now_iso())
    return CardListResponse(cards=[CardResponse.from_card(card) for card in cards], count=len(cards))


@router.post("/{card_id}/rating", response_model=ReviewResultResponse)
async def submit_rating(
    card_id: str,
    req: RatingRequest,
    user: Annotated[CurrentUser, Depends(get_current_user)],
) -> ReviewResultResponse:
    """Reschedule a card with a rating chosen by the learner."""
    return _rate(card_id, Rating(req.rating), user, "Rating applied")


@router.post("/{card_id}/override", response_model=ReviewResultResponse)
async def override_rating(
    card_id: str,
    req: RatingRequest,
    user: Annotated[CurrentUser, Depends(get_current_user)],
) -> ReviewResultResponse:
    """Re-run the scheduler with a corrected rating after automatic grading.

    The answer is not re-evaluated and the performance counters are unchanged.
    """
    return _rate(card_id, Rating(req.rating), user, "Rating overridden")


@router.post("/{card_id}/typed", response_model=TypedReviewResponse)
async def submit_typed_answer(
    card_id: str,
    req: TypedAnswerRequest,
    user: Annotated[CurrentUser, Depends(get_current_user)],
) -> TypedReviewResponse:
    """Grade a typed answer locally and reschedule the card (Good if correct, else Again)."""
    card_repo = get_card_repository()
    now_iso, now = _now()

    card = _load_card(card_repo, card_id, user.user_id)
    is_correct = evaluate_answer(card.answer_text, card.acceptableAlternatives, req.userAnswer)
    rating = rating_for_correctness(is_correct)

    # Counters and schedule are persisted together in one replace
    record_answer(card, is_correct)
    apply_rating(card, rating, now)
    updated = _persist(card_repo, card)
    get_session_store().record_review(user.user_id, card_id)

    logger.info(
        f"Typed answer graded: user={user.user_id}, card={card_id}, correct={is_correct}, "
        f"rating={rating.name}, answer_len={len(req.userAnswer)}, due_at={updated.dueAt}"
    )

    return TypedReviewResponse(
        isCorrect=is_correct,
        userAnswer=req.userAnswer.strip(),
        correctAnswer=updated.answer_text,
        rating=int(rating),
        card=CardResponse.from_card(updated),
        feedback=PerformanceFeedback(
            accuracy=updated.accuracy(),
            totalReviews=updated.totalReviews,
            correctAnswers=updated.correctAnswers,
        ),
        **_session_fields(card_repo, user.user_id, card_id, now_iso),
    )


@router.post("/{card_id}/typed-ai", response_model=AITypedReviewResponse)
async def submit_typed_answer_with_ai(
    card_id: str,
    req: TypedAnswerRequest,
    user: Annotated[CurrentUser, Depends(get_current_user)],
) -> AITypedReviewResponse:
    """Grade a typed answer with the AI scorer (or the local fallback) and reschedule."""
    card_repo = get_card_repository()
    card = _load_card(card_repo, card_id, user.user_id)
    submitted = req.userAnswer.strip()

    score = await score_answer(
        question=card.question_text,
        expected=card.answer_text,
        submitted=submitted,
        presentation_mode=card.presentationMode,
        scorer=get_answer_scorer(),
        alternatives=card.acceptableAlternatives,
    )

    # Clock is read after the (possibly slow) scoring call
    now_iso, now = _now()
    record_answer(card, score.is_correct)
    apply_rating(card, score.quality, now)
    updated = _persist(card_repo, card)
    get_session_store().record_review(user.user_id, card_id)

    logger.info(
        f"AI typed answer graded: user={user.user_id}, card={card_id}, quality={score.quality.name}, "
        f"ai_scored={score.ai_graded}, confidence={score.confidence:.2f}, answer_len={len(submitted)}"
    )

    return AITypedReviewResponse(
        isCorrect=score.is_correct,
        userAnswer=submitted,
        correctAnswer=updated.answer_text,
        rating=int(score.quality),
        aiScore=AIScoreResponse(
            quality=int(score.quality),
            reasoning=score.rationale,
            confidence=score.confidence,
            aiScored=score.ai_graded,
        ),
        card=CardResponse.from_card(updated),
        feedback=PerformanceFeedback(
            accuracy=updated.accuracy(),
            totalReviews=updated.totalReviews,
            correctAnswers=updated.correctAnswers,
        ),
        **_session_fields(card_repo, user.user_id, card_id, now_iso),
    )
