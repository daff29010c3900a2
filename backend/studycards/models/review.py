"""Models for review (SRS) endpoints."""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from studycards.models.card import CardResponse


class RatingRequest(BaseModel):
    """Request body for rating submissions and overrides."""

    rating: int = Field(..., ge=0, le=3, description="0=Again, 1=Hard, 2=Good, 3=Easy")


class TypedAnswerRequest(BaseModel):
    """Request body for typed-answer reviews."""

    userAnswer: str = Field(..., max_length=2000, description="Learner's typed answer")

    @field_validator("userAnswer")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Answer is required")
        return value


class DueCountResponse(BaseModel):
    """Response for GET /review/due-count."""

    count: int = Field(..., ge=0)


class ReviewNextResponse(BaseModel):
    """Response for GET /review/next."""

    card: CardResponse | None = Field(None, description="Next due card, learning cards first")
    remaining: int = Field(0, ge=0, description="Due cards after this one")
    completed: bool = Field(..., description="True when nothing is due")
    nextDueAt: str | None = Field(None, description="Earliest upcoming dueAt when nothing is due now")


class ReviewResultResponse(BaseModel):
    """Response for rating submissions and overrides."""

    card: CardResponse = Field(..., description="The card after rescheduling")
    rating: int = Field(..., ge=0, le=3, description="Rating that was applied")
    nextCard: CardResponse | None = Field(None, description="Next due card, excluding the one just graded")
    remaining: int = Field(..., ge=0)
    completed: bool


class PerformanceFeedback(BaseModel):
    accuracy: int
    totalReviews: int
    correctAnswers: int


class TypedReviewResponse(ReviewResultResponse):
    """Response for POST /review/{card_id}/typed."""

    isCorrect: bool
    userAnswer: str = Field(..., description="Submitted answer, trimmed")
    correctAnswer: str = Field(..., description="Expected answer for the card's presentation mode")
    feedback: PerformanceFeedback


class AIScoreResponse(BaseModel):
    quality: int = Field(..., ge=0, le=3)
    reasoning: str
    confidence: float = Field(..., ge=0, le=1)
    aiScored: bool


class AITypedReviewResponse(TypedReviewResponse):
    """Response for POST /review/{card_id}/typed-ai."""

    aiScore: AIScoreResponse
