"""Models module for Pydantic schemas."""

from .card import (
    Card,
    CardBase,
    CardCreate,
    CardUpdate,
    CardResponse,
    CardListResponse,
    PresentationMode,
)

from .review import (
    AIScoreResponse,
    AITypedReviewResponse,
    DueCountResponse,
    PerformanceFeedback,
    RatingRequest,
    ReviewNextResponse,
    ReviewResultResponse,
    TypedAnswerRequest,
    TypedReviewResponse,
)

__all__ = [
    "Card",
    "CardBase",
    "CardCreate",
    "CardUpdate",
    "CardResponse",
    "CardListResponse",
    "PresentationMode",
    "AIScoreResponse",
    "AITypedReviewResponse",
    "DueCountResponse",
    "PerformanceFeedback",
    "RatingRequest",
    "ReviewNextResponse",
    "ReviewResultResponse",
    "TypedAnswerRequest",
    "TypedReviewResponse",
]
