"""Card models for API requests and responses."""

from datetime import datetime, timezone
from typing import Literal
from uuid import uuid4

from pydantic import BaseModel, Field

from studycards.srs.scheduler import (
    DEFAULT_EASE_FACTOR,
    MIN_INTERVAL_DAYS,
    SchedulingState,
)
from studycards.srs.time import parse_iso_z, utc_datetime_to_iso_z, utc_now_iso


# Which side of the card is shown first
PresentationMode = Literal["recognition", "recall"]


def generate_uuid() -> str:
    """Generate a new UUID string."""
    return str(uuid4())


def now_iso() -> str:
    """Get current UTC timestamp in ISO format."""
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


class CardBase(BaseModel):
    """Base card model with common fields."""

    prompt: str = Field(..., min_length=1, max_length=2000, description="Prompt side of the card")
    expectedAnswer: str = Field(..., min_length=1, max_length=2000, description="Answer side of the card")
    presentationMode: PresentationMode = Field(
        "recognition",
        description="'recognition' shows the prompt and expects the answer; 'recall' is the reverse",
    )
    acceptableAlternatives: list[str] = Field(
        default_factory=list,
        description="Additional answers accepted for the current presentation mode",
    )


class CardCreate(CardBase):
    """Model for creating a new card."""

    pass


class CardUpdate(BaseModel):
    """Model for updating card content. Scheduling state is never client-writable."""

    prompt: str | None = Field(None, min_length=1, max_length=2000)
    expectedAnswer: str | None = Field(None, min_length=1, max_length=2000)
    presentationMode: PresentationMode | None = None
    acceptableAlternatives: list[str] | None = None


class Card(CardBase):
    """Full card model as stored in the database."""

    id: str = Field(default_factory=generate_uuid, description="Unique identifier")
    userId: str = Field(..., description="Owner user ID (partition key)")
    createdAt: str = Field(default_factory=now_iso, description="Creation timestamp")
    updatedAt: str = Field(default_factory=now_iso, description="Last update timestamp")

    # SRS fields (persisted, written only by the scheduler)
    dueAt: str = Field(default_factory=utc_now_iso, description="Next due timestamp (UTC ISO Z)")
    intervalDays: float = Field(MIN_INTERVAL_DAYS, description="Days until next exposure")
    easeFactor: float = Field(DEFAULT_EASE_FACTOR, description="Ease factor (1.3 - 2.5)")
    repetitions: int = Field(0, description="Consecutive successful reviews")
    isLearning: bool = Field(True, description="Whether the card is in the learning phase")
    learningStep: int = Field(0, description="Index of the current learning step")
    lastReviewedAt: str | None = Field(None, description="Last review timestamp (UTC ISO Z)")
    lastRating: int | None = Field(None, ge=0, le=3, description="Most recent rating applied")

    # Performance counters
    totalReviews: int = Field(0, description="Typed answers graded")
    correctAnswers: int = Field(0, description="Typed answers judged correct")

    class Config:
        """Pydantic config."""

        extra = "ignore"
        json_schema_extra = {
            "example": {
                "id": "123e4567-e89b-12d3-a456-426614174001",
                "userId": "user-001",
                "prompt": "Capital of France",
                "expectedAnswer": "Paris",
                "presentationMode": "recognition",
                "acceptableAlternatives": [],
                "createdAt": "2025-01-01T00:00:00Z",
                "updatedAt": "2025-01-01T00:00:00Z",
            }
        }

    @property
    def question_text(self) -> str:
        """Side shown to the learner."""
        return self.prompt if self.presentationMode == "recognition" else self.expectedAnswer

    @property
    def answer_text(self) -> str:
        """Side the learner is expected to produce."""
        return self.expectedAnswer if self.presentationMode == "recognition" else self.prompt

    @property
    def in_learning_phase(self) -> bool:
        """Broad learning test: the flag, a sub-day interval, or no repetitions yet."""
        return self.isLearning or self.intervalDays < 1 or self.repetitions == 0

    def accuracy(self) -> int:
        """Percentage of typed answers judged correct."""
        if self.totalReviews == 0:
            return 0
        return round(self.correctAnswers / self.totalReviews * 100)

    def scheduling_state(self) -> SchedulingState:
        return SchedulingState(
            interval_days=self.intervalDays,
            ease_factor=self.easeFactor,
            repetitions=self.repetitions,
            is_learning=self.in_learning_phase,
            learning_step=self.learningStep,
            due_at=parse_iso_z(self.dueAt),
            last_reviewed_at=parse_iso_z(self.lastReviewedAt) if self.lastReviewedAt else None,
        )

    def apply_scheduling_state(self, state: SchedulingState) -> None:
        self.intervalDays = state.interval_days
        self.easeFactor = state.ease_factor
        self.repetitions = state.repetitions
        self.isLearning = state.is_learning
        self.learningStep = state.learning_step
        if state.due_at is not None:
            self.dueAt = utc_datetime_to_iso_z(state.due_at)
        if state.last_reviewed_at is not None:
            self.lastReviewedAt = utc_datetime_to_iso_z(state.last_reviewed_at)


class CardResponse(CardBase):
    """Card response model returned by API."""

    id: str
    userId: str
    createdAt: str
    updatedAt: str

    dueAt: str
    intervalDays: float
    easeFactor: float
    repetitions: int
    isLearning: bool
    learningStep: int
    lastReviewedAt: str | None
    lastRating: int | None

    totalReviews: int
    correctAnswers: int
    accuracy: int

    @classmethod
    def from_card(cls, card: Card) -> "CardResponse":
        return cls(**card.model_dump(), accuracy=card.accuracy())


class CardListResponse(BaseModel):
    """Response containing a list of cards."""

    cards: list[CardResponse]
    count: int
