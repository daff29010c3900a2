"""Pytest configuration and fixtures."""

from dataclasses import dataclass, field

import pytest

from studycards.models import Card, CardCreate, CardUpdate
from studycards.repositories.card_repository import CardNotFoundError
from studycards.srs.time import parse_iso_z


NOW_ISO = "2025-12-13T00:00:00Z"
USER_ID = "test-user"


def make_card(**overrides) -> Card:
    """Build a card owned by USER_ID that is due at NOW_ISO unless overridden."""
    fields = {
        "userId": USER_ID,
        "prompt": "Capital of France",
        "expectedAnswer": "Paris",
        "createdAt": "2025-12-01T00:00:00Z",
        "updatedAt": "2025-12-01T00:00:00Z",
        "dueAt": NOW_ISO,
    }
    fields.update(overrides)
    return Card(**fields)


@dataclass
class StubCardRepo:
    """In-memory stand-in for CardRepository."""

    cards: dict[str, dict] = field(default_factory=dict)
    replace_calls: int = 0

    def add(self, **overrides) -> Card:
        card = make_card(**overrides)
        self.cards[card.id] = card.model_dump()
        return card

    def _owned(self, user_id: str) -> list[Card]:
        return [Card(**raw) for raw in self.cards.values() if raw["userId"] == user_id]

    def get_by_id(self, card_id: str, user_id: str) -> Card:
        raw = self.cards.get(card_id)
        if raw is None or raw["userId"] != user_id:
            raise CardNotFoundError("not found")
        return Card(**raw)

    def replace(self, card: Card) -> Card:
        if card.id not in self.cards:
            raise CardNotFoundError("not found")
        self.replace_calls += 1
        self.cards[card.id] = card.model_dump()
        return Card(**self.cards[card.id])

    def find_due(self, user_id: str, now_iso: str) -> list[Card]:
        now_dt = parse_iso_z(now_iso)
        return [card for card in self._owned(user_id) if parse_iso_z(card.dueAt) <= now_dt]

    def count_due(self, user_id: str, now_iso: str) -> int:
        return len(self.find_due(user_id, now_iso))

    def get_next_due_at(self, user_id: str, after_iso: str | None = None) -> str | None:
        cards = self._owned(user_id)
        if after_iso is not None:
            cards = [card for card in cards if parse_iso_z(card.dueAt) > parse_iso_z(after_iso)]
        due_ats = sorted(card.dueAt for card in cards)
        return due_ats[0] if due_ats else None

    def list_by_user(self, user_id: str) -> list[Card]:
        return sorted(self._owned(user_id), key=lambda card: card.createdAt, reverse=True)

    def create(self, user_id: str, card_create: CardCreate) -> Card:
        card = Card(userId=user_id, **card_create.model_dump())
        self.cards[card.id] = card.model_dump()
        return card

    def update(self, card_id: str, user_id: str, card_update: CardUpdate) -> Card:
        card = self.get_by_id(card_id, user_id)
        for key, value in card_update.model_dump(exclude_unset=True).items():
            setattr(card, key, value)
        return self.replace(card)

    def delete(self, card_id: str, user_id: str) -> None:
        self.get_by_id(card_id, user_id)
        del self.cards[card_id]


@pytest.fixture
def card_repo() -> StubCardRepo:
    return StubCardRepo()
