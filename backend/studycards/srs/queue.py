"""Review queue: which of an owner's cards are due, and in what order.

Learning cards come first so short-interval steps are not starved by a large
backlog of mature reviews; within each group cards are ordered by dueAt.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable, Protocol

from .time import parse_iso_z

if TYPE_CHECKING:
    from studycards.models import Card


class CardStore(Protocol):
    """Query capability the queue needs from storage."""

    def find_due(self, user_id: str, now_iso: str) -> list[Card]: ...

    def count_due(self, user_id: str, now_iso: str) -> int: ...

    def get_next_due_at(self, user_id: str, after_iso: str | None = None) -> str | None: ...


def _due_sort_key(card: Card) -> tuple[bool, object]:
    return (not card.isLearning, parse_iso_z(card.dueAt))


class ReviewQueue:
    """Read-side scheduling policy over one owner's cards."""

    def __init__(self, store: CardStore):
        self._store = store

    def count_due(self, user_id: str, now_iso: str) -> int:
        """Number of cards with dueAt <= now."""
        return self._store.count_due(user_id, now_iso)

    def list_due(self, user_id: str, now_iso: str, exclude_ids: Iterable[str] = ()) -> list[Card]:
        """All due cards, learning cards first, then by ascending dueAt.

        Cards whose id is in ``exclude_ids`` are skipped; used to keep a card that
        was just graded from being presented again straight away.
        """
        now_dt = parse_iso_z(now_iso)
        excluded = set(exclude_ids)
        due = [
            card
            for card in self._store.find_due(user_id, now_iso)
            if card.id not in excluded and parse_iso_z(card.dueAt) <= now_dt
        ]
        due.sort(key=_due_sort_key)
        return due

    def list_learning(self, user_id: str, now_iso: str) -> list[Card]:
        """Due cards still in (or inconsistently out of) the learning phase."""
        learning = [card for card in self.list_due(user_id, now_iso) if card.in_learning_phase]
        learning.sort(key=lambda card: parse_iso_z(card.dueAt))
        return learning

    def next_due(self, user_id: str, now_iso: str, exclude_ids: Iterable[str] = ()) -> Card | None:
        due = self.list_due(user_id, now_iso, exclude_ids)
        return due[0] if due else None

    def next_due_at(self, user_id: str, after_iso: str | None = None) -> str | None:
        """Earliest dueAt among the owner's cards, or None if there are none.

        With ``after_iso`` only dueAt values strictly later than it are considered.
        """
        return self._store.get_next_due_at(user_id, after_iso)
