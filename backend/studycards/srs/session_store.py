"""TTL-based store of per-owner review sessions."""

from __future__ import annotations

import os
import threading
from dataclasses import dataclass

from cachetools import TTLCache


@dataclass
class ReviewSession:
    """State of one owner's review session.

    Attributes:
        last_reviewed_card_id: Card graded most recently and not yet skipped by a fetch
    """

    last_reviewed_card_id: str | None = None

    def record_review(self, card_id: str) -> None:
        self.last_reviewed_card_id = card_id

    def take_exclusions(self) -> set[str]:
        """Return the ids to skip on the next due-card fetch, then forget them.

        The just-graded card is skipped exactly once, so a card rated Again with a
        one-minute step comes back on the following fetch.
        """
        if self.last_reviewed_card_id is None:
            return set()
        excluded = {self.last_reviewed_card_id}
        self.last_reviewed_card_id = None
        return excluded


class ReviewSessionStore:
    """Thread-safe TTL-based session store.

    Stores ReviewSession keyed by user id.
    Sessions expire after TTL seconds of inactivity (sliding window).
    """

    # Default TTL: 30 minutes
    DEFAULT_TTL_SECONDS = 30 * 60
    # Max sessions to cache
    MAX_SESSIONS = 10000

    def __init__(self, ttl_seconds: int = DEFAULT_TTL_SECONDS, maxsize: int = MAX_SESSIONS):
        self._cache: TTLCache[str, ReviewSession] = TTLCache(maxsize=maxsize, ttl=ttl_seconds)
        self._lock = threading.Lock()

    @property
    def ttl_seconds(self) -> float:
        return self._cache.ttl

    def record_review(self, user_id: str, card_id: str) -> ReviewSession:
        """Remember that ``card_id`` was just graded in the user's session."""
        with self._lock:
            session = self._cache.get(user_id) or ReviewSession()
            session.record_review(card_id)
            # Re-set to refresh TTL (sliding window)
            self._cache[user_id] = session
            return session

    def take_exclusions(self, user_id: str) -> set[str]:
        """Card ids the next due-card fetch must skip for this user."""
        with self._lock:
            session = self._cache.get(user_id)
            if session is None:
                return set()
            self._cache[user_id] = session
            return session.take_exclusions()


# Singleton instance
_session_store: ReviewSessionStore | None = None


def get_session_store() -> ReviewSessionStore:
    """Get the singleton review session store."""
    global _session_store
    if _session_store is None:
        ttl = int(os.getenv("REVIEW_SESSION_TTL_SECONDS", str(ReviewSessionStore.DEFAULT_TTL_SECONDS)))
        _session_store = ReviewSessionStore(ttl_seconds=ttl)
    return _session_store


def reset_session_store() -> None:
    """Reset the session store (for testing)."""
    global _session_store
    _session_store = None
