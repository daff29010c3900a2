"""HTTP routes: card CRUD and the review loop."""

from .cards import router as cards_router
from .review import router as review_router

__all__ = ["cards_router", "review_router"]
