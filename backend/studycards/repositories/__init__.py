"""Card persistence."""

from .card_repository import CardNotFoundError, CardRepository, get_card_repository

__all__ = ["CardNotFoundError", "CardRepository", "get_card_repository"]
