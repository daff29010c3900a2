"""Repository for Card persistence (the storage collaborator)."""

from azure.cosmos import ContainerProxy
from azure.cosmos.exceptions import CosmosResourceNotFoundError

from studycards.db import get_cards_container
from studycards.models import Card, CardCreate, CardUpdate
from studycards.models.card import now_iso


class CardNotFoundError(Exception):
    """Raised when a card is not found."""

    pass


class CardRepository:
    """Repository for Card database operations.

    All queries are scoped to the owner's partition.
    """

    def __init__(self, container: ContainerProxy | None = None):
        """Initialize the repository with an optional container."""
        self._container = container

    @property
    def container(self) -> ContainerProxy:
        """Get the container, lazily initializing if needed."""
        if self._container is None:
            self._container = get_cards_container()
        return self._container

    def _query(self, query: str, user_id: str, **params: object) -> list:
        parameters = [{"name": "@userId", "value": user_id}]
        parameters += [{"name": f"@{name}", "value": value} for name, value in params.items()]
        return list(
            self.container.query_items(
                query=query,
                parameters=parameters,
                partition_key=user_id,
            )
        )

    def list_by_user(self, user_id: str) -> list[Card]:
        """List all of a user's cards, newest first."""
        items = self._query(
            "SELECT * FROM c WHERE c.userId = @userId ORDER BY c.createdAt DESC",
            user_id,
        )
        return [Card(**item) for item in items]

    def get_by_id(self, card_id: str, user_id: str) -> Card:
        """Get a card by ID and owner."""
        try:
            item = self.container.read_item(item=card_id, partition_key=user_id)
        except CosmosResourceNotFoundError:
            raise CardNotFoundError(f"Card with ID {card_id} not found")
        return Card(**item)

    def create(self, user_id: str, card_create: CardCreate) -> Card:
        """Create a new card, due immediately."""
        card = Card(userId=user_id, **card_create.model_dump())
        created_item = self.container.create_item(body=card.model_dump())
        return Card(**created_item)

    def update(self, card_id: str, user_id: str, card_update: CardUpdate) -> Card:
        """Update card content. Scheduling state is left untouched."""
        existing = self.get_by_id(card_id, user_id)

        update_data = card_update.model_dump(exclude_unset=True)
        if not update_data:
            return existing

        for key, value in update_data.items():
            setattr(existing, key, value)
        existing.updatedAt = now_iso()
        return self.replace(existing)

    def replace(self, card: Card) -> Card:
        """Persist a full card document in one atomic replace."""
        try:
            updated_item = self.container.replace_item(
                item=card.id,
                body=card.model_dump(),
            )
        except CosmosResourceNotFoundError:
            raise CardNotFoundError(f"Card with ID {card.id} not found")
        return Card(**updated_item)

    def find_due(self, user_id: str, now_iso: str) -> list[Card]:
        """Cards with dueAt <= now, in no particular order."""
        items = self._query(
            "SELECT * FROM c WHERE c.userId = @userId AND c.dueAt <= @nowIso",
            user_id,
            nowIso=now_iso,
        )
        return [Card(**item) for item in items]

    def count_due(self, user_id: str, now_iso: str) -> int:
        """Count cards with dueAt <= now."""
        result = self._query(
            "SELECT VALUE COUNT(1) FROM c WHERE c.userId = @userId AND c.dueAt <= @nowIso",
            user_id,
            nowIso=now_iso,
        )
        return result[0] if result else 0

    def get_next_due_at(self, user_id: str, after_iso: str | None = None) -> str | None:
        """Return the earliest dueAt among the user's cards (or None if no cards).

        If after_iso is given, only dueAt values strictly after it are considered.
        """
        if after_iso is None:
            items = self._query(
                "SELECT TOP 1 VALUE c.dueAt FROM c WHERE c.userId = @userId ORDER BY c.dueAt ASC",
                user_id,
            )
        else:
            items = self._query(
                "SELECT TOP 1 VALUE c.dueAt FROM c "
                "WHERE c.userId = @userId AND c.dueAt > @afterIso ORDER BY c.dueAt ASC",
                user_id,
                afterIso=after_iso,
            )
        return items[0] if items else None

    def delete(self, card_id: str, user_id: str) -> None:
        """Delete a card by ID."""
        try:
            self.container.delete_item(item=card_id, partition_key=user_id)
        except CosmosResourceNotFoundError:
            raise CardNotFoundError(f"Card with ID {card_id} not found")


# Singleton instance
_card_repository: CardRepository | None = None


def get_card_repository() -> CardRepository:
    """Get the card repository singleton."""
    global _card_repository
    if _card_repository is None:
        _card_repository = CardRepository()
    return _card_repository
