"""Cosmos DB access for the card store."""

from .cosmos import (
    CosmosDBSettings,
    close_client,
    ensure_cards_container,
    get_cards_container,
    get_client,
    get_database,
    get_settings,
    verify_connection,
)

__all__ = [
    "CosmosDBSettings",
    "close_client",
    "ensure_cards_container",
    "get_cards_container",
    "get_client",
    "get_database",
    "get_settings",
    "verify_connection",
]
