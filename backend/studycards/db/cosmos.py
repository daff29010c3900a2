"""
Cosmos DB client and connection management.

Cards live in a single container partitioned by owner (``/userId``), so every
read, query and replace is scoped to one learner's partition and a full-document
replace of a card is atomic.

Authentication modes:
1. Azure Managed Identity / Azure CLI: DefaultAzureCredential (default)
2. Cosmos DB Emulator (local dev): COSMOS_EMULATOR=true, well-known emulator key
"""

import os
import logging
from functools import lru_cache
from azure.cosmos import CosmosClient, DatabaseProxy, ContainerProxy, PartitionKey
from azure.cosmos.exceptions import CosmosHttpResponseError
from azure.identity import DefaultAzureCredential

logger = logging.getLogger(__name__)

# Cosmos DB Emulator well-known key (public, not a secret)
# https://learn.microsoft.com/en-us/azure/cosmos-db/emulator#authentication
EMULATOR_KEY = "C2y6yDjf5/R+ob0N8A7Cgv30VRDJIWEHLM+4QDU5DE2nQ9nDuVTqobD4b8mGGyPMbIZnqyMsEcaGQy67XIw/Jw=="
EMULATOR_ENDPOINT = "https://localhost:8081"


class CosmosDBSettings:
    """Settings for the card store."""

    def __init__(self):
        self.endpoint = os.getenv("COSMOS_ENDPOINT", "")
        self.database_name = os.getenv("COSMOS_DB_NAME", "studycards")
        self.cards_container = os.getenv("COSMOS_CARDS_CONTAINER", "cards")
        self.use_emulator = os.getenv("COSMOS_EMULATOR", "false").lower() == "true"
        # Provision database and container on startup; on by default against the emulator
        self.auto_create = os.getenv("COSMOS_AUTO_CREATE", str(self.use_emulator)).lower() == "true"

    def is_configured(self) -> bool:
        if self.use_emulator:
            return True
        return bool(self.endpoint)


@lru_cache()
def get_settings() -> CosmosDBSettings:
    """Get cached Cosmos DB settings."""
    return CosmosDBSettings()


_client: CosmosClient | None = None
_database: DatabaseProxy | None = None


def get_client() -> CosmosClient:
    """Get or create the Cosmos DB client.

    Raises:
        RuntimeError: If neither COSMOS_ENDPOINT nor COSMOS_EMULATOR is set.
    """
    global _client
    if _client is None:
        settings = get_settings()
        if not settings.is_configured():
            raise RuntimeError(
                "Cosmos DB is not configured. "
                "Set COSMOS_ENDPOINT, or COSMOS_EMULATOR=true for the local emulator."
            )

        if settings.use_emulator:
            logger.info("Using Cosmos DB Emulator at %s", EMULATOR_ENDPOINT)
            _client = CosmosClient(
                EMULATOR_ENDPOINT,
                credential=EMULATOR_KEY,
                connection_verify=False,  # Emulator uses self-signed cert
            )
        else:
            logger.info("Using DefaultAzureCredential for Cosmos DB at %s", settings.endpoint)
            _client = CosmosClient(settings.endpoint, credential=DefaultAzureCredential())

    return _client


def get_database() -> DatabaseProxy:
    global _database
    if _database is None:
        _database = get_client().get_database_client(get_settings().database_name)
    return _database


def get_cards_container() -> ContainerProxy:
    """Get the cards container."""
    return get_database().get_container_client(get_settings().cards_container)


CARDS_PARTITION_KEY_PATH = "/userId"


def ensure_cards_container() -> ContainerProxy:
    """Create the database and the owner-partitioned cards container if missing."""
    settings = get_settings()
    database = get_client().create_database_if_not_exists(id=settings.database_name)
    container = database.create_container_if_not_exists(
        id=settings.cards_container,
        partition_key=PartitionKey(path=CARDS_PARTITION_KEY_PATH),
    )
    logger.info(
        "Cards container ready: %s/%s (partition key %s)",
        settings.database_name,
        settings.cards_container,
        CARDS_PARTITION_KEY_PATH,
    )
    return container


def verify_connection() -> bool:
    """Return True when the configured database can be read."""
    if not get_settings().is_configured():
        return False
    try:
        get_database().read()
        return True
    except (CosmosHttpResponseError, RuntimeError) as e:
        logger.warning("Cosmos DB connection check failed: %s", e)
        return False


def close_client() -> None:
    """Drop cached client references (CosmosClient manages its own connections)."""
    global _client, _database
    _client = None
    _database = None
