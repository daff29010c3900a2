"""Tests for Cosmos DB settings and client creation."""

from unittest.mock import MagicMock, patch

import pytest
from azure.cosmos.exceptions import CosmosHttpResponseError

from studycards.db.cosmos import (
    CARDS_PARTITION_KEY_PATH,
    EMULATOR_ENDPOINT,
    EMULATOR_KEY,
    CosmosDBSettings,
    close_client,
    ensure_cards_container,
    get_cards_container,
    get_client,
    get_settings,
    verify_connection,
)


class TestCosmosDBSettings:
    """Tests for CosmosDBSettings configuration."""

    def test_default_settings(self, monkeypatch):
        for name in ("COSMOS_ENDPOINT", "COSMOS_DB_NAME", "COSMOS_CARDS_CONTAINER", "COSMOS_EMULATOR"):
            monkeypatch.delenv(name, raising=False)

        settings = CosmosDBSettings()

        assert settings.endpoint == ""
        assert settings.database_name == "studycards"
        assert settings.cards_container == "cards"
        assert settings.use_emulator is False
        assert settings.is_configured() is False

    def test_settings_from_environment(self, monkeypatch):
        monkeypatch.setenv("COSMOS_ENDPOINT", "https://test.documents.azure.com:443/")
        monkeypatch.setenv("COSMOS_DB_NAME", "testdb")
        monkeypatch.setenv("COSMOS_CARDS_CONTAINER", "test-cards")
        monkeypatch.setenv("COSMOS_EMULATOR", "false")

        settings = CosmosDBSettings()

        assert settings.endpoint == "https://test.documents.azure.com:443/"
        assert settings.database_name == "testdb"
        assert settings.cards_container == "test-cards"
        assert settings.is_configured() is True

    @pytest.mark.parametrize("value", ["true", "TRUE", "True"])
    def test_emulator_mode_is_configured(self, monkeypatch, value):
        monkeypatch.delenv("COSMOS_ENDPOINT", raising=False)
        monkeypatch.setenv("COSMOS_EMULATOR", value)

        settings = CosmosDBSettings()

        assert settings.use_emulator is True
        assert settings.is_configured() is True

    def test_auto_create_follows_emulator_mode(self, monkeypatch):
        monkeypatch.delenv("COSMOS_AUTO_CREATE", raising=False)
        monkeypatch.setenv("COSMOS_EMULATOR", "true")
        assert CosmosDBSettings().auto_create is True

        monkeypatch.setenv("COSMOS_EMULATOR", "false")
        assert CosmosDBSettings().auto_create is False

        monkeypatch.setenv("COSMOS_AUTO_CREATE", "true")
        assert CosmosDBSettings().auto_create is True


class TestCosmosDBClient:
    """Tests for Cosmos DB client initialization."""

    @pytest.fixture(autouse=True)
    def cleanup(self):
        close_client()
        get_settings.cache_clear()
        yield
        close_client()
        get_settings.cache_clear()

    @patch("studycards.db.cosmos.CosmosClient")
    def test_get_client_emulator_mode(self, mock_cosmos_client, monkeypatch):
        monkeypatch.setenv("COSMOS_EMULATOR", "true")
        monkeypatch.delenv("COSMOS_ENDPOINT", raising=False)

        get_client()

        mock_cosmos_client.assert_called_once_with(
            EMULATOR_ENDPOINT, credential=EMULATOR_KEY, connection_verify=False
        )

    @patch("studycards.db.cosmos.DefaultAzureCredential")
    @patch("studycards.db.cosmos.CosmosClient")
    def test_get_client_azure_mode(self, mock_cosmos_client, mock_credential, monkeypatch):
        monkeypatch.setenv("COSMOS_EMULATOR", "false")
        monkeypatch.setenv("COSMOS_ENDPOINT", "https://test.documents.azure.com:443/")

        get_client()

        mock_credential.assert_called_once()
        assert mock_cosmos_client.call_args[0][0] == "https://test.documents.azure.com:443/"

    @patch("studycards.db.cosmos.CosmosClient")
    def test_client_is_cached(self, mock_cosmos_client, monkeypatch):
        monkeypatch.setenv("COSMOS_EMULATOR", "true")

        assert get_client() is get_client()
        mock_cosmos_client.assert_called_once()

    @patch("studycards.db.cosmos.CosmosClient")
    def test_get_cards_container(self, mock_cosmos_client, monkeypatch):
        monkeypatch.setenv("COSMOS_EMULATOR", "true")
        monkeypatch.setenv("COSMOS_DB_NAME", "testdb")
        monkeypatch.setenv("COSMOS_CARDS_CONTAINER", "test-cards")

        get_cards_container()

        database = mock_cosmos_client.return_value.get_database_client
        database.assert_called_once_with("testdb")
        database.return_value.get_container_client.assert_called_once_with("test-cards")

    @patch("studycards.db.cosmos.PartitionKey")
    @patch("studycards.db.cosmos.CosmosClient")
    def test_ensure_cards_container_partitions_by_owner(self, mock_cosmos_client, mock_partition_key, monkeypatch):
        monkeypatch.setenv("COSMOS_EMULATOR", "true")
        monkeypatch.setenv("COSMOS_DB_NAME", "testdb")
        monkeypatch.setenv("COSMOS_CARDS_CONTAINER", "test-cards")

        ensure_cards_container()

        create_db = mock_cosmos_client.return_value.create_database_if_not_exists
        create_db.assert_called_once_with(id="testdb")
        kwargs = create_db.return_value.create_container_if_not_exists.call_args.kwargs
        assert kwargs["id"] == "test-cards"
        mock_partition_key.assert_called_once_with(path=CARDS_PARTITION_KEY_PATH)
        assert kwargs["partition_key"] is mock_partition_key.return_value

    def test_get_client_not_configured(self, monkeypatch):
        monkeypatch.setenv("COSMOS_EMULATOR", "false")
        monkeypatch.delenv("COSMOS_ENDPOINT", raising=False)

        with pytest.raises(RuntimeError, match="not configured"):
            get_client()


class TestCosmosDBConnection:
    """Tests for Cosmos DB connection verification."""

    @pytest.fixture(autouse=True)
    def cleanup(self):
        yield
        close_client()
        get_settings.cache_clear()

    @patch("studycards.db.cosmos.get_database")
    @patch("studycards.db.cosmos.get_settings")
    def test_verify_connection_success(self, mock_settings, mock_database):
        mock_settings.return_value = MagicMock(is_configured=lambda: True)
        mock_db = MagicMock()
        mock_database.return_value = mock_db

        assert verify_connection() is True
        mock_db.read.assert_called_once()

    @patch("studycards.db.cosmos.get_settings")
    def test_verify_connection_not_configured(self, mock_settings):
        mock_settings.return_value = MagicMock(is_configured=lambda: False)

        assert verify_connection() is False

    @patch("studycards.db.cosmos.get_database")
    @patch("studycards.db.cosmos.get_settings")
    def test_verify_connection_failure(self, mock_settings, mock_database):
        mock_settings.return_value = MagicMock(is_configured=lambda: True)
        mock_database.return_value.read.side_effect = CosmosHttpResponseError(
            status_code=503, message="Connection failed"
        )

        assert verify_connection() is False
