"""Shared fixtures for catalog gateway tests."""

from collections.abc import Iterator
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from catalog_gateway.catalog.store import InMemoryCatalogStore, get_catalog_store
from catalog_gateway.infrastructure.retrieval_client import (
    RetrievalClient,
    RetrievalUnavailableError,
    get_retrieval_client,
)
from catalog_gateway.main import app


@pytest.fixture
def mock_retrieval_client() -> MagicMock:
    """Create a mock retrieval client."""
    client = MagicMock(spec=RetrievalClient)
    client.base_url = "http://localhost:5050"

    # Make all methods async
    client.search = AsyncMock()
    client.debug_search = AsyncMock()
    client.sync_all = AsyncMock()
    client.sync_product = AsyncMock()
    client.delete_product = AsyncMock()
    client.stats = AsyncMock()
    client.health = AsyncMock()

    return client


@pytest.fixture
def catalog_store() -> InMemoryCatalogStore:
    """Create an empty in-memory catalog store."""
    return InMemoryCatalogStore()


@pytest.fixture
def client(
    mock_retrieval_client: MagicMock,
    catalog_store: InMemoryCatalogStore,
) -> Iterator[TestClient]:
    """Create test client wired to the mock retrieval client and store."""
    app.dependency_overrides[get_retrieval_client] = lambda: mock_retrieval_client
    app.dependency_overrides[get_catalog_store] = lambda: catalog_store
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def unavailable_error() -> RetrievalUnavailableError:
    """Create the error raised when the retrieval service is down."""
    return RetrievalUnavailableError(
        "http://localhost:5050",
        "Cannot connect to retrieval service: [Errno 111] Connection refused",
    )
