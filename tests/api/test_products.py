"""Tests for product API endpoints."""

from unittest.mock import MagicMock

from fastapi.testclient import TestClient

from catalog_gateway.catalog.store import InMemoryCatalogStore
from catalog_gateway.infrastructure.retrieval_client import (
    RetrievalClientError,
    RetrievalUnavailableError,
)


class TestCreateProduct:
    """Tests for POST /api/products endpoint."""

    def test_create_product_success(
        self, client: TestClient, mock_retrieval_client: MagicMock
    ) -> None:
        """Should create product and schedule indexing."""
        response = client.post(
            "/api/products",
            json={
                "name": "Lip balm",
                "brand": "Acme",
                "gender": "unisex",
                "tags": ["lips"],
            },
        )
        assert response.status_code == 201

        data = response.json()
        assert data["name"] == "Lip balm"
        assert data["tags"] == ["lips"]
        assert data["rag_sync_status"] == "attempted"
        assert data["message"] == "Product created successfully"
        assert "embedding" not in data
        assert "__v" not in data
        assert data["createdAt"].endswith("Z")

        mock_retrieval_client.sync_product.assert_awaited_once_with(data["_id"])

    def test_create_product_when_sync_fails(
        self,
        client: TestClient,
        mock_retrieval_client: MagicMock,
        catalog_store: InMemoryCatalogStore,
        unavailable_error: RetrievalUnavailableError,
    ) -> None:
        """Should still return 201 when background indexing fails."""
        mock_retrieval_client.sync_product.side_effect = unavailable_error

        response = client.post("/api/products", json={"name": "Soap"})

        assert response.status_code == 201
        assert response.json()["rag_sync_status"] == "attempted"
        assert len(catalog_store._products) == 1

    def test_create_product_with_category(
        self, client: TestClient
    ) -> None:
        """Should keep the category reference as a string ID."""
        category = client.post("/api/categories", json={"name": "Skin care"}).json()

        response = client.post(
            "/api/products",
            json={"name": "Lip balm", "categoryId": category["_id"]},
        )

        assert response.status_code == 201
        assert response.json()["categoryId"] == category["_id"]

    def test_create_product_requires_name(
        self, client: TestClient, mock_retrieval_client: MagicMock
    ) -> None:
        """Should reject a missing or empty name as invalid_request."""
        for body in ({}, {"name": ""}):
            response = client.post("/api/products", json=body)
            assert response.status_code == 400
            data = response.json()
            assert data["error_code"] == "invalid_request"
            assert data["timestamp"]

        mock_retrieval_client.sync_product.assert_not_called()


class TestListProducts:
    """Tests for GET /api/products endpoint."""

    def test_list_products_expands_category(self, client: TestClient) -> None:
        """Should project the category to {_id, name}."""
        category = client.post(
            "/api/categories",
            json={"name": "Skin care", "description": "Creams and balms"},
        ).json()
        client.post(
            "/api/products", json={"name": "Lip balm", "categoryId": category["_id"]}
        )
        client.post("/api/products", json={"name": "Soap", "categoryId": "unknown"})

        response = client.get("/api/products")
        assert response.status_code == 200

        products = response.json()
        assert [p["name"] for p in products] == ["Lip balm", "Soap"]

        balm, soap = products
        assert balm["category"] == {"_id": category["_id"], "name": "Skin care"}
        assert "categoryId" not in balm
        assert soap["categoryId"] == "unknown"
        assert "category" not in soap
        assert all("embedding" not in p for p in products)

    def test_list_products_empty(self, client: TestClient) -> None:
        """Should return an empty list."""
        response = client.get("/api/products")
        assert response.status_code == 200
        assert response.json() == []


class TestAiSearch:
    """Tests for POST /api/products/ai-search endpoint."""

    def test_search_success(
        self, client: TestClient, mock_retrieval_client: MagicMock
    ) -> None:
        """Should return sanitized products with request metadata."""
        mock_retrieval_client.search.return_value = {
            "products": [
                {"_id": "p1", "name": "Lip balm", "embedding": [0.1], "__v": 0}
            ],
            "pagination": {"page": 1, "total": 1},
        }

        response = client.post("/api/products/ai-search", json={"query": "lip balm"})
        assert response.status_code == 200

        data = response.json()
        assert data["products"] == [{"_id": "p1", "name": "Lip balm"}]
        assert data["request_metadata"]["agent_used"] == "primary"
        assert data["request_metadata"]["page_requested"] == 1
        assert data["request_metadata"]["limit_requested"] == 10

        mock_retrieval_client.search.assert_awaited_once_with(
            query="lip balm",
            agent="primary",
            page=1,
            limit=10,
            filters={},
            max_distance=1.2,
        )

    def test_search_missing_query(
        self, client: TestClient, mock_retrieval_client: MagicMock
    ) -> None:
        """Should return invalid_request/400 with no remote call."""
        for body in ({}, {"query": "   "}):
            response = client.post("/api/products/ai-search", json=body)
            assert response.status_code == 400
            data = response.json()
            assert data["error_code"] == "invalid_request"
            assert data["message"] == "Query is required"
            assert "timestamp" in data

        mock_retrieval_client.search.assert_not_called()

    def test_search_service_unavailable(
        self,
        client: TestClient,
        mock_retrieval_client: MagicMock,
        unavailable_error: RetrievalUnavailableError,
    ) -> None:
        """Should return service_unavailable/503 with request echo."""
        mock_retrieval_client.search.side_effect = unavailable_error

        response = client.post(
            "/api/products/ai-search",
            json={"query": "lip balm", "agent": "gemini"},
            headers={"X-Request-ID": "req-123"},
        )
        assert response.status_code == 503

        data = response.json()
        assert data["error_code"] == "service_unavailable"
        assert data["request_info"] == {"query": "lip balm", "agent": "gemini"}
        assert data["request_id"] == "req-123"
        assert data["timestamp"]

    def test_search_remote_validation_error(
        self, client: TestClient, mock_retrieval_client: MagicMock
    ) -> None:
        """Should map a remote 400 to invalid_request/400."""
        mock_retrieval_client.search.side_effect = RetrievalClientError(
            "Retrieval service returned 400 for /search",
            status_code=400,
            payload={"error": "Unknown agent"},
        )

        response = client.post(
            "/api/products/ai-search", json={"query": "x", "agent": "nope"}
        )

        assert response.status_code == 400
        assert response.json()["details"] == "Unknown agent"

    def test_search_remote_server_error(
        self, client: TestClient, mock_retrieval_client: MagicMock
    ) -> None:
        """Should map a remote 500 to internal_error/500."""
        mock_retrieval_client.search.side_effect = RetrievalClientError(
            "Retrieval service returned 500 for /search", status_code=500
        )

        response = client.post("/api/products/ai-search", json={"query": "x"})

        assert response.status_code == 500
        assert response.json()["error_code"] == "internal_error"

    def test_search_non_finite_distance(
        self, client: TestClient, mock_retrieval_client: MagicMock
    ) -> None:
        """Should reject nan/inf distances as invalid_request/400."""
        for value in ("nan", "inf", "-Infinity"):
            response = client.post(
                "/api/products/ai-search",
                json={"query": "lip balm", "max_distance": value},
            )
            assert response.status_code == 400
            assert response.json()["error_code"] == "invalid_request"

        mock_retrieval_client.search.assert_not_called()

    def test_search_invalid_filters(
        self, client: TestClient, mock_retrieval_client: MagicMock
    ) -> None:
        """Should reject non-object filters as invalid_request."""
        response = client.post(
            "/api/products/ai-search", json={"query": "x", "filters": ["brand"]}
        )

        assert response.status_code == 400
        assert response.json()["error_code"] == "invalid_request"
        mock_retrieval_client.search.assert_not_called()


class TestDebugSearch:
    """Tests for POST /api/products/debug-search endpoint."""

    def test_debug_search_defaults(
        self, client: TestClient, mock_retrieval_client: MagicMock
    ) -> None:
        """Should use the default probe query."""
        mock_retrieval_client.debug_search.return_value = {"products": []}

        response = client.post("/api/products/debug-search", json={})

        assert response.status_code == 200
        assert response.json()["debug_data"] == {"products": []}
        mock_retrieval_client.debug_search.assert_awaited_once_with("lip balm", {})


class TestIndexManagement:
    """Tests for sync/delete/stats/health endpoints."""

    def test_sync_all(
        self, client: TestClient, mock_retrieval_client: MagicMock
    ) -> None:
        """Should return the sync acknowledgement."""
        mock_retrieval_client.sync_all.return_value = {"synced": 3}

        response = client.post("/api/products/sync")

        assert response.status_code == 200
        assert response.json()["rag_response"] == {"synced": 3}

    def test_sync_all_unavailable(
        self,
        client: TestClient,
        mock_retrieval_client: MagicMock,
        unavailable_error: RetrievalUnavailableError,
    ) -> None:
        """Should surface the classified failure."""
        mock_retrieval_client.sync_all.side_effect = unavailable_error

        response = client.post("/api/products/sync")

        assert response.status_code == 503
        assert response.json()["error_code"] == "service_unavailable"

    def test_sync_single(
        self, client: TestClient, mock_retrieval_client: MagicMock
    ) -> None:
        """Should echo the product ID."""
        mock_retrieval_client.sync_product.return_value = {"ok": True}

        response = client.post("/api/products/sync/p-9")

        assert response.status_code == 200
        data = response.json()
        assert data["product_id"] == "p-9"
        assert data["status"] == "synced"
        mock_retrieval_client.sync_product.assert_awaited_once_with("p-9")

    def test_delete_from_index(
        self, client: TestClient, mock_retrieval_client: MagicMock
    ) -> None:
        """Should echo the product ID."""
        mock_retrieval_client.delete_product.return_value = {"deleted": True}

        response = client.delete("/api/products/rag/p-9")

        assert response.status_code == 200
        data = response.json()
        assert data["product_id"] == "p-9"
        assert data["status"] == "deleted"

    def test_delete_from_index_unavailable(
        self,
        client: TestClient,
        mock_retrieval_client: MagicMock,
        unavailable_error: RetrievalUnavailableError,
    ) -> None:
        """Should echo the product ID in the error."""
        mock_retrieval_client.delete_product.side_effect = unavailable_error

        response = client.delete("/api/products/rag/p-9")

        assert response.status_code == 503
        assert response.json()["request_info"] == {"product_id": "p-9"}

    def test_stats(
        self, client: TestClient, mock_retrieval_client: MagicMock
    ) -> None:
        """Should return retrieval statistics."""
        mock_retrieval_client.stats.return_value = {"documents": 5}

        response = client.get("/api/products/rag/stats")

        assert response.status_code == 200
        assert response.json()["stats"] == {"documents": 5}

    def test_rag_health_unavailable(
        self,
        client: TestClient,
        mock_retrieval_client: MagicMock,
        unavailable_error: RetrievalUnavailableError,
    ) -> None:
        """Should report 503 when the retrieval service is down."""
        mock_retrieval_client.health.side_effect = unavailable_error

        response = client.get("/api/products/rag/health")

        assert response.status_code == 503
        assert response.json()["error_code"] == "service_unavailable"
