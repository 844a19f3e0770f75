"""Retrieval service HTTP client.

Wraps the external retrieval (RAG) service that owns semantic search and
the vector index built from catalog records.
"""

from typing import Any

import httpx
import structlog

from catalog_gateway.infrastructure.config import settings

logger = structlog.get_logger()


# ============================================================================
# Errors
# ============================================================================


class RetrievalClientError(Exception):
    """Error from a retrieval service call.

    Attributes:
        message: Human-readable error message.
        status_code: HTTP status returned by the service, if a response arrived.
        payload: Decoded JSON error body, if any.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        payload: dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.status_code = status_code
        self.payload = payload or {}
        super().__init__(message)


class RetrievalUnavailableError(RetrievalClientError):
    """Retrieval service could not be reached (refused or unresolved host)."""

    def __init__(self, base_url: str, message: str) -> None:
        self.base_url = base_url
        super().__init__(message)


# ============================================================================
# Client
# ============================================================================


class RetrievalClient:
    """HTTP client for the retrieval service.

    Every call opens its own connection; the client keeps no state between
    calls other than its configuration. Calls are never retried: failures
    are raised as ``RetrievalClientError`` for the caller to classify.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        sync_timeout: float = 120.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize retrieval client.

        Args:
            base_url: Retrieval service base URL.
            timeout: Request timeout in seconds.
            sync_timeout: Timeout in seconds for full index rebuilds.
            transport: Optional httpx transport override.
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.sync_timeout = sync_timeout
        self._transport = transport

    def _build_client(self, timeout: float) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            transport=self._transport,
            headers={"Accept": "application/json"},
        )

    async def _request(
        self,
        method: str,
        path: str,
        json: dict[str, Any] | None = None,
        timeout: float | None = None,
    ) -> Any:
        """Make a request and decode the JSON response.

        Args:
            method: HTTP method.
            path: Endpoint path.
            json: Request body.
            timeout: Per-call timeout override.

        Returns:
            Decoded JSON body (None for an empty body).

        Raises:
            RetrievalUnavailableError: If the service cannot be reached.
            RetrievalClientError: On any other transport error or a status >= 400.
        """
        logger.debug("Calling retrieval service", method=method, path=path)

        try:
            async with self._build_client(timeout or self.timeout) as client:
                response = await client.request(method, path, json=json)
        except httpx.ConnectError as e:
            logger.error(
                "Retrieval service unreachable",
                base_url=self.base_url,
                path=path,
                error=str(e),
            )
            raise RetrievalUnavailableError(
                self.base_url, f"Cannot connect to retrieval service: {e}"
            ) from e
        except httpx.RequestError as e:
            logger.error(
                "Retrieval service request failed",
                path=path,
                error=str(e) or type(e).__name__,
            )
            raise RetrievalClientError(
                f"Request failed: {str(e) or type(e).__name__}"
            ) from e

        if response.status_code >= 400:
            payload = _decode_error_body(response)
            logger.warning(
                "Retrieval service returned an error",
                path=path,
                status_code=response.status_code,
                error=payload.get("error"),
            )
            raise RetrievalClientError(
                f"Retrieval service returned {response.status_code} for {path}",
                status_code=response.status_code,
                payload=payload,
            )

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise RetrievalClientError(
                f"Invalid JSON from retrieval service for {path}",
                status_code=response.status_code,
            ) from e

    # =========================================================================
    # Search
    # =========================================================================

    async def search(
        self,
        query: str,
        agent: str,
        page: int = 1,
        limit: int = 10,
        filters: dict[str, Any] | None = None,
        max_distance: float = 1.2,
    ) -> dict[str, Any]:
        """Run a semantic search.

        Args:
            query: Search text.
            agent: Retrieval strategy name, forwarded as-is.
            page: Page number.
            limit: Page size.
            filters: Opaque filter map.
            max_distance: Maximum relevance distance.

        Returns:
            Search envelope with ``products`` and pagination fields.
        """
        return await self._request(
            "POST",
            "/search",
            json={
                "query": query,
                "agent": agent,
                "page": int(page),
                "limit": int(limit),
                "filters": filters or {},
                "max_distance": float(max_distance),
            },
        )

    async def debug_search(
        self, query: str, filters: dict[str, Any] | None = None
    ) -> dict[str, Any]:
        """Run the retrieval service's diagnostic search."""
        return await self._request(
            "POST", "/debug", json={"query": query, "filters": filters or {}}
        )

    # =========================================================================
    # Index synchronization
    # =========================================================================

    async def sync_all(self) -> Any:
        """Rebuild the whole index from the catalog."""
        return await self._request("POST", "/sync", timeout=self.sync_timeout)

    async def sync_product(self, product_id: str) -> Any:
        """Index (or re-index) a single product."""
        return await self._request(
            "POST", "/sync-product", json={"product_id": product_id}
        )

    async def delete_product(self, product_id: str) -> Any:
        """Remove a single product from the index."""
        return await self._request(
            "POST", "/delete-product", json={"product_id": product_id}
        )

    # =========================================================================
    # Monitoring
    # =========================================================================

    async def stats(self) -> Any:
        """Get index statistics."""
        return await self._request("GET", "/stats")

    async def health(self) -> Any:
        """Check retrieval service health."""
        return await self._request("GET", "/test")


def _decode_error_body(response: httpx.Response) -> dict[str, Any]:
    try:
        body = response.json()
    except ValueError:
        return {"error": response.text} if response.text else {}
    if isinstance(body, dict):
        return body
    return {"error": body}


# Global client instance
_retrieval_client: RetrievalClient | None = None


def get_retrieval_client() -> RetrievalClient:
    """Get the retrieval client singleton.

    Returns:
        RetrievalClient configured from settings.
    """
    global _retrieval_client
    if _retrieval_client is None:
        _retrieval_client = RetrievalClient(
            base_url=settings.rag_service_url,
            timeout=settings.rag_timeout_seconds,
            sync_timeout=settings.rag_sync_timeout_seconds,
        )
    return _retrieval_client
