"""Search application service.

Validates search requests, forwards them to the retrieval service and
turns the result into a boundary-safe, annotated response.
"""

import math
from dataclasses import dataclass
from typing import Any

import structlog

from catalog_gateway.application.failures import (
    ClassifiedError,
    classify_failure,
    invalid_request_error,
)
from catalog_gateway.domain.sanitizer import sanitize_records, utc_timestamp
from catalog_gateway.infrastructure.config import settings
from catalog_gateway.infrastructure.retrieval_client import RetrievalClient

logger = structlog.get_logger()

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
DEFAULT_MAX_DISTANCE = 1.2
DEFAULT_DEBUG_QUERY = "lip balm"


# ============================================================================
# Service Result Types
# ============================================================================


@dataclass
class SearchResult:
    """Result of a search or debug search."""

    data: dict[str, Any] | None = None
    error: ClassifiedError | None = None

    @property
    def success(self) -> bool:
        return self.error is None


@dataclass
class SearchQuery:
    """A validated, normalized search request."""

    query: str
    original_query: str
    agent: str
    page: int
    limit: int
    filters: dict[str, Any]
    max_distance: float


class InvalidSearchRequest(ValueError):
    """Raised when a search request fails local validation."""

    def __init__(self, message: str, details: str) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


def _positive_int(name: str, value: Any, default: int) -> int:
    if value is None or value == "":
        return default
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise InvalidSearchRequest(
            f"Invalid {name}", f"{name} must be a positive integer, got {value!r}"
        ) from None
    if number < 1:
        raise InvalidSearchRequest(
            f"Invalid {name}", f"{name} must be a positive integer, got {value!r}"
        )
    return number


def normalize_search_request(
    query: str | None,
    agent: str | None = None,
    page: Any = None,
    limit: Any = None,
    filters: dict[str, Any] | None = None,
    max_distance: Any = None,
) -> SearchQuery:
    """Validate and normalize raw search parameters.

    Raises:
        InvalidSearchRequest: If the query is blank or a number is malformed.
    """
    if query is None or not str(query).strip():
        raise InvalidSearchRequest(
            "Query is required", "Please provide a search query"
        )

    if max_distance is None or max_distance == "":
        distance = DEFAULT_MAX_DISTANCE
    else:
        try:
            distance = float(max_distance)
        except (TypeError, ValueError):
            raise InvalidSearchRequest(
                "Invalid max_distance",
                f"max_distance must be a number, got {max_distance!r}",
            ) from None
        if not math.isfinite(distance):
            raise InvalidSearchRequest(
                "Invalid max_distance",
                f"max_distance must be a finite number, got {max_distance!r}",
            )

    return SearchQuery(
        query=str(query).strip(),
        original_query=str(query),
        agent=agent or settings.rag_default_agent,
        page=_positive_int("page", page, DEFAULT_PAGE),
        limit=_positive_int("limit", limit, DEFAULT_LIMIT),
        filters=dict(filters or {}),
        max_distance=distance,
    )


# ============================================================================
# Search Service
# ============================================================================


class SearchService:
    """Application service for catalog search.

    Orchestrates the flow of:
    1. Validating the request locally (no network on failure)
    2. Forwarding it to the retrieval service
    3. Sanitizing returned products and attaching request metadata
    """

    def __init__(
        self,
        client: RetrievalClient,
        request_id: str | None = None,
    ) -> None:
        """Initialize service.

        Args:
            client: Retrieval service client.
            request_id: Request ID for correlation.
        """
        self.client = client
        self.request_id = request_id

    async def search(
        self,
        query: str | None,
        agent: str | None = None,
        page: Any = None,
        limit: Any = None,
        filters: dict[str, Any] | None = None,
        max_distance: Any = None,
    ) -> SearchResult:
        """Search the catalog through the retrieval service.

        Args:
            query: Search text (required, non-blank).
            agent: Retrieval strategy; defaults to the configured agent.
            page: Page number (default 1).
            limit: Page size (default 10).
            filters: Opaque filter map.
            max_distance: Relevance threshold (default 1.2).

        Returns:
            SearchResult with the annotated envelope or a classified error.
        """
        context = {
            "query": query,
            "agent": agent or settings.rag_default_agent,
        }

        try:
            request = normalize_search_request(
                query, agent, page, limit, filters, max_distance
            )
        except InvalidSearchRequest as e:
            logger.info(
                "Rejected search request",
                reason=e.details,
                request_id=self.request_id,
            )
            return SearchResult(
                error=invalid_request_error(e.message, e.details, context)
            )

        logger.info(
            "Search requested",
            query=request.query,
            agent=request.agent,
            page=request.page,
            limit=request.limit,
            filters=request.filters,
            request_id=self.request_id,
        )

        try:
            data = await self.client.search(
                query=request.query,
                agent=request.agent,
                page=request.page,
                limit=request.limit,
                filters=request.filters,
                max_distance=request.max_distance,
            )
        except Exception as e:
            error = classify_failure(e, context)
            logger.error(
                "Search failed",
                category=error.category.value,
                error=str(e),
                request_id=self.request_id,
            )
            return SearchResult(error=error)

        data = dict(data) if isinstance(data, dict) else {"data": data}
        if isinstance(data.get("products"), list):
            data["products"] = sanitize_records(data["products"])

        data["request_metadata"] = {
            "original_query": request.original_query,
            "agent_used": request.agent,
            "page_requested": request.page,
            "limit_requested": request.limit,
            "filters_applied": request.filters,
            "timestamp": utc_timestamp(),
        }

        return SearchResult(data=data)

    async def debug_search(
        self,
        query: str | None = None,
        filters: dict[str, Any] | None = None,
    ) -> SearchResult:
        """Run the retrieval service's diagnostic search.

        Args:
            query: Search text (defaults to a fixed probe query).
            filters: Opaque filter map.

        Returns:
            SearchResult whose data wraps the debug payload.
        """
        query = query or DEFAULT_DEBUG_QUERY
        filters = dict(filters or {})

        logger.info(
            "Debug search requested",
            query=query,
            filters=filters,
            request_id=self.request_id,
        )

        try:
            debug_data = await self.client.debug_search(query, filters)
        except Exception as e:
            error = classify_failure(e, {"query": query, "filters": filters})
            logger.error(
                "Debug search failed",
                category=error.category.value,
                error=str(e),
                request_id=self.request_id,
            )
            return SearchResult(error=error)

        if not isinstance(debug_data, dict):
            debug_data = {"data": debug_data}
        debug_data = dict(debug_data)
        if isinstance(debug_data.get("products"), list):
            debug_data["products"] = sanitize_records(debug_data["products"])

        return SearchResult(
            data={
                "message": "Debug search completed",
                "debug_data": debug_data,
                "timestamp": utc_timestamp(),
            }
        )
