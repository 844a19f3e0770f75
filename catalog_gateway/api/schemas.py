"""API schemas for the catalog gateway.

Pydantic models for request validation. Responses pass through the
retrieval service's payloads, so most of them stay loosely typed.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# ============================================================================
# Common Schemas
# ============================================================================


class ErrorResponse(BaseModel):
    """Standard error response.

    All API errors follow this format for consistency.
    """

    error_code: str = Field(
        ...,
        description="Error category: invalid_request, service_unavailable or internal_error",
    )
    message: str = Field(..., description="Human-readable error message")
    details: Any = Field(default=None, description="Additional error details")
    request_info: dict[str, Any] = Field(
        default_factory=dict, description="Request fields echoed for correlation"
    )
    timestamp: str | None = Field(default=None, description="When the error occurred")
    request_id: str | None = Field(
        default=None, description="Request ID for correlation"
    )


# ============================================================================
# Catalog Schemas
# ============================================================================


class CategoryCreateRequest(BaseModel):
    """Request to create a category."""

    name: str = Field(..., min_length=1, max_length=200, description="Category name")
    description: str | None = Field(default=None, description="Category description")


class ProductCreateRequest(BaseModel):
    """Request to create a product."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., min_length=1, max_length=500, description="Product name")
    description: str | None = Field(default=None, description="Product description")
    brand: str | None = Field(default=None, description="Brand name")
    category_id: str | None = Field(
        default=None, alias="categoryId", description="Category identifier"
    )
    gender: str | None = Field(default=None, description="Target gender tag")
    tags: list[str] = Field(default_factory=list, description="Free-form tags")


# ============================================================================
# Search Schemas
# ============================================================================


class SearchRequest(BaseModel):
    """AI search request.

    Fields are deliberately lenient; normalization and validation happen
    in the search service so failures share one error format.
    """

    query: str | None = Field(default=None, description="Search text")
    agent: str | None = Field(default=None, description="Retrieval strategy name")
    page: int | str | None = Field(default=None, description="Page number (1-based)")
    limit: int | str | None = Field(default=None, description="Items per page")
    filters: dict[str, Any] = Field(
        default_factory=dict, description="Filters forwarded to the retrieval service"
    )
    max_distance: float | str | None = Field(
        default=None, description="Maximum relevance distance"
    )


class DebugSearchRequest(BaseModel):
    """Debug search request."""

    query: str | None = Field(default=None, description="Search text")
    filters: dict[str, Any] = Field(default_factory=dict, description="Filters")
