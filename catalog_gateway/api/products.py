"""Product API endpoints.

Provides catalog CRUD for products, AI search through the retrieval
service, and retrieval index management.
"""

from typing import Annotated, Any

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Request, status

from catalog_gateway.api.categories import get_catalog_service
from catalog_gateway.api.schemas import (
    DebugSearchRequest,
    ErrorResponse,
    ProductCreateRequest,
    SearchRequest,
)
from catalog_gateway.application.failures import ClassifiedError
from catalog_gateway.application.search_service import SearchService
from catalog_gateway.application.sync_service import SYNC_STATUS_ATTEMPTED, SyncService
from catalog_gateway.catalog.service import CatalogService
from catalog_gateway.infrastructure.retrieval_client import (
    RetrievalClient,
    get_retrieval_client,
)

router = APIRouter(prefix="/api/products", tags=["Products"])

ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    400: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
    503: {"model": ErrorResponse},
}


# ============================================================================
# Dependencies
# ============================================================================


def get_search_service(
    request: Request,
    client: Annotated[RetrievalClient, Depends(get_retrieval_client)],
) -> SearchService:
    """Get search service with request ID."""
    request_id = getattr(request.state, "request_id", None)
    return SearchService(client, request_id=request_id)


def get_sync_service(
    request: Request,
    client: Annotated[RetrievalClient, Depends(get_retrieval_client)],
) -> SyncService:
    """Get sync service with request ID."""
    request_id = getattr(request.state, "request_id", None)
    return SyncService(client, request_id=request_id)


# ============================================================================
# Converters
# ============================================================================


def error_to_exception(error: ClassifiedError) -> HTTPException:
    """Convert a classified error to an HTTP exception."""
    return HTTPException(status_code=error.status_code, detail=error.to_detail())


# ============================================================================
# Catalog Endpoints
# ============================================================================


@router.get(
    "",
    summary="List products",
    description="Get all products with their category expanded.",
)
async def list_products(
    service: Annotated[CatalogService, Depends(get_catalog_service)],
) -> list[dict[str, Any]]:
    """List all products."""
    return await service.list_products()


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}},
    summary="Create product",
    description="Create a product and schedule its indexing in the retrieval service.",
)
async def create_product(
    request: ProductCreateRequest,
    background_tasks: BackgroundTasks,
    service: Annotated[CatalogService, Depends(get_catalog_service)],
    sync: Annotated[SyncService, Depends(get_sync_service)],
) -> dict[str, Any]:
    """Create a product.

    The product is stored first; indexing runs in the background after the
    response is sent, so retrieval failures never affect this call.

    Args:
        request: Product creation request.
        background_tasks: Background task queue.
        service: Catalog service.
        sync: Sync service.

    Returns:
        Created product with sync annotation.
    """
    product = await service.create_product(
        name=request.name,
        description=request.description,
        brand=request.brand,
        category_id=request.category_id,
        gender=request.gender,
        tags=request.tags,
    )

    background_tasks.add_task(sync.on_product_created, product["_id"])

    return {
        **product,
        "rag_sync_status": SYNC_STATUS_ATTEMPTED,
        "message": "Product created successfully",
    }


# ============================================================================
# Search Endpoints
# ============================================================================


@router.post(
    "/ai-search",
    responses=ERROR_RESPONSES,
    summary="AI search",
    description="Semantic product search with pagination and filtering.",
)
async def ai_search(
    request: SearchRequest,
    service: Annotated[SearchService, Depends(get_search_service)],
) -> dict[str, Any]:
    """Search products through the retrieval service.

    Args:
        request: Search request.
        service: Search service.

    Returns:
        Retrieval envelope with sanitized products and request metadata.

    Raises:
        HTTPException: With the classified error.
    """
    result = await service.search(
        query=request.query,
        agent=request.agent,
        page=request.page,
        limit=request.limit,
        filters=request.filters,
        max_distance=request.max_distance,
    )
    if result.error:
        raise error_to_exception(result.error)
    return result.data or {}


@router.post(
    "/debug-search",
    responses=ERROR_RESPONSES,
    summary="Debug search",
    description="Run the retrieval service's diagnostic search.",
)
async def debug_search(
    service: Annotated[SearchService, Depends(get_search_service)],
    request: DebugSearchRequest | None = None,
) -> dict[str, Any]:
    """Run a debug search."""
    request = request or DebugSearchRequest()
    result = await service.debug_search(query=request.query, filters=request.filters)
    if result.error:
        raise error_to_exception(result.error)
    return result.data or {}


# ============================================================================
# Index Management Endpoints
# ============================================================================


@router.post(
    "/sync",
    responses=ERROR_RESPONSES,
    summary="Sync all products",
    description="Rebuild the retrieval index from the catalog.",
)
async def sync_all_products(
    service: Annotated[SyncService, Depends(get_sync_service)],
) -> dict[str, Any]:
    """Sync all products to the retrieval service."""
    result = await service.sync_all()
    if result.error:
        raise error_to_exception(result.error)
    return result.data or {}


@router.post(
    "/sync/{product_id}",
    responses=ERROR_RESPONSES,
    summary="Sync product",
    description="Index a single product in the retrieval service.",
)
async def sync_product(
    product_id: str,
    service: Annotated[SyncService, Depends(get_sync_service)],
) -> dict[str, Any]:
    """Sync a single product to the retrieval service."""
    result = await service.sync_product(product_id)
    if result.error:
        raise error_to_exception(result.error)
    return result.data or {}


@router.delete(
    "/rag/{product_id}",
    responses=ERROR_RESPONSES,
    summary="Delete product from index",
    description="Remove a single product from the retrieval index.",
)
async def delete_from_index(
    product_id: str,
    service: Annotated[SyncService, Depends(get_sync_service)],
) -> dict[str, Any]:
    """Delete a product from the retrieval index."""
    result = await service.delete_product(product_id)
    if result.error:
        raise error_to_exception(result.error)
    return result.data or {}


@router.get(
    "/rag/stats",
    responses=ERROR_RESPONSES,
    summary="Retrieval stats",
    description="Get retrieval index statistics.",
)
async def rag_stats(
    service: Annotated[SyncService, Depends(get_sync_service)],
) -> dict[str, Any]:
    """Get retrieval index statistics."""
    result = await service.stats()
    if result.error:
        raise error_to_exception(result.error)
    return result.data or {}


@router.get(
    "/rag/health",
    responses=ERROR_RESPONSES,
    summary="Retrieval health",
    description="Check retrieval service health.",
)
async def rag_health(
    service: Annotated[SyncService, Depends(get_sync_service)],
) -> dict[str, Any]:
    """Check retrieval service health."""
    result = await service.health()
    if result.error:
        raise error_to_exception(result.error)
    return result.data or {}
