"""Category API endpoints.

Provides endpoints for listing and creating categories.
"""

from typing import Annotated, Any

from fastapi import APIRouter, Depends, status

from catalog_gateway.api.schemas import CategoryCreateRequest, ErrorResponse
from catalog_gateway.catalog.service import CatalogService
from catalog_gateway.catalog.store import CatalogStore, get_catalog_store

router = APIRouter(prefix="/api/categories", tags=["Categories"])


def get_catalog_service(
    store: Annotated[CatalogStore, Depends(get_catalog_store)],
) -> CatalogService:
    """Get catalog service for the configured store."""
    return CatalogService(store)


@router.get(
    "",
    summary="List categories",
    description="Get all categories.",
)
async def list_categories(
    service: Annotated[CatalogService, Depends(get_catalog_service)],
) -> list[dict[str, Any]]:
    """List all categories."""
    return await service.list_categories()


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}},
    summary="Create category",
    description="Create a new category.",
)
async def create_category(
    request: CategoryCreateRequest,
    service: Annotated[CatalogService, Depends(get_catalog_service)],
) -> dict[str, Any]:
    """Create a category.

    Args:
        request: Category creation request.
        service: Catalog service.

    Returns:
        Created category.
    """
    return await service.create_category(
        name=request.name, description=request.description
    )
