"""Catalog service for business logic.

Provides the catalog read/write operations exposed by the API. All
documents leaving this service are sanitized.
"""

from typing import Any

import structlog

from catalog_gateway.catalog.store import CatalogStore
from catalog_gateway.domain.sanitizer import sanitize_record, sanitize_records

logger = structlog.get_logger()


class CatalogService:
    """Service for catalog operations.

    Example usage:
        service = CatalogService(get_catalog_store())
        product = await service.create_product(name="Lip balm", brand="Acme")
    """

    def __init__(self, store: CatalogStore) -> None:
        """Initialize service with a catalog store.

        Args:
            store: Catalog store.
        """
        self.store = store

    async def create_category(
        self, name: str, description: str | None = None
    ) -> dict[str, Any]:
        """Create a category.

        Args:
            name: Category name.
            description: Optional description.

        Returns:
            Sanitized category document.
        """
        category = await self.store.create_category(name=name, description=description)
        logger.info("Category created", category_id=category["_id"], name=name)
        return sanitize_record(category)

    async def list_categories(self) -> list[dict[str, Any]]:
        """List all categories."""
        return sanitize_records(await self.store.list_categories())

    async def create_product(
        self,
        name: str,
        description: str | None = None,
        brand: str | None = None,
        category_id: str | None = None,
        gender: str | None = None,
        tags: list[str] | None = None,
    ) -> dict[str, Any]:
        """Create a product.

        The category reference is stored as given; an unknown category
        stays unresolved instead of failing the write.

        Returns:
            Sanitized product document.
        """
        if category_id and await self.store.get_category(category_id) is None:
            logger.warning(
                "Product references unknown category", category_id=category_id
            )

        product = await self.store.create_product(
            name=name,
            description=description,
            brand=brand,
            category_id=category_id,
            gender=gender,
            tags=tags,
        )
        logger.info("Product created", product_id=product["_id"], name=name)
        return sanitize_record(product)

    async def list_products(self) -> list[dict[str, Any]]:
        """List all products with their category expanded."""
        return sanitize_records(await self.store.list_products(expand_category=True))
