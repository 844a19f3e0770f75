"""Catalog stores.

A catalog store persists categories and products and hands them back as
catalog documents. Two implementations share one interface:

- ``InMemoryCatalogStore``: process-local dicts (default backend, tests)
- ``SqlCatalogStore``: SQLAlchemy async ORM

Example usage:
    store = get_catalog_store()
    category = await store.create_category(name="Skin care")
    product = await store.create_product(name="Lip balm", category_id=category["_id"])
    products = await store.list_products(expand_category=True)
"""

from abc import ABC, abstractmethod
from copy import deepcopy
from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import selectinload

from catalog_gateway.catalog.models import Category, Product
from catalog_gateway.infrastructure.config import settings
from catalog_gateway.infrastructure.database import get_session_factory


class CatalogStore(ABC):
    """Interface for catalog persistence."""

    @abstractmethod
    async def create_category(
        self, name: str, description: str | None = None
    ) -> dict[str, Any]:
        """Store a new category and return its document."""

    @abstractmethod
    async def list_categories(self) -> list[dict[str, Any]]:
        """Return all categories, oldest first."""

    @abstractmethod
    async def get_category(self, category_id: str) -> dict[str, Any] | None:
        """Return a category document, or None if unknown."""

    @abstractmethod
    async def create_product(
        self,
        name: str,
        description: str | None = None,
        brand: str | None = None,
        category_id: str | None = None,
        gender: str | None = None,
        tags: list[str] | None = None,
    ) -> dict[str, Any]:
        """Store a new product and return its document (category unresolved)."""

    @abstractmethod
    async def list_products(
        self, expand_category: bool = True
    ) -> list[dict[str, Any]]:
        """Return all products, oldest first.

        Args:
            expand_category: Replace ``categoryId`` with the category document
                when the referenced category exists.
        """


# ============================================================================
# In-Memory Store
# ============================================================================


class InMemoryCatalogStore(CatalogStore):
    """In-memory catalog store."""

    def __init__(self) -> None:
        self._categories: dict[str, dict[str, Any]] = {}
        self._products: dict[str, dict[str, Any]] = {}

    async def create_category(
        self, name: str, description: str | None = None
    ) -> dict[str, Any]:
        now = datetime.now(timezone.utc)
        category = {
            "_id": str(uuid4()),
            "name": name,
            "description": description,
            "createdAt": now,
            "updatedAt": now,
        }
        self._categories[category["_id"]] = category
        return deepcopy(category)

    async def list_categories(self) -> list[dict[str, Any]]:
        return [deepcopy(c) for c in self._categories.values()]

    async def get_category(self, category_id: str) -> dict[str, Any] | None:
        category = self._categories.get(category_id)
        return deepcopy(category) if category else None

    async def create_product(
        self,
        name: str,
        description: str | None = None,
        brand: str | None = None,
        category_id: str | None = None,
        gender: str | None = None,
        tags: list[str] | None = None,
    ) -> dict[str, Any]:
        now = datetime.now(timezone.utc)
        product = {
            "_id": str(uuid4()),
            "name": name,
            "description": description,
            "brand": brand,
            "categoryId": category_id,
            "gender": gender,
            "tags": list(tags or []),
            "embedding": None,
            "__v": 0,
            "createdAt": now,
            "updatedAt": now,
        }
        self._products[product["_id"]] = product
        return deepcopy(product)

    async def list_products(
        self, expand_category: bool = True
    ) -> list[dict[str, Any]]:
        products = []
        for stored in self._products.values():
            product = deepcopy(stored)
            category_id = product.get("categoryId")
            if expand_category and category_id in self._categories:
                product["categoryId"] = deepcopy(self._categories[category_id])
            products.append(product)
        return products


# ============================================================================
# SQL Store
# ============================================================================


class SqlCatalogStore(CatalogStore):
    """Catalog store backed by SQLAlchemy.

    Each operation runs in its own session and commits before returning.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        """Initialize store.

        Args:
            session_factory: Async session factory.
        """
        self.session_factory = session_factory

    async def create_category(
        self, name: str, description: str | None = None
    ) -> dict[str, Any]:
        async with self.session_factory() as session:
            category = Category(name=name, description=description)
            session.add(category)
            await session.commit()
            return category.to_document()

    async def list_categories(self) -> list[dict[str, Any]]:
        async with self.session_factory() as session:
            result = await session.execute(
                select(Category).order_by(Category.created_at)
            )
            return [c.to_document() for c in result.scalars().all()]

    async def get_category(self, category_id: str) -> dict[str, Any] | None:
        async with self.session_factory() as session:
            category = await session.get(Category, category_id)
            return category.to_document() if category else None

    async def create_product(
        self,
        name: str,
        description: str | None = None,
        brand: str | None = None,
        category_id: str | None = None,
        gender: str | None = None,
        tags: list[str] | None = None,
    ) -> dict[str, Any]:
        async with self.session_factory() as session:
            product = Product(
                name=name,
                description=description,
                brand=brand,
                category_id=category_id,
                gender=gender,
                tags=list(tags or []),
            )
            session.add(product)
            await session.commit()
            return product.to_document()

    async def list_products(
        self, expand_category: bool = True
    ) -> list[dict[str, Any]]:
        async with self.session_factory() as session:
            query = select(Product).order_by(Product.created_at)
            if expand_category:
                query = query.options(selectinload(Product.category))
            result = await session.execute(query)
            return [
                p.to_document(expand_category=expand_category)
                for p in result.scalars().all()
            ]


# Global store instance
_catalog_store: CatalogStore | None = None


def get_catalog_store() -> CatalogStore:
    """Get the catalog store singleton for the configured backend.

    Returns:
        CatalogStore instance.

    Raises:
        ValueError: If ``catalog_backend`` is not recognized.
    """
    global _catalog_store
    if _catalog_store is None:
        if settings.catalog_backend == "memory":
            _catalog_store = InMemoryCatalogStore()
        elif settings.catalog_backend == "database":
            _catalog_store = SqlCatalogStore(get_session_factory())
        else:
            raise ValueError(
                f"Unknown catalog backend: {settings.catalog_backend!r}"
            )
    return _catalog_store
