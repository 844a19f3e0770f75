"""Product Catalog.

Category and product persistence plus the catalog service used by the API.
"""

from catalog_gateway.catalog.service import CatalogService
from catalog_gateway.catalog.store import (
    CatalogStore,
    InMemoryCatalogStore,
    SqlCatalogStore,
    get_catalog_store,
)

__all__ = [
    # Store
    "CatalogStore",
    "InMemoryCatalogStore",
    "SqlCatalogStore",
    "get_catalog_store",
    # Service
    "CatalogService",
]
