"""Application layer module.

Contains application services (use cases) that orchestrate search and
index synchronization against the retrieval service.
"""

from catalog_gateway.application.failures import (
    ClassifiedError,
    ErrorCategory,
    classify_failure,
)
from catalog_gateway.application.search_service import SearchResult, SearchService
from catalog_gateway.application.sync_service import SyncOutcome, SyncResult, SyncService

__all__ = [
    "ClassifiedError",
    "ErrorCategory",
    "classify_failure",
    "SearchResult",
    "SearchService",
    "SyncOutcome",
    "SyncResult",
    "SyncService",
]
