"""Index synchronization application service.

Keeps the retrieval service's index in step with the catalog. Explicit
operations report classified failures to the caller; the creation-time
hook absorbs them, since a catalog write must never depend on the index.
"""

from dataclasses import dataclass
from typing import Any

import structlog

from catalog_gateway.application.failures import (
    ClassifiedError,
    classify_failure,
    invalid_request_error,
)
from catalog_gateway.domain.sanitizer import utc_timestamp
from catalog_gateway.infrastructure.retrieval_client import RetrievalClient

logger = structlog.get_logger()

SYNC_STATUS_ATTEMPTED = "attempted"


# ============================================================================
# Service Result Types
# ============================================================================


@dataclass
class SyncOutcome:
    """Acknowledged synchronization of a single product."""

    product_id: str
    status: str
    rag_response: Any = None


@dataclass
class SyncResult:
    """Result of a sync-management operation."""

    data: dict[str, Any] | None = None
    outcome: SyncOutcome | None = None
    error: ClassifiedError | None = None

    @property
    def success(self) -> bool:
        return self.error is None


# ============================================================================
# Sync Service
# ============================================================================


class SyncService:
    """Application service for retrieval index management."""

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

    async def on_product_created(self, product_id: str) -> str:
        """Best-effort index refresh after a product was created.

        Runs after the creation response; never raises.

        Args:
            product_id: Identifier of the newly stored product.

        Returns:
            Always ``"attempted"``.
        """
        logger.info("Auto-syncing new product", product_id=product_id)
        try:
            await self.client.sync_product(product_id)
        except Exception as e:
            error = classify_failure(e, {"product_id": product_id})
            logger.warning(
                "Auto-sync failed, product still saved",
                product_id=product_id,
                category=error.category.value,
                error=str(e),
            )
        else:
            logger.info("Product auto-synced", product_id=product_id)
        return SYNC_STATUS_ATTEMPTED

    async def sync_all(self) -> SyncResult:
        """Rebuild the whole index.

        Returns:
            SyncResult with the service acknowledgement or a classified error.
        """
        logger.info("Starting full sync", request_id=self.request_id)
        try:
            response = await self.client.sync_all()
        except Exception as e:
            return self._failed("Full sync failed", e, {})

        logger.info("Full sync completed", request_id=self.request_id)
        return SyncResult(
            data={
                "message": "Full sync completed successfully",
                "rag_response": response,
                "timestamp": utc_timestamp(),
            }
        )

    async def sync_product(self, product_id: str | None) -> SyncResult:
        """Index (or re-index) a single product.

        Args:
            product_id: Product identifier (required).

        Returns:
            SyncResult echoing the product ID.
        """
        return await self._single(
            product_id,
            call=self.client.sync_product,
            status="synced",
            message="Product synced successfully",
        )

    async def delete_product(self, product_id: str | None) -> SyncResult:
        """Remove a single product from the index.

        Args:
            product_id: Product identifier (required).

        Returns:
            SyncResult echoing the product ID.
        """
        return await self._single(
            product_id,
            call=self.client.delete_product,
            status="deleted",
            message="Product deleted from retrieval index successfully",
        )

    async def stats(self) -> SyncResult:
        """Get retrieval index statistics."""
        try:
            response = await self.client.stats()
        except Exception as e:
            return self._failed("Stats request failed", e, {})

        return SyncResult(
            data={
                "message": "Retrieval stats retrieved successfully",
                "stats": response,
                "timestamp": utc_timestamp(),
            }
        )

    async def health(self) -> SyncResult:
        """Check retrieval service health."""
        try:
            response = await self.client.health()
        except Exception as e:
            return self._failed("Retrieval health check failed", e, {})

        return SyncResult(
            data={
                "message": "Retrieval health check successful",
                "rag_status": response,
                "timestamp": utc_timestamp(),
            }
        )

    async def _single(
        self,
        product_id: str | None,
        call: Any,
        status: str,
        message: str,
    ) -> SyncResult:
        context = {"product_id": product_id}

        if product_id is None or not str(product_id).strip():
            return SyncResult(
                error=invalid_request_error(
                    "Product ID is required",
                    "Please provide a valid product ID",
                    context,
                )
            )

        logger.info(
            "Index operation requested",
            operation=status,
            product_id=product_id,
            request_id=self.request_id,
        )

        try:
            response = await call(product_id)
        except Exception as e:
            return self._failed(f"Index operation '{status}' failed", e, context)

        outcome = SyncOutcome(product_id=product_id, status=status, rag_response=response)
        return SyncResult(
            outcome=outcome,
            data={
                "message": message,
                "product_id": outcome.product_id,
                "status": outcome.status,
                "rag_response": outcome.rag_response,
                "timestamp": utc_timestamp(),
            },
        )

    def _failed(
        self, event: str, exc: Exception, context: dict[str, Any]
    ) -> SyncResult:
        error = classify_failure(exc, context)
        logger.error(
            event,
            category=error.category.value,
            error=str(exc),
            request_id=self.request_id,
            **context,
        )
        return SyncResult(error=error)
