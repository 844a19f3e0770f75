"""Failure classification for retrieval service calls.

Every failed remote call is reduced to one of three categories so clients
can tell "try again later" from "fix your request" from "our bug":

==================== ====== ==========================================
Category             Status Condition
==================== ====== ==========================================
service_unavailable  503    retrieval service unreachable
invalid_request      400    remote 4xx, or a local precondition failed
internal_error       500    anything else (remote 5xx, timeouts, ...)
==================== ====== ==========================================

The mapping depends only on the failure, never on the operation.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

import httpx

from catalog_gateway.domain.sanitizer import utc_timestamp
from catalog_gateway.infrastructure.retrieval_client import (
    RetrievalClientError,
    RetrievalUnavailableError,
)


class ErrorCategory(str, Enum):
    """User-facing error categories."""

    INVALID_REQUEST = "invalid_request"
    SERVICE_UNAVAILABLE = "service_unavailable"
    INTERNAL_ERROR = "internal_error"


CATEGORY_STATUS = {
    ErrorCategory.INVALID_REQUEST: 400,
    ErrorCategory.SERVICE_UNAVAILABLE: 503,
    ErrorCategory.INTERNAL_ERROR: 500,
}


@dataclass
class ClassifiedError:
    """A failure reduced to category, status, message and details.

    ``context`` echoes request fields (query, product_id...) so the caller
    can correlate the failure with its request.
    """

    category: ErrorCategory
    message: str
    details: Any = None
    context: dict[str, Any] = field(default_factory=dict)
    timestamp: str = field(default_factory=utc_timestamp)

    @property
    def status_code(self) -> int:
        """HTTP status for this category."""
        return CATEGORY_STATUS[self.category]

    def to_detail(self) -> dict[str, Any]:
        """Convert to an HTTP error body."""
        return {
            "error_code": self.category.value,
            "message": self.message,
            "details": self.details,
            "request_info": dict(self.context),
            "timestamp": self.timestamp,
        }


def invalid_request_error(
    message: str,
    details: Any = None,
    context: dict[str, Any] | None = None,
) -> ClassifiedError:
    """Build an error for a failed local precondition."""
    return ClassifiedError(
        category=ErrorCategory.INVALID_REQUEST,
        message=message,
        details=details,
        context=context or {},
    )


def classify_failure(
    exc: BaseException, context: dict[str, Any] | None = None
) -> ClassifiedError:
    """Classify a failed retrieval service call.

    Args:
        exc: The raised exception.
        context: Request fields to echo back.

    Returns:
        ClassifiedError for the failure.
    """
    context = context or {}

    if isinstance(exc, (RetrievalUnavailableError, httpx.ConnectError)):
        base_url = getattr(exc, "base_url", None)
        return ClassifiedError(
            category=ErrorCategory.SERVICE_UNAVAILABLE,
            message="Retrieval service is unavailable",
            details=(
                f"Cannot connect to retrieval service at {base_url}"
                if base_url
                else "Cannot connect to retrieval service"
            ),
            context=context,
        )

    status_code = _status_code(exc)
    if status_code is not None and 400 <= status_code < 500:
        payload = getattr(exc, "payload", None) or {}
        return ClassifiedError(
            category=ErrorCategory.INVALID_REQUEST,
            message=payload.get("message") or "Retrieval service rejected the request",
            details=payload.get("error") or payload.get("details") or str(exc),
            context=context,
        )

    return ClassifiedError(
        category=ErrorCategory.INTERNAL_ERROR,
        message="Retrieval service request failed",
        details=_error_text(exc),
        context=context,
    )


def _status_code(exc: BaseException) -> int | None:
    if isinstance(exc, RetrievalClientError):
        return exc.status_code
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code
    return None


def _error_text(exc: BaseException) -> str:
    if isinstance(exc, RetrievalClientError):
        upstream = exc.payload.get("error")
        if upstream:
            return str(upstream)
        return exc.message
    return str(exc) or type(exc).__name__
