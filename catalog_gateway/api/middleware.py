"""API middleware for the catalog gateway.

Provides:
- Request ID correlation
- Error handling
"""

import re
import time
from typing import Callable
from uuid import uuid4

import structlog
from fastapi import FastAPI, Request, Response, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from catalog_gateway.domain.sanitizer import utc_timestamp

logger = structlog.get_logger()

_SAFE_ID = re.compile(r"[A-Za-z0-9._:-]+")


# ============================================================================
# Request ID Middleware
# ============================================================================


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Middleware to add request ID for correlation.

    A caller-supplied ``X-Request-ID`` is reused when it is a short token of
    URL-safe characters; anything else is replaced with a fresh UUID. The ID
    is then added to:
    - Request state, where services and error bodies pick it up
    - Response headers for client correlation
    - Log context, together with the method and path
    """

    HEADER_NAME = "X-Request-ID"
    MAX_LENGTH = 128

    @classmethod
    def resolve_request_id(cls, supplied: str | None) -> str:
        """Return the caller's request ID if usable, else a new UUID."""
        if supplied and len(supplied) <= cls.MAX_LENGTH and _SAFE_ID.fullmatch(supplied):
            return supplied
        return str(uuid4())

    async def dispatch(
        self, request: Request, call_next: Callable
    ) -> Response:
        supplied = request.headers.get(self.HEADER_NAME)
        request_id = self.resolve_request_id(supplied)
        if supplied and supplied != request_id:
            logger.info("Replaced unusable request ID", request_id=request_id)

        request.state.request_id = request_id
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )

        start_time = time.perf_counter()
        response = None

        try:
            response = await call_next(request)
        finally:
            status_code = getattr(response, "status_code", 500)
            log = logger.warning if status_code >= 500 else logger.info
            log(
                "Request completed",
                status_code=status_code,
                duration_ms=round((time.perf_counter() - start_time) * 1000, 2),
            )
            structlog.contextvars.unbind_contextvars("request_id", "method", "path")

        response.headers[self.HEADER_NAME] = request_id
        return response


# ============================================================================
# Error Handling Middleware
# ============================================================================


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Middleware for consistent error handling.

    Catches unhandled exceptions and returns standardized error responses.
    """

    async def dispatch(
        self, request: Request, call_next: Callable
    ) -> Response:
        """Handle errors uniformly.

        Args:
            request: Incoming request.
            call_next: Next middleware/handler.

        Returns:
            Response or error response.
        """
        try:
            return await call_next(request)
        except Exception as e:
            request_id = getattr(request.state, "request_id", None)

            logger.exception(
                "Unhandled exception",
                path=request.url.path,
                method=request.method,
                error=str(e),
            )

            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={
                    "error_code": "internal_error",
                    "message": "An internal error occurred",
                    "details": None,
                    "request_info": {},
                    "timestamp": utc_timestamp(),
                    "request_id": request_id,
                },
            )


# ============================================================================
# Middleware Setup
# ============================================================================


def setup_middleware(app: FastAPI) -> None:
    """Configure all middleware for the application.

    Middleware is added in reverse order (last added = first executed).

    Args:
        app: FastAPI application instance.
    """
    # Error handling (inside request ID, so error bodies carry the ID)
    app.add_middleware(ErrorHandlerMiddleware)

    # Request ID correlation (outermost)
    app.add_middleware(RequestIdMiddleware)
