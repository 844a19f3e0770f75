"""Catalog gateway main application module.

This module initializes the FastAPI application and configures
core middleware, routers, and startup/shutdown events.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from catalog_gateway.api.categories import router as categories_router
from catalog_gateway.api.health import router as health_router
from catalog_gateway.api.middleware import setup_middleware
from catalog_gateway.api.products import router as products_router
from catalog_gateway.domain.sanitizer import utc_timestamp
from catalog_gateway.infrastructure.config import settings
from catalog_gateway.infrastructure.database import create_tables, dispose_engine
from catalog_gateway.infrastructure.logging import configure_logging

configure_logging(settings)

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Handle application startup and shutdown events.

    Args:
        app: The FastAPI application instance.

    Yields:
        None after startup, cleanup happens after yield.
    """
    # Startup
    logger.info(
        "Starting catalog gateway",
        version=settings.api_version,
        debug=settings.debug,
        catalog_backend=settings.catalog_backend,
        rag_service_url=settings.rag_service_url,
    )

    if settings.catalog_backend == "database":
        await create_tables()

    yield

    # Shutdown
    logger.info("Shutting down catalog gateway")
    if settings.catalog_backend == "database":
        await dispose_engine()


app = FastAPI(
    title="Catalog Gateway",
    description="Product catalog backend with retrieval-service search",
    version=settings.api_version,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS middleware (must be added before custom middleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Setup custom middleware (request ID, error handling)
setup_middleware(app)

# Include routers
app.include_router(health_router, tags=["Health"])
app.include_router(categories_router)
app.include_router(products_router)


# ============================================================================
# Custom Exception Handlers
# ============================================================================


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """Handle HTTP exceptions with consistent format."""
    request_id = getattr(request.state, "request_id", None)

    detail = exc.detail
    if isinstance(detail, dict):
        content = {
            "error_code": detail.get("error_code", "internal_error"),
            "message": detail.get("message", str(detail)),
            "details": detail.get("details"),
            "request_info": detail.get("request_info", {}),
            "timestamp": detail.get("timestamp") or utc_timestamp(),
        }
    else:
        content = {
            "error_code": (
                "invalid_request" if exc.status_code < 500 else "internal_error"
            ),
            "message": str(detail),
            "details": None,
            "request_info": {},
            "timestamp": utc_timestamp(),
        }
    content["request_id"] = request_id

    return JSONResponse(
        status_code=exc.status_code,
        content=content,
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Report request body validation failures as invalid requests."""
    request_id = getattr(request.state, "request_id", None)

    details = [
        {
            "field": ".".join(str(part) for part in error.get("loc", ())[1:]) or None,
            "message": error.get("msg", ""),
        }
        for error in exc.errors()
    ]

    logger.info(
        "Request validation failed",
        path=request.url.path,
        errors=details,
    )

    return JSONResponse(
        status_code=400,
        content={
            "error_code": "invalid_request",
            "message": "Request validation failed",
            "details": details,
            "request_info": {},
            "timestamp": utc_timestamp(),
            "request_id": request_id,
        },
    )
