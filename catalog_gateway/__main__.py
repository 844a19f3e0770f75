"""Run the catalog gateway with uvicorn.

Usage:
    python -m catalog_gateway
"""

import uvicorn

from catalog_gateway.infrastructure.config import settings


def main() -> None:
    """Serve the API on the configured host and port."""
    uvicorn.run(
        "catalog_gateway.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        reload=settings.debug,
    )


if __name__ == "__main__":
    main()
