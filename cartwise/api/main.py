"""FastAPI application main module.

This module defines the main FastAPI application instance and core API
endpoints for the Cartwise recommendation service. It provides health check
and metrics endpoints and serves as the entry point for the API server.
"""

import logging
from typing import Dict

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from cartwise import __version__
from cartwise.api.logging_config import RequestLoggingMiddleware, setup_logging
from cartwise.api.metrics import metrics_service
from cartwise.api.routes import recommend
from cartwise.config import AppSettings
from cartwise.exceptions import CartwiseException

logger = logging.getLogger(__name__)

setup_logging(AppSettings.from_env().log_level)

# Create FastAPI application instance
app = FastAPI(
    title="Cartwise API",
    description="Hybrid product recommendation service",
    version=__version__,
)

app.add_middleware(RequestLoggingMiddleware)

# Include routers
app.include_router(recommend.router)


@app.exception_handler(CartwiseException)
async def cartwise_exception_handler(
    request: Request, exc: CartwiseException
) -> JSONResponse:
    """Render Cartwise errors as ``{"error": ..., "details": ...}``."""
    if exc.status_code >= 500:
        logger.error(
            exc.message,
            extra={"path": str(request.url.path), "status_code": exc.status_code},
        )
    else:
        logger.warning(
            exc.message,
            extra={"path": str(request.url.path), "status_code": exc.status_code},
        )
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.message, "details": exc.details},
    )


@app.get("/ping")
def ping() -> Dict[str, str]:
    """Health check endpoint.

    Returns:
        Dictionary with status key set to "ok".

    Example:
        >>> response = client.get("/ping")
        >>> assert response.json() == {"status": "ok"}
    """
    return {"status": "ok"}


@app.get("/metrics")
def metrics() -> Dict:
    """Request counters and latencies per listing kind."""
    return metrics_service.get_metrics()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "cartwise.api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
