"""
FastAPI application entry point for the Polymarket gateway.

This is the main application file that initializes the FastAPI app,
configures logging, registers routes and maps gateway errors to JSON
responses. Caching and upstream calls live in the service modules.
"""
import logging
from collections.abc import Awaitable, Callable
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse

from .config_loader import config
from .errors import ApiError, format_error_response
from .routes import router
from .shared import reset_shared_instances

# Configure logging for the application
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def app_lifespan(app: FastAPI):
    """
    FastAPI lifespan handler.

    Validates configuration on startup and drops the shared cache, coalescer
    and client on shutdown.
    """
    _ = app
    config.validate()
    logger.info("Starting Polymarket gateway")
    logger.info("Gamma API URL: %s", config.gamma_api_url)
    logger.info(
        "Cache: enabled=%s ttl=%ss max_entries=%s",
        config.cache_enabled,
        config.cache_ttl,
        config.cache_max_entries,
    )
    logger.info("Server: %s:%s", config.server_host, config.server_port)
    try:
        yield
    finally:
        reset_shared_instances()
        logger.info("Shutting down Polymarket gateway")


# Initialize FastAPI application
app = FastAPI(
    title="Polymarket Gateway",
    version="1.0.0",
    description="Read-through caching gateway for the Polymarket APIs",
    lifespan=app_lifespan,
)

# Register routes
app.include_router(router)


@app.exception_handler(ApiError)
async def handle_api_error(request: Request, exc: ApiError) -> JSONResponse:
    """Serialize gateway errors with their own status code."""
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    else:
        logger.info("%s %s -> %s: %s", request.method, request.url.path, exc.status_code, exc.message)
    return JSONResponse(status_code=exc.status_code, content=format_error_response(exc))


@app.exception_handler(Exception)
async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content=format_error_response(exc))


@app.middleware("http")
async def add_noindex_header(
    request: Request,
    call_next: Callable[[Request], Awaitable[Response]],
) -> Response:
    """
    Middleware that adds X-Robots-Tag header to every response.

    This discourages search engines and other automated indexers from storing
    our responses.
    """
    response = await call_next(request)
    response.headers["X-Robots-Tag"] = "noindex, nofollow"
    return response


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        app,
        host=config.server_host,
        port=config.server_port,
        log_level="info",
    )
