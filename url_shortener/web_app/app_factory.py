"""FastAPI application factory."""

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.middleware.gzip import GZipMiddleware

from url_shortener import __version__
from url_shortener.lib.common.url_builder import base_path
from .api import api_router
from .web import redirect_router, web_router
from .middleware.gzip import GzipRequestMiddleware
from .middleware.logging import LoggingMiddleware


async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Answer malformed request bodies with 400 instead of 422."""
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": "Invalid request body", "errors": jsonable_errors(exc)},
    )


def jsonable_errors(exc: RequestValidationError) -> list:
    return [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg", "")}
        for err in exc.errors()
    ]


def create_app(service, config, logger=None) -> FastAPI:
    """Create and configure FastAPI application.

    Args:
        service: URLShortenerService instance (may be None until lifespan sets it)
        config: Configuration instance
        logger: Optional logger for request logging

    Returns:
        Configured FastAPI app
    """
    app = FastAPI(
        title="URL Shortener",
        description="URL shortening service",
        version=__version__,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )

    # Store instances in app state for access in routes
    app.state.service = service
    app.state.config = config

    app.add_exception_handler(RequestValidationError, validation_error_handler)

    # Last added runs first: requests are logged, then decompressed; responses
    # are compressed before the logger sees them
    app.add_middleware(GZipMiddleware, minimum_size=0)
    app.add_middleware(GzipRequestMiddleware)
    app.add_middleware(LoggingMiddleware, logger=logger)

    app.include_router(api_router, prefix="/api", tags=["API"])
    app.include_router(web_router, tags=["Web"])
    app.include_router(redirect_router, prefix=base_path(config.base_url), tags=["Web"])

    return app
