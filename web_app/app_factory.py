"""FastAPI application factory."""

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from goto_links import __version__
from goto_links.errors import (
    StoreError,
    MalformedTarget,
    InvalidIdentifier,
    AlreadyRegistered,
)
from .routes import router
from .middleware.logging import LoggingMiddleware


logger = logging.getLogger("goto_links.web")

_CLIENT_ERRORS = (MalformedTarget, InvalidIdentifier, AlreadyRegistered)


async def store_error_handler(request: Request, exc: StoreError) -> PlainTextResponse:
    """Render store errors as plain text: caller mistakes are 400, the rest 500."""
    if isinstance(exc, _CLIENT_ERRORS):
        return PlainTextResponse(str(exc), status_code=400)

    logger.error(f"{request.method} {request.url.path} failed: {exc}")
    return PlainTextResponse(str(exc), status_code=500)


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> PlainTextResponse:
    """Render HTTP errors as plain text instead of JSON."""
    return PlainTextResponse(str(exc.detail), status_code=exc.status_code, headers=exc.headers)


def create_app(store, config) -> FastAPI:
    """Create and configure FastAPI application.

    Args:
        store: Store instance (may be set later through app.state.store)
        config: Configuration instance

    Returns:
        Configured FastAPI app
    """
    app = FastAPI(
        title="goto",
        description="Short URL redirection service",
        version=__version__,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )

    # Store instances in app state for access in routes
    app.state.store = store
    app.state.config = config

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_methods=["GET", "POST", "PUT"],
        allow_headers=["*"],
    )
    app.add_middleware(LoggingMiddleware)

    app.add_exception_handler(StoreError, store_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)

    app.include_router(router)

    return app
