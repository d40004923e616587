"""
Application factory - builds FastAPI app with middleware, error handling and routes.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from pagesnap import __version__
from pagesnap.config import Settings, get_settings, init_settings
from pagesnap.modules.health.router import router as health_router
from pagesnap.modules.render.router import router as render_router
from pagesnap.shared.errors import PageSnapError
from pagesnap.shared.ids import generate_request_id
from pagesnap.shared.logging import (
    clear_request_context,
    get_logger,
    set_request_context,
    setup_logging,
)
from pagesnap.shared.types import RequestContext

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan - startup and shutdown."""
    settings = get_settings()

    setup_logging(settings.log_level)
    logger.info("Starting PageSnap...")

    # The token itself is never logged
    if settings.browserless_token:
        logger.info(f"Remote browser endpoint: {settings.browserless_endpoint}")
    else:
        logger.info("No remote browser token configured; rendering with local Chromium")

    yield

    logger.info("PageSnap stopped")


def build_app(settings: Settings | None = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Optional settings override (useful for testing)

    Returns:
        Configured FastAPI application
    """
    if settings is None:
        settings = get_settings()
    else:
        init_settings(settings)

    app = FastAPI(
        title="PageSnap",
        description="Render web pages to PDF",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["Content-Disposition", "X-Request-ID"],
    )

    @app.middleware("http")
    async def request_context_middleware(request: Request, call_next: Any) -> Response:
        """Attach request context for logging and tracing."""
        ctx = RequestContext(
            request_id=request.headers.get("X-Request-ID", generate_request_id()),
            client=request.client.host if request.client else None,
        )
        set_request_context(ctx)

        try:
            response = await call_next(request)
            response.headers["X-Request-ID"] = ctx.request_id
            return response
        finally:
            clear_request_context()

    @app.exception_handler(PageSnapError)
    async def pagesnap_error_handler(request: Request, exc: PageSnapError) -> JSONResponse:
        """Encode every pipeline error as one JSON body with its mapped status."""
        if exc.http_status >= 500:
            logger.error(f"{request.method} {request.url.path} failed [{exc.code}]: {exc.message} ({exc.detail})")
        else:
            logger.info(f"{request.method} {request.url.path} rejected [{exc.code}]: {exc.message}")

        return JSONResponse(status_code=exc.http_status, content=exc.to_dict())

    app.include_router(health_router, tags=["health"])
    app.include_router(render_router)

    @app.get("/")
    async def root() -> dict[str, str]:
        return {"service": "PageSnap", "version": __version__}

    return app
