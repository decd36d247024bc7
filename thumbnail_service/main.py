"""
Assistant Thumbnail Service - Main FastAPI Application

Renders the 1200x648 PNG share card for an assistant:
- Assistant metadata from the document store
- Optional avatar from the blob store, inlined as JPEG
- Card layout composed to SVG with embedded fonts, rasterized to PNG
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import settings
from .fonts import load_font_set
from .health import router as health_router
from .renderer import ThumbnailRenderer
from .router import router as thumbnail_router
from .store import get_store
from .theme import build_theme

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("thumbnail.main")


def build_renderer() -> ThumbnailRenderer:
    """Load fonts, design tokens and the store client from settings."""
    fonts = load_font_set(
        settings.FONT_FAMILY,
        regular_path=settings.FONT_REGULAR_PATH,
        bold_path=settings.FONT_BOLD_PATH,
    )
    theme = build_theme(
        settings.PUBLIC_APP_COLOR,
        app_name=settings.PUBLIC_APP_NAME,
        font_family=settings.FONT_FAMILY,
    )
    return ThumbnailRenderer(
        store=get_store(),
        fonts=fonts,
        theme=theme,
        timeout_s=settings.RENDER_TIMEOUT_S,
    )


def create_app(renderer: Optional[ThumbnailRenderer] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        renderer: Pre-built renderer; when None one is built from settings
            at startup and its store is closed at shutdown
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = renderer is None
        app.state.renderer = build_renderer() if owned else renderer
        logger.info(
            "%s %s ready (store=%s, fonts=%s)",
            settings.SERVICE_NAME,
            settings.SERVICE_VERSION,
            app.state.renderer.store.name,
            app.state.renderer.fonts.family,
        )
        try:
            yield
        finally:
            if owned:
                app.state.renderer.store.close()

    app = FastAPI(
        title="Assistant Thumbnail",
        description="Share-card PNG thumbnails for assistants.",
        version=settings.SERVICE_VERSION,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    app.include_router(health_router)
    app.include_router(thumbnail_router)

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        """Return consistent JSON error responses."""
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail},
        )

    return app


app = create_app()
