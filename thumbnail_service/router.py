"""
Assistant thumbnail router.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import Response

from .models import ErrorResponse
from .errors import (
    AssistantNotFound,
    RasterError,
    RenderError,
    RenderTimeout,
    StoreError,
)

logger = logging.getLogger("thumbnail.router")

router = APIRouter(tags=["thumbnails"])


@router.get(
    "/assistant/{assistant_id}/thumbnail.png",
    response_class=Response,
    responses={
        200: {"content": {"image/png": {}}},
        404: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
        504: {"model": ErrorResponse},
    },
    summary="Assistant thumbnail",
    description="1200x648 PNG card with the assistant's avatar, name and description",
)
async def assistant_thumbnail(assistant_id: str, request: Request) -> Response:
    """Render the share card for one assistant."""
    renderer = request.app.state.renderer
    try:
        png = await renderer.render(assistant_id)
    except AssistantNotFound as exc:
        raise HTTPException(status_code=404, detail="Assistant not found.") from exc
    except RenderTimeout as exc:
        logger.error("Thumbnail timed out for %s: %s", assistant_id, exc)
        raise HTTPException(status_code=504, detail=str(exc)) from exc
    except StoreError as exc:
        logger.error("Store unavailable for %s: %s", assistant_id, exc)
        raise HTTPException(status_code=503, detail=str(exc)) from exc
    except (RenderError, RasterError) as exc:
        logger.error("Thumbnail render failed for %s: %s", assistant_id, exc)
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    except Exception as exc:
        logger.exception("Unexpected thumbnail failure for %s", assistant_id)
        raise HTTPException(
            status_code=500,
            detail=f"Thumbnail generation failed: {exc}",
        ) from exc

    return Response(content=png, media_type="image/png")
