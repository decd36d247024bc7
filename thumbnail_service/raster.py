"""
SVG to PNG rasterization via CairoSVG.
"""

from __future__ import annotations

import base64
import logging
from urllib.parse import unquote_to_bytes

from .errors import RasterError

logger = logging.getLogger("thumbnail.raster")


def _inline_only_fetcher(url: str, resource_type: str) -> bytes:
    """Resolve data: URIs; the card never references external resources."""
    if not url.startswith("data:"):
        raise ValueError(f"Refusing to fetch external {resource_type} resource: {url[:64]}")
    header, _, payload = url.partition(",")
    if header.endswith(";base64"):
        return base64.b64decode(payload)
    return unquote_to_bytes(payload)


def rasterize(svg: str) -> bytes:
    """
    Rasterize an SVG document to PNG at its declared width and height.

    Raises:
        RasterError: If cairo is unavailable or the document cannot be drawn
    """
    # cairosvg is imported here so a host without native cairo can still boot
    try:
        import cairosvg
    except (ImportError, OSError) as e:
        raise RasterError(f"CairoSVG is not available: {e}") from e

    try:
        png = cairosvg.svg2png(
            bytestring=svg.encode("utf-8"),
            unsafe=False,
            url_fetcher=_inline_only_fetcher,
        )
    except Exception as e:
        raise RasterError(f"Rasterization failed: {e}") from e

    if not png:
        raise RasterError("Rasterization produced no output")

    logger.debug("Rendered PNG bytes: %d", len(png))
    return png
