"""
Avatar retrieval and transcoding.

Avatars are optional: a missing, oversized, unreadable or undecodable blob
degrades to an empty avatar and the card falls back to a monogram.
"""

from __future__ import annotations

import base64
import logging
from io import BytesIO

from PIL import Image, UnidentifiedImageError

from .config import settings
from .errors import AvatarTooLarge, StoreError, TranscodeError, UpstreamIOError
from .store import BaseStore

logger = logging.getLogger("thumbnail.avatar")


def _max_bytes() -> int:
    """Get maximum avatar size in bytes from settings."""
    return int(settings.AVATAR_MAX_MB) * 1024 * 1024


def transcode_avatar(data: bytes, max_side: int = 512) -> str:
    """
    Convert avatar bytes to an inline JPEG data URI.

    JPEG decodes much faster than PNG when the SVG is rasterized, so every
    avatar is re-encoded. Transparency is flattened onto white and the image
    is downscaled to fit max_side.

    Raises:
        TranscodeError: If the bytes are not a decodable image
    """
    try:
        im = Image.open(BytesIO(data))
        im.load()
    except (UnidentifiedImageError, OSError, SyntaxError, ValueError, Image.DecompressionBombError) as e:
        raise TranscodeError(f"Cannot decode avatar: {e}") from e

    if im.mode in ("RGBA", "LA") or (im.mode == "P" and "transparency" in im.info):
        im = im.convert("RGBA")
        flat = Image.new("RGB", im.size, (255, 255, 255))
        flat.paste(im, mask=im.getchannel("A"))
        im = flat
    elif im.mode != "RGB":
        im = im.convert("RGB")

    im.thumbnail((max_side, max_side))

    out = BytesIO()
    im.save(out, format="JPEG", quality=90)
    return "data:image/jpeg;base64," + base64.b64encode(out.getvalue()).decode("ascii")


async def fetch_avatar(store: BaseStore, filename: str) -> str:
    """
    Fetch and transcode the avatar stored under filename.

    Returns:
        A ``data:image/jpeg;base64,...`` URI, or "" when there is no usable avatar
    """
    try:
        data = await store.find_avatar(filename, max_bytes=_max_bytes())
    except AvatarTooLarge as e:
        logger.warning(
            "Avatar for %s is %d bytes (limit %dMB), rendering without it",
            filename, e.size, settings.AVATAR_MAX_MB,
        )
        return ""
    except (StoreError, UpstreamIOError) as e:
        logger.warning("Avatar fetch failed for %s, rendering without it: %s", filename, e)
        return ""
    except Exception:
        logger.warning("Unexpected avatar fetch failure for %s, rendering without it",
                       filename, exc_info=True)
        return ""

    if not data:
        return ""

    try:
        return transcode_avatar(data, max_side=settings.AVATAR_MAX_SIDE)
    except TranscodeError as e:
        logger.warning("Avatar for %s is not a usable image: %s", filename, e)
        return ""
