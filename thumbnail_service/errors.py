"""
Thumbnail service errors.
"""

from __future__ import annotations


class ThumbnailError(Exception):
    """Base class for failures while producing a thumbnail."""


class AssistantNotFound(ThumbnailError):
    """No assistant matches the identifier (or the identifier is malformed)."""

    def __init__(self, assistant_id: str):
        super().__init__(f"Assistant not found: {assistant_id}")
        self.assistant_id = assistant_id


class StoreError(ThumbnailError):
    """The document or blob store could not be reached."""


class UpstreamIOError(ThumbnailError):
    """Streaming an avatar blob failed."""


class AvatarTooLarge(ThumbnailError):
    """The stored avatar exceeds AVATAR_MAX_MB and was not downloaded."""

    def __init__(self, filename: str, size: int, limit: int):
        super().__init__(f"Avatar {filename} is {size} bytes (limit {limit})")
        self.filename = filename
        self.size = size
        self.limit = limit


class TranscodeError(ThumbnailError):
    """Avatar bytes could not be decoded as an image."""


class RenderError(ThumbnailError):
    """The card tree could not be laid out as an SVG document."""


class RasterError(ThumbnailError):
    """The SVG document could not be rasterized."""


class RenderTimeout(ThumbnailError):
    """Producing the thumbnail took longer than RENDER_TIMEOUT_S."""
