"""
Thumbnail renderer: lookup, avatar fetch, template, layout and rasterization
for one assistant.

The avatar fetch only depends on the identifier, so it starts alongside the
metadata lookup. A failed lookup cancels it and only the lookup failure is
reported.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import Optional

from fastapi.concurrency import run_in_threadpool

from .avatar import fetch_avatar
from .errors import AssistantNotFound, RenderTimeout
from .fonts import FontSet
from .layout import HEIGHT, WIDTH, compose_svg
from .raster import rasterize
from .store import BaseStore, parse_assistant_id
from .template import RenderedCard, render_card
from .theme import Theme

logger = logging.getLogger("thumbnail.renderer")


async def _discard(task: asyncio.Task) -> None:
    """Cancel task and wait for it so its outcome is always retrieved."""
    task.cancel()
    with contextlib.suppress(asyncio.CancelledError, Exception):
        await task


class ThumbnailRenderer:
    """Produces the PNG thumbnail for an assistant id."""

    def __init__(
        self,
        store: BaseStore,
        fonts: FontSet,
        theme: Theme,
        timeout_s: Optional[float] = None,
    ):
        self.store = store
        self.fonts = fonts
        self.theme = theme
        self.timeout_s = timeout_s

    async def render(self, assistant_id: str) -> bytes:
        """
        Render the thumbnail for assistant_id.

        Returns:
            PNG bytes of a WIDTH x HEIGHT image

        Raises:
            AssistantNotFound: Malformed id or no matching assistant
            RenderTimeout: The whole flow exceeded timeout_s
            StoreError, RenderError, RasterError: On upstream failures
        """
        if not self.timeout_s:
            return await self._render(assistant_id)
        try:
            return await asyncio.wait_for(self._render(assistant_id), timeout=self.timeout_s)
        except asyncio.TimeoutError as e:
            raise RenderTimeout(
                f"Thumbnail for {assistant_id} not ready after {self.timeout_s}s"
            ) from e

    async def _render(self, assistant_id: str) -> bytes:
        key = parse_assistant_id(assistant_id)

        avatar_task = asyncio.create_task(fetch_avatar(self.store, str(key)))
        try:
            record = await self.store.find_assistant(key)
        except BaseException:
            await _discard(avatar_task)
            raise
        if record is None:
            await _discard(avatar_task)
            raise AssistantNotFound(assistant_id)

        avatar = await avatar_task
        card = render_card(record, avatar, self.theme)
        return await run_in_threadpool(self._draw, card)

    def _draw(self, card: RenderedCard) -> bytes:
        svg = compose_svg(card, self.fonts, WIDTH, HEIGHT)
        return rasterize(svg)
