"""
Font loading and text measurement.

Fonts are read once at startup into immutable byte buffers. Measurement uses
Pillow's FreeType bindings on the same bytes that get embedded in the SVG.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from functools import lru_cache
from io import BytesIO
from pathlib import Path
from typing import Dict, Optional, Tuple

from PIL import ImageFont

from .errors import RenderError

logger = logging.getLogger("thumbnail.fonts")

REGULAR = 500
BOLD = 700


@dataclass(frozen=True)
class FontFace:
    family: str
    weight: int
    data: bytes = field(repr=False)


@dataclass(frozen=True)
class FontSet:
    """One family with a regular and a bold face."""

    family: str
    faces: Dict[int, FontFace]

    def face(self, weight: int) -> FontFace:
        try:
            return self.faces[weight]
        except KeyError:
            raise RenderError(
                f"No '{self.family}' face loaded for weight {weight}"
            ) from None

    def measure(self, text: str, size: int, weight: int = REGULAR) -> float:
        """Advance width of text in px at the given size and weight."""
        if not text:
            return 0.0
        return _freetype(self.face(weight).data, size).getlength(text)

    def metrics(self, size: int, weight: int = REGULAR) -> Tuple[int, int]:
        """(ascent, descent) in px."""
        return _freetype(self.face(weight).data, size).getmetrics()


@lru_cache(maxsize=64)
def _freetype(data: bytes, size: int) -> ImageFont.FreeTypeFont:
    return ImageFont.truetype(BytesIO(data), size)


def _bundled_face() -> bytes:
    # Pillow ships a FreeType face used by load_default(size=...)
    return ImageFont.load_default(size=16).font_bytes


def _read(path: Optional[str]) -> Optional[bytes]:
    if not path:
        return None
    p = Path(path)
    if not p.is_file():
        raise FileNotFoundError(f"Font file not found: {path}")
    return p.read_bytes()


def load_font_set(
    family: str,
    regular_path: Optional[str] = None,
    bold_path: Optional[str] = None,
) -> FontSet:
    """
    Load the regular and bold faces for family.

    A missing bold path reuses the regular face. When neither path is set,
    Pillow's bundled face stands in for both weights.

    Raises:
        FileNotFoundError: If a configured font path does not exist
    """
    regular = _read(regular_path)
    bold = _read(bold_path)

    if regular is None:
        if bold is None:
            logger.warning("No font files configured; using Pillow's bundled face")
        regular = _bundled_face()
    if bold is None:
        bold = regular

    return FontSet(
        family=family,
        faces={
            REGULAR: FontFace(family, REGULAR, regular),
            BOLD: FontFace(family, BOLD, bold),
        },
    )
