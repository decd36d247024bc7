"""
Vector composition: lays out a card tree on a fixed canvas and emits SVG.

The layout model is a small subset of flexbox: boxes stack their children in
a row or a column with gap and padding, place them on the cross axis with
``align`` and distribute free main-axis space with ``justify``. In a row each
child is measured against whatever width its preceding siblings left over.
Text is wrapped with the real font metrics and clipped to ``max_lines`` with
an ellipsis.
"""

from __future__ import annotations

import base64
import logging
import re
from typing import Any, Dict, List, Tuple
from xml.etree import ElementTree

from jinja2 import Environment, PackageLoader, TemplateError

from .errors import RenderError
from .fonts import BOLD, FontSet
from .template import Box, Element, Monogram, Picture, RenderedCard, Text

logger = logging.getLogger("thumbnail.layout")

WIDTH = 1200
HEIGHT = 648
ELLIPSIS = "…"

_env = Environment(
    loader=PackageLoader("thumbnail_service", "templates"),
    autoescape=True,
    trim_blocks=True,
    lstrip_blocks=True,
)

Item = Dict[str, Any]


def _round(v: float) -> float:
    return round(v, 2)


class _Composer:
    def __init__(self, fonts: FontSet):
        self.fonts = fonts
        self.items: List[Item] = []
        self._clips = 0

    # ------------------------------------------------------------------
    # Text wrapping
    # ------------------------------------------------------------------

    def _fits(self, text: str, el: Text, width: float) -> bool:
        return self.fonts.measure(text, el.size, el.weight) <= width

    def _break_word(self, word: str, el: Text, width: float) -> List[str]:
        parts: List[str] = []
        current = ""
        for ch in word:
            if current and not self._fits(current + ch, el, width):
                parts.append(current)
                current = ch
            else:
                current += ch
        if current:
            parts.append(current)
        return parts

    def _ellipsize(self, line: str, el: Text, width: float) -> str:
        line = line.rstrip()
        while line and not self._fits(line + ELLIPSIS, el, width):
            line = line[:-1].rstrip()
        return line + ELLIPSIS

    def wrap(self, el: Text, width: float) -> List[str]:
        """Greedy word wrap of el.content into at most el.max_lines lines."""
        return self._wrap(el, width)[0]

    def _wrap(self, el: Text, width: float) -> Tuple[List[str], bool]:
        lines: List[str] = []
        for paragraph in el.content.splitlines():
            current = ""
            for word in paragraph.split():
                candidate = f"{current} {word}" if current else word
                if self._fits(candidate, el, width):
                    current = candidate
                    continue
                if current:
                    lines.append(current)
                if self._fits(word, el, width):
                    current = word
                else:
                    *head, current = self._break_word(word, el, width)
                    lines.extend(head)
                if len(lines) > el.max_lines:
                    break
            if current:
                lines.append(current)
            # anything past max_lines is cut anyway
            if len(lines) > el.max_lines:
                break

        if len(lines) > el.max_lines:
            lines = lines[: el.max_lines]
            lines[-1] = self._ellipsize(lines[-1], el, width)
            return lines, True
        return lines, False

    # ------------------------------------------------------------------
    # Measurement
    # ------------------------------------------------------------------

    def measure(self, el: Element, avail: float) -> Tuple[float, float]:
        """Return the (width, height) el occupies when given avail width."""
        if isinstance(el, Text):
            lines, truncated = self._wrap(el, avail)
            if not lines:
                return 0.0, 0.0
            height = len(lines) * el.size * el.line_height
            if truncated:
                # claim the full width so placement wraps identically
                return avail, height
            w = max(self.fonts.measure(line, el.size, el.weight) for line in lines)
            return min(w, avail), height
        if isinstance(el, (Picture, Monogram)):
            return float(el.size), float(el.size)
        if isinstance(el, Box):
            inner = max(avail - 2 * el.padding, 0.0)
            sizes = self._child_sizes(el, inner)
            return self._content_size(el, sizes)
        raise RenderError(f"Unknown element type: {type(el).__name__}")

    def _child_sizes(self, box: Box, inner: float) -> List[Tuple[float, float]]:
        if box.direction == "row":
            sizes = []
            remaining = inner
            for i, child in enumerate(box.children):
                if i:
                    remaining -= box.gap
                size = self.measure(child, max(remaining, 0.0))
                remaining -= size[0]
                sizes.append(size)
            return sizes
        if box.direction == "column":
            return [self.measure(child, inner) for child in box.children]
        raise RenderError(f"Unknown box direction: {box.direction!r}")

    def _content_size(self, box: Box, sizes: List[Tuple[float, float]]) -> Tuple[float, float]:
        gaps = box.gap * max(len(sizes) - 1, 0)
        pad = 2 * box.padding
        if box.direction == "row":
            w = sum(s[0] for s in sizes) + gaps
            h = max((s[1] for s in sizes), default=0.0)
        else:
            w = max((s[0] for s in sizes), default=0.0)
            h = sum(s[1] for s in sizes) + gaps
        return w + pad, h + pad

    # ------------------------------------------------------------------
    # Placement
    # ------------------------------------------------------------------

    def place(self, el: Element, x: float, y: float, w: float, h: float) -> None:
        if isinstance(el, Text):
            self._place_text(el, x, y, w)
        elif isinstance(el, Picture):
            self._place_picture(el, x, y)
        elif isinstance(el, Monogram):
            self._place_monogram(el, x, y)
        elif isinstance(el, Box):
            self._place_box(el, x, y, w, h)
        else:
            raise RenderError(f"Unknown element type: {type(el).__name__}")

    def _baseline(self, el: Text, index: int) -> float:
        ascent, descent = self.fonts.metrics(el.size, el.weight)
        line_h = el.size * el.line_height
        return index * line_h + (line_h - (ascent + descent)) / 2 + ascent

    def _place_text(self, el: Text, x: float, y: float, w: float) -> None:
        lines = self.wrap(el, w)
        if not lines:
            return
        self.items.append({
            "kind": "text",
            "css_class": el.css_class,
            "size": el.size,
            "weight": el.weight,
            "anchor": "",
            "x": _round(x),
            "lines": [
                {"y": _round(y + self._baseline(el, i)), "text": line}
                for i, line in enumerate(lines)
            ],
        })

    def _place_picture(self, el: Picture, x: float, y: float) -> None:
        r = el.size / 2
        self.items.append({
            "kind": "image",
            "css_class": el.css_class,
            "clip_id": f"clip-{self._clips}",
            "href": el.href,
            "x": _round(x),
            "y": _round(y),
            "w": el.size,
            "h": el.size,
            "cx": _round(x + r),
            "cy": _round(y + r),
            "r": _round(r),
        })
        self._clips += 1

    def _place_monogram(self, el: Monogram, x: float, y: float) -> None:
        r = el.size / 2
        self.items.append({
            "kind": "circle",
            "css_class": el.css_class,
            "cx": _round(x + r),
            "cy": _round(y + r),
            "r": _round(r),
        })
        letter = Text(el.letter, size=int(el.size * 0.45), weight=BOLD, line_height=1.0)
        self.items.append({
            "kind": "text",
            "css_class": f"{el.css_class}-letter" if el.css_class else "",
            "size": letter.size,
            "weight": letter.weight,
            "anchor": "middle",
            "x": _round(x + r),
            "lines": [{
                "y": _round(y + (el.size - letter.size) / 2 + self._baseline(letter, 0)),
                "text": el.letter,
            }],
        })

    def _place_box(self, box: Box, x: float, y: float, w: float, h: float) -> None:
        if box.css_class:
            self.items.append({
                "kind": "rect",
                "css_class": box.css_class,
                "x": _round(x),
                "y": _round(y),
                "w": _round(w),
                "h": _round(h),
                "rx": box.radius,
            })

        inner_w = max(w - 2 * box.padding, 0.0)
        inner_h = max(h - 2 * box.padding, 0.0)
        sizes = self._child_sizes(box, inner_w)
        if not sizes:
            return

        row = box.direction == "row"
        main_total = inner_w if row else inner_h
        used = sum(s[0] if row else s[1] for s in sizes) + box.gap * (len(sizes) - 1)
        free = max(main_total - used, 0.0)

        gap = float(box.gap)
        offset = 0.0
        if box.justify == "center":
            offset = free / 2
        elif box.justify == "space-between" and len(sizes) > 1:
            gap += free / (len(sizes) - 1)
        elif box.justify not in ("start", "space-between"):
            raise RenderError(f"Unknown justify value: {box.justify!r}")

        cursor = (x if row else y) + box.padding + offset
        for child, (cw, ch) in zip(box.children, sizes):
            if row:
                cy = y + box.padding
                if box.align == "center":
                    cy += (inner_h - ch) / 2
                self.place(child, cursor, cy, cw, ch)
                cursor += cw + gap
            else:
                cx = x + box.padding
                if box.align == "center":
                    cx += (inner_w - cw) / 2
                    child_w = cw
                else:
                    child_w = inner_w
                self.place(child, cx, cursor, child_w, ch)
                cursor += ch + gap


def _strip_invalid_xml(text: str) -> str:
    # Control characters other than tab/newline are not allowed in XML 1.0
    return re.sub(r"[\x00-\x08\x0b\x0c\x0e-\x1f]", "", text)


def compose_svg(card: RenderedCard, fonts: FontSet, width: int = WIDTH, height: int = HEIGHT) -> str:
    """
    Lay out card on a width x height canvas and return an SVG document.

    The document embeds both font faces and the card's style text.

    Raises:
        RenderError: On an unknown element, a missing font weight, or output
            that is not well-formed XML
    """
    composer = _Composer(fonts)
    composer.place(card.tree, 0.0, 0.0, float(width), float(height))

    for item in composer.items:
        if item["kind"] == "text":
            for line in item["lines"]:
                line["text"] = _strip_invalid_xml(line["text"])

    faces = [
        {
            "family": face.family,
            "weight": face.weight,
            "b64": base64.b64encode(face.data).decode("ascii"),
        }
        for face in (fonts.face(weight) for weight in sorted(fonts.faces))
    ]

    try:
        svg = _env.get_template("card.svg.j2").render(
            width=width,
            height=height,
            family=fonts.family,
            faces=faces,
            style=card.style,
            items=composer.items,
        )
    except TemplateError as e:
        raise RenderError(f"Card template failed: {e}") from e

    try:
        ElementTree.fromstring(svg)
    except ElementTree.ParseError as e:
        raise RenderError(f"Composed SVG is not well-formed: {e}") from e

    logger.debug("Composed SVG: %d items, %d bytes", len(composer.items), len(svg))
    return svg
