"""
Card template: maps assistant data to a layout tree plus style text.

This is a plain data transformation with no I/O; the same inputs always
produce the same tree and style.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple, Union

from .fonts import BOLD, REGULAR
from .store import AssistantRecord
from .theme import Theme


@dataclass(frozen=True)
class Text:
    content: str
    size: int
    weight: int = REGULAR
    css_class: str = ""
    max_lines: int = 1
    line_height: float = 1.2


@dataclass(frozen=True)
class Picture:
    """Square image clipped to a circle."""
    href: str
    size: int
    css_class: str = ""


@dataclass(frozen=True)
class Monogram:
    """Filled disc with a single centred letter."""
    letter: str
    size: int
    css_class: str = ""


@dataclass(frozen=True)
class Box:
    """
    Flex-like container.

    direction: "row" or "column"
    align: cross-axis placement, "start" or "center"
    justify: main-axis placement, "start", "center" or "space-between"
    css_class: when set, the box paints a background rect with that class
    """
    children: Tuple["Element", ...]
    direction: str = "column"
    gap: int = 0
    padding: int = 0
    align: str = "start"
    justify: str = "start"
    css_class: str = ""
    radius: int = 0


Element = Union[Box, Text, Picture, Monogram]


@dataclass(frozen=True)
class RenderedCard:
    tree: Box
    style: str


AVATAR_SIZE = 176


def _style(theme: Theme) -> str:
    rules = [
        (".card", theme.background),
        (".title", theme.text),
        (".creator", theme.subtle),
        (".description", theme.muted),
        (".brand", theme.primary[600]),
        (".accent", theme.primary[500]),
        (".monogram", theme.primary[100]),
        (".monogram-letter", theme.primary[700]),
        (".avatar-ring", theme.surface),
    ]
    return "\n".join(f"{selector} {{ fill: {color}; }}" for selector, color in rules)


def _avatar(record: AssistantRecord, avatar: str) -> Element:
    if avatar:
        return Picture(href=avatar, size=AVATAR_SIZE, css_class="avatar-ring")
    letter = record.name.strip()[:1].upper() or "?"
    return Monogram(letter=letter, size=AVATAR_SIZE, css_class="monogram")


def render_card(record: AssistantRecord, avatar: str, theme: Theme) -> RenderedCard:
    """
    Build the thumbnail tree for one assistant.

    Args:
        record: Assistant metadata
        avatar: Inline data URI of the avatar, or "" for a monogram
        theme: Design tokens

    Returns:
        RenderedCard with the layout tree and its style text
    """
    heading: list[Element] = [
        Text(record.name, size=64, weight=BOLD, css_class="title", max_lines=2, line_height=1.1),
    ]
    if record.created_by_name:
        heading.append(
            Text(f"Created by {record.created_by_name}", size=28, css_class="creator")
        )

    body: list[Element] = [
        Box(
            children=(
                _avatar(record, avatar),
                Box(children=tuple(heading), gap=12),
            ),
            direction="row",
            gap=40,
            align="center",
        ),
    ]
    if record.description:
        body.append(
            Text(record.description, size=36, css_class="description", max_lines=3, line_height=1.35)
        )

    footer = Box(
        children=(
            Box(children=(), css_class="accent", padding=6, radius=6),
            Text(theme.app_name, size=28, weight=BOLD, css_class="brand"),
        ),
        direction="row",
        gap=16,
        align="center",
    )

    tree = Box(
        children=(Box(children=tuple(body), gap=40), footer),
        padding=72,
        justify="space-between",
        css_class="card",
    )
    return RenderedCard(tree=tree, style=_style(theme))
