"""
Design tokens for the thumbnail card.

The primary colour follows the web app's ``PUBLIC_APP_COLOR`` and resolves
against the same Tailwind palette the front end is styled with.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict

logger = logging.getLogger("thumbnail.theme")

# Tailwind v3 colours (subset of shades used by the card)
PALETTE: Dict[str, Dict[int, str]] = {
    "blue": {100: "#dbeafe", 500: "#3b82f6", 600: "#2563eb", 700: "#1d4ed8"},
    "indigo": {100: "#e0e7ff", 500: "#6366f1", 600: "#4f46e5", 700: "#4338ca"},
    "purple": {100: "#f3e8ff", 500: "#a855f7", 600: "#9333ea", 700: "#7e22ce"},
    "pink": {100: "#fce7f3", 500: "#ec4899", 600: "#db2777", 700: "#be185d"},
    "red": {100: "#fee2e2", 500: "#ef4444", 600: "#dc2626", 700: "#b91c1c"},
    "orange": {100: "#ffedd5", 500: "#f97316", 600: "#ea580c", 700: "#c2410c"},
    "amber": {100: "#fef3c7", 500: "#f59e0b", 600: "#d97706", 700: "#b45309"},
    "yellow": {100: "#fef9c3", 500: "#eab308", 600: "#ca8a04", 700: "#a16207"},
    "green": {100: "#dcfce7", 500: "#22c55e", 600: "#16a34a", 700: "#15803d"},
    "emerald": {100: "#d1fae5", 500: "#10b981", 600: "#059669", 700: "#047857"},
    "teal": {100: "#ccfbf1", 500: "#14b8a6", 600: "#0d9488", 700: "#0f766e"},
    "cyan": {100: "#cffafe", 500: "#06b6d4", 600: "#0891b2", 700: "#0e7490"},
    "sky": {100: "#e0f2fe", 500: "#0ea5e9", 600: "#0284c7", 700: "#0369a1"},
}

GRAY = {
    100: "#f3f4f6",
    400: "#9ca3af",
    500: "#6b7280",
    600: "#4b5563",
    800: "#1f2937",
    900: "#111827",
}

DEFAULT_COLOR = "blue"


@dataclass(frozen=True)
class Theme:
    """Immutable tokens injected into the card template."""

    app_name: str
    font_family: str
    primary: Dict[int, str]
    background: str = "#ffffff"
    text: str = GRAY[900]
    muted: str = GRAY[600]
    subtle: str = GRAY[500]
    surface: str = GRAY[100]


def build_theme(color: str, app_name: str, font_family: str) -> Theme:
    """Resolve a palette name into a Theme, falling back to blue."""
    key = (color or "").strip().lower()
    if key not in PALETTE:
        logger.warning("Unknown PUBLIC_APP_COLOR %r, using %s", color, DEFAULT_COLOR)
        key = DEFAULT_COLOR
    return Theme(app_name=app_name, font_family=font_family, primary=PALETTE[key])
