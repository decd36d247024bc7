"""
Tests for the card template.
"""

from thumbnail_service.fonts import BOLD
from thumbnail_service.store import AssistantRecord
from thumbnail_service.template import Box, Monogram, Picture, Text, render_card
from thumbnail_service.theme import PALETTE, build_theme

from .conftest import HELPER_ID

HELPER = AssistantRecord(HELPER_ID, "Helper", "A test assistant", "Alice")
AVATAR = "data:image/jpeg;base64,AAAA"


def walk(el):
    yield el
    if isinstance(el, Box):
        for child in el.children:
            yield from walk(child)


def texts(card):
    return {el.css_class: el for el in walk(card.tree) if isinstance(el, Text)}


class TestRenderCard:
    """Test suite for render_card."""

    def test_contains_name_description_and_creator(self, theme):
        """Every piece of metadata appears as text."""
        found = texts(render_card(HELPER, "", theme))

        assert found["title"].content == "Helper"
        assert found["title"].weight == BOLD
        assert found["description"].content == "A test assistant"
        assert found["creator"].content == "Created by Alice"
        assert found["brand"].content == "HuggingChat"

    def test_monogram_without_avatar(self, theme):
        """No avatar draws the first letter of the name."""
        card = render_card(HELPER, "", theme)

        monograms = [el for el in walk(card.tree) if isinstance(el, Monogram)]
        assert [m.letter for m in monograms] == ["H"]
        assert not any(isinstance(el, Picture) for el in walk(card.tree))

    def test_picture_with_avatar(self, theme):
        """An avatar data URI is embedded as a Picture."""
        card = render_card(HELPER, AVATAR, theme)

        pictures = [el for el in walk(card.tree) if isinstance(el, Picture)]
        assert [p.href for p in pictures] == [AVATAR]
        assert not any(isinstance(el, Monogram) for el in walk(card.tree))

    def test_blank_name_monogram_placeholder(self, theme):
        """A blank name still gets a monogram."""
        card = render_card(AssistantRecord(HELPER_ID, "  ", "", ""), "", theme)

        monogram = next(el for el in walk(card.tree) if isinstance(el, Monogram))
        assert monogram.letter == "?"

    def test_optional_fields_are_omitted(self, theme):
        """Empty description and creator produce no text nodes."""
        found = texts(render_card(AssistantRecord(HELPER_ID, "Solo", "", ""), "", theme))

        assert "description" not in found
        assert "creator" not in found

    def test_style_uses_primary_palette(self):
        """Brand colour comes from the configured palette."""
        card = render_card(HELPER, "", build_theme("emerald", "App", "Inter"))

        assert f".brand {{ fill: {PALETTE['emerald'][600]}; }}" in card.style

    def test_deterministic(self, theme):
        """Identical inputs produce equal trees and style."""
        assert render_card(HELPER, AVATAR, theme) == render_card(HELPER, AVATAR, theme)
