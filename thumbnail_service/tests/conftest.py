"""
Pytest configuration and shared fixtures.
"""

from io import BytesIO

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from thumbnail_service.fonts import load_font_set
from thumbnail_service.main import create_app
from thumbnail_service.renderer import ThumbnailRenderer
from thumbnail_service.store import AssistantRecord, SQLiteStore
from thumbnail_service.theme import build_theme

try:
    import cairosvg  # noqa: F401
    HAVE_CAIRO = True
except (ImportError, OSError):
    HAVE_CAIRO = False

requires_cairo = pytest.mark.skipif(not HAVE_CAIRO, reason="native cairo not available")

HELPER_ID = "507f1f77bcf86cd799439011"


def make_png_bytes(width: int = 100, height: int = 100, color=(255, 0, 0, 255)) -> bytes:
    """Create a valid PNG image for testing."""
    im = Image.new("RGBA", (width, height), color=color)
    out = BytesIO()
    im.save(out, format="PNG")
    return out.getvalue()


@pytest.fixture(scope="session")
def fonts():
    """Pillow's bundled face registered under the Inter family."""
    return load_font_set("Inter")


@pytest.fixture
def theme():
    return build_theme("blue", app_name="HuggingChat", font_family="Inter")


@pytest.fixture
def store(tmp_path):
    """Temporary SQLite store seeded with the Helper assistant."""
    s = SQLiteStore(str(tmp_path / "assistants.sqlite"))
    s.save_assistant(
        AssistantRecord(
            id=HELPER_ID,
            name="Helper",
            description="A test assistant",
            created_by_name="Alice",
        )
    )
    return s


@pytest.fixture
def renderer(store, fonts, theme):
    return ThumbnailRenderer(store=store, fonts=fonts, theme=theme, timeout_s=30)


@pytest.fixture
def client(renderer):
    """Test client whose app uses the temporary store."""
    with TestClient(create_app(renderer)) as c:
        yield c
