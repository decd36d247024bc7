"""
Tests for the thumbnail endpoint.
"""

import asyncio
from io import BytesIO

import pytest
from bson import ObjectId
from fastapi.testclient import TestClient
from PIL import Image

from thumbnail_service import renderer as renderer_module
from thumbnail_service.errors import AssistantNotFound, RenderError, StoreError, UpstreamIOError
from thumbnail_service.main import create_app
from thumbnail_service.renderer import ThumbnailRenderer
from thumbnail_service.store import AssistantRecord, BaseStore

from .conftest import HELPER_ID, make_png_bytes, requires_cairo

URL = f"/assistant/{HELPER_ID}/thumbnail.png"


class StubStore(BaseStore):
    """In-memory store with hooks for failure injection."""

    name = "stub"

    def __init__(self, record=None, avatar=None, lookup_exc=None, avatar_exc=None,
                 delay=0.0, avatar_delay=0.0):
        self.record = record
        self.avatar = avatar
        self.lookup_exc = lookup_exc
        self.avatar_exc = avatar_exc
        self.delay = delay
        self.avatar_delay = avatar_delay
        self.avatar_calls = 0
        self.avatar_cancelled = False

    async def find_assistant(self, key):
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.lookup_exc:
            raise self.lookup_exc
        return self.record

    async def find_avatar(self, filename, max_bytes=None):
        self.avatar_calls += 1
        if self.avatar_delay:
            try:
                await asyncio.sleep(self.avatar_delay)
            except asyncio.CancelledError:
                self.avatar_cancelled = True
                raise
        if self.avatar_exc:
            raise self.avatar_exc
        return self.avatar

    async def health_check(self):
        return self.record is not None


def client_for(store, fonts, theme, timeout_s=30):
    renderer = ThumbnailRenderer(store=store, fonts=fonts, theme=theme, timeout_s=timeout_s)
    return TestClient(create_app(renderer))


class TestThumbnailNotFound:
    """404 cases never reach rasterization."""

    def test_unknown_assistant_is_404(self, client):
        """A valid id with no record returns 404 and no image."""
        response = client.get(f"/assistant/{ObjectId()}/thumbnail.png")

        assert response.status_code == 404
        assert response.headers["content-type"].startswith("application/json")
        assert response.json() == {"detail": "Assistant not found."}

    def test_malformed_id_is_404(self, client):
        """An id that is not an ObjectId returns 404."""
        response = client.get("/assistant/not-an-object-id/thumbnail.png")

        assert response.status_code == 404
        assert response.json()["detail"] == "Assistant not found."

    def test_lookup_miss_hides_avatar_failure(self, fonts, theme):
        """When the record is missing, a failing avatar fetch is not surfaced."""
        store = StubStore(record=None, avatar_exc=UpstreamIOError("boom"))

        with client_for(store, fonts, theme) as client:
            response = client.get(URL)

        assert response.status_code == 404

    def test_lookup_miss_waits_for_cancelled_avatar(self, fonts, theme):
        """The in-flight avatar fetch is cancelled and finished before the 404 is raised."""
        store = StubStore(record=None, delay=0.01, avatar_delay=5.0)
        renderer = ThumbnailRenderer(store=store, fonts=fonts, theme=theme)

        async def render_missing():
            with pytest.raises(AssistantNotFound):
                await renderer.render(HELPER_ID)
            return store.avatar_cancelled

        assert asyncio.run(render_missing()) is True


class TestThumbnailErrors:
    """Upstream failures map to error statuses."""

    def test_store_error_is_503(self, fonts, theme):
        store = StubStore(lookup_exc=StoreError("no primary available"))

        with client_for(store, fonts, theme) as client:
            response = client.get(URL)

        assert response.status_code == 503
        assert "no primary available" in response.json()["detail"]

    def test_unopenable_database_is_503(self, client, store, tmp_path):
        """A SQLite file that cannot be opened is a store outage, not a 500."""
        store.path = str(tmp_path / "missing" / "db.sqlite")

        response = client.get(URL)

        assert response.status_code == 503
        assert "Assistant lookup failed" in response.json()["detail"]

    def test_render_error_is_500(self, client, monkeypatch):
        """Layout failures surface as 500 with a JSON body."""
        def broken_compose(*args, **kwargs):
            raise RenderError("font missing")

        monkeypatch.setattr(renderer_module, "compose_svg", broken_compose)

        response = client.get(URL)

        assert response.status_code == 500
        assert response.json()["detail"] == "font missing"

    def test_unexpected_error_is_500(self, client, monkeypatch):
        def broken_render_card(*args, **kwargs):
            raise KeyError("primary")

        monkeypatch.setattr(renderer_module, "render_card", broken_render_card)

        response = client.get(URL)

        assert response.status_code == 500
        assert "Thumbnail generation failed" in response.json()["detail"]

    def test_timeout_is_504(self, fonts, theme):
        """A lookup slower than RENDER_TIMEOUT_S returns 504."""
        store = StubStore(record=AssistantRecord(HELPER_ID, "Slow", "", ""), delay=1.0)

        with client_for(store, fonts, theme, timeout_s=0.05) as client:
            response = client.get(URL)

        assert response.status_code == 504


@requires_cairo
class TestThumbnailRendering:
    """Full pipeline down to PNG bytes."""

    def test_helper_thumbnail(self, client):
        """The Helper assistant renders as a 1200x648 PNG."""
        response = client.get(URL)

        assert response.status_code == 200
        assert response.headers["content-type"] == "image/png"
        im = Image.open(BytesIO(response.content))
        assert im.format == "PNG"
        assert im.size == (1200, 648)

    def test_thumbnail_with_avatar(self, client, store):
        """An avatar blob is drawn into the card."""
        store.save_avatar(HELPER_ID, make_png_bytes(256, 256, color=(255, 0, 0, 255)))

        response = client.get(URL)

        assert response.status_code == 200
        im = Image.open(BytesIO(response.content)).convert("RGB")
        assert im.size == (1200, 648)
        # centre of the avatar circle: padding 72 + radius 88
        r, g, b = im.getpixel((160, 160))
        assert r > 200 and g < 80 and b < 80

    def test_broken_avatar_still_renders(self, client, store):
        """An undecodable avatar degrades to the monogram."""
        store.save_avatar(HELPER_ID, b"not an image")

        response = client.get(URL)

        assert response.status_code == 200
        assert Image.open(BytesIO(response.content)).size == (1200, 648)

    def test_repeated_requests_are_identical(self, client, store):
        """Rendering is deterministic and has no side effects."""
        store.save_avatar(HELPER_ID, make_png_bytes())

        first = client.get(URL)
        second = client.get(URL)

        assert first.status_code == second.status_code == 200
        assert first.content == second.content


class TestHealth:
    """Test suite for health endpoints."""

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["store"] == "sqlite"
        assert data["font_family"] == "Inter"

    def test_liveness(self, client):
        assert client.get("/health/live").json() == {"status": "alive"}

    def test_ready(self, client):
        response = client.get("/health/ready")

        assert response.status_code == 200
        assert response.json()["checks"] == {"store": True}

    def test_not_ready_when_store_down(self, fonts, theme):
        with client_for(StubStore(record=None), fonts, theme) as client:
            response = client.get("/health/ready")

        assert response.status_code == 503
        assert response.json()["detail"]["status"] == "not_ready"


class TestOpenAPI:
    """Documented error bodies match what the handlers return."""

    def test_error_schema_is_detail_only(self, client):
        schema = client.get("/openapi.json").json()["components"]["schemas"]["ErrorResponse"]

        assert set(schema["properties"]) == {"detail"}
        assert schema["required"] == ["detail"]
