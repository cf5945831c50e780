"""Shared fixtures for PodArchive tests."""

from collections.abc import Callable, Iterable
from io import BytesIO
from xml.sax.saxutils import escape

import httpx
import pytest
from PIL import Image

from podarchive.utils.retry import TEST_RETRY_CONFIG

# MPEG-1 Layer III, 128 kbps, 44.1 kHz, joint stereo, no padding
MP3_FRAME_HEADER = b"\xff\xfb\x90\x64"
MP3_FRAME_SIZE = 417


def make_mp3_bytes(frames: int = 40) -> bytes:
    """Silent MP3 stream mutagen can open."""
    return (MP3_FRAME_HEADER + b"\x00" * (MP3_FRAME_SIZE - len(MP3_FRAME_HEADER))) * frames


def make_image_bytes(size: tuple[int, int] = (1600, 800), fmt: str = "PNG") -> bytes:
    buffer = BytesIO()
    Image.new("RGB", size, "red").save(buffer, format=fmt)
    return buffer.getvalue()


def build_rss(
    title: str | None = "Test Podcast",
    items: Iterable[dict] = (),
    image_url: str | None = None,
    categories: Iterable[str] = (),
) -> bytes:
    """Render a minimal RSS 2.0 document with iTunes extensions."""
    parts = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        '<rss version="2.0" xmlns:itunes="http://www.itunes.com/dtds/podcast-1.0.dtd">',
        "<channel>",
    ]
    if title is not None:
        parts.append(f"<title>{escape(title)}</title>")
    if image_url:
        parts.append(f"<image><url>{escape(image_url)}</url></image>")
    for category in categories:
        parts.append(f'<itunes:category text="{escape(category)}"/>')

    for item in items:
        parts.append("<item>")
        if "title" in item:
            parts.append(f"<title>{escape(item['title'])}</title>")
        if "pub_date" in item:
            parts.append(f"<pubDate>{item['pub_date']}</pubDate>")
        if "author" in item:
            parts.append(f"<itunes:author>{escape(item['author'])}</itunes:author>")
        if "description" in item:
            parts.append(f"<description>{escape(item['description'])}</description>")
        if item.get("url"):
            parts.append(
                f'<enclosure url="{escape(item["url"])}" type="audio/mpeg" length="1000"/>'
            )
        parts.append("</item>")

    parts.append("</channel></rss>")
    return "\n".join(parts).encode("utf-8")


@pytest.fixture(autouse=True)
def fast_retry_config(monkeypatch):
    """Use fast retry configuration for all tests to avoid long delays."""
    monkeypatch.setattr("podarchive.utils.retry.DEFAULT_RETRY_CONFIG", TEST_RETRY_CONFIG)


@pytest.fixture
def mp3_bytes() -> bytes:
    return make_mp3_bytes()


@pytest.fixture
def png_bytes() -> bytes:
    return make_image_bytes()


@pytest.fixture
def make_client() -> Callable[[dict], httpx.AsyncClient]:
    """Build an AsyncClient answering from a ``{url: response}`` mapping.

    Values may be bytes (200 response), an int status code, an
    ``httpx.Response`` or a callable taking the request. Requests are
    recorded on ``client.requests``.
    """

    def factory(routes: dict) -> httpx.AsyncClient:
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            route = routes.get(str(request.url))
            if route is None:
                return httpx.Response(404)
            if callable(route):
                return route(request)
            if isinstance(route, int):
                return httpx.Response(route)
            if isinstance(route, httpx.Response):
                return route
            return httpx.Response(200, content=route)

        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        client.requests = requests  # type: ignore[attr-defined]
        return client

    return factory
