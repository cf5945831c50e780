"""RSS feed parser using feedparser."""

import logging
import re
import xml.sax
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from io import BytesIO
from typing import Any
from xml.etree.ElementTree import Element
from xml.etree.ElementTree import ParseError as XMLParseError

import feedparser
import httpx
from defusedxml import DefusedXmlException
from defusedxml.ElementTree import fromstring as safe_fromstring

from podarchive.feeds.models import DEFAULT_CATEGORY, UNKNOWN_TITLE, Episode, Feed
from podarchive.utils.cancellation import CancellationToken
from podarchive.utils.datetime import now_utc
from podarchive.utils.errors import FeedParseError, FetchError
from podarchive.utils.images import resize_to_jpeg
from podarchive.utils.retry import (
    NonRetryableError,
    RetryableError,
    classify_http_error,
    classify_httpx_error,
    with_network_retry,
)

logger = logging.getLogger(__name__)

ITUNES_NS = "http://www.itunes.com/dtds/podcast-1.0.dtd"
ITUNES_CATEGORY = f"{{{ITUNES_NS}}}category"

_AUTHOR_SEPARATORS = re.compile(r"[,;]")


def split_authors(value: str | None) -> tuple[str, ...]:
    """Split an author string on ``,`` or ``;``, dropping empty fragments."""
    if not value:
        return ()
    parts = (part.strip() for part in _AUTHOR_SEPARATORS.split(value))
    return tuple(part for part in parts if part)


def _parse_published(entry: dict[str, Any]) -> datetime:
    # Keep the publisher's own UTC offset so the date matches the feed
    raw = entry.get("published")
    if raw:
        try:
            return parsedate_to_datetime(raw)
        except (TypeError, ValueError, IndexError):
            pass

    struct = entry.get("published_parsed")
    if struct:
        return datetime(*struct[:6], tzinfo=timezone.utc)

    return now_utc()


def _enclosure_url(entry: dict[str, Any]) -> str:
    for enclosure in entry.get("enclosures", []):
        href = (enclosure.get("href") or "").strip()
        if href:
            return href
    return ""


def _local_name(tag: Any) -> str:
    return tag.rsplit("}", 1)[-1] if isinstance(tag, str) else ""


def _find_channel(document: bytes, url: str) -> Element:
    """Channel element directly below the document root.

    Raises:
        FeedParseError: If the document cannot be read or has no channel
    """
    try:
        root = safe_fromstring(document)
    except (XMLParseError, DefusedXmlException) as e:
        raise FeedParseError(f"Feed {url} is not well-formed: {e}") from e

    channel = next((child for child in root if _local_name(child.tag) == "channel"), None)
    if channel is None:
        raise FeedParseError(f"Feed {url} has no channel element")
    return channel


def _channel_categories(channel: Element) -> tuple[str, ...]:
    """The fixed label plus the channel's top-level iTunes categories.

    Nested subcategories are not included.
    """
    categories = [DEFAULT_CATEGORY]
    for element in channel.findall(ITUNES_CATEGORY):
        text = (element.get("text") or "").strip()
        if text:
            categories.append(text)
    return tuple(categories)


class RSSParser:
    """Parses RSS feeds into :class:`Feed` objects.

    The HTTP client is shared with the rest of the archive run and is not
    closed by the parser.
    """

    def __init__(self, client: httpx.AsyncClient, cover_max_size: int = 800) -> None:
        """Initialize the RSS parser.

        Args:
            client: Shared HTTP client
            cover_max_size: Longest side of the re-encoded cover in pixels
        """
        self.client = client
        self.cover_max_size = cover_max_size

    async def parse(self, url: str, token: CancellationToken | None = None) -> Feed:
        """Fetch and parse a podcast feed.

        Args:
            url: Feed URL
            token: Cancellation token checked while streaming

        Returns:
            Parsed feed with episodes in document order

        Raises:
            FetchError: If the document cannot be retrieved
            FeedParseError: If the document is malformed or has no channel
        """
        token = token or CancellationToken()

        try:
            document = await self._fetch(url, token)
        except (RetryableError, NonRetryableError) as e:
            raise FetchError(f"Failed to fetch feed {url}: {e}") from e

        parsed = feedparser.parse(document)
        # Encoding overrides and similar warnings are tolerated, syntax errors are not
        if parsed.get("bozo") and isinstance(parsed.get("bozo_exception"), xml.sax.SAXException):
            raise FeedParseError(
                f"Feed {url} is not well-formed: {parsed.get('bozo_exception')}"
            )

        channel_element = _find_channel(document, url)
        channel = parsed.get("feed") or {}
        entries = parsed.get("entries") or []

        title = channel.get("title") or UNKNOWN_TITLE
        cover_bytes = await self._fetch_cover(channel, token)

        # Read once for the whole document; every episode shares this list
        categories = _channel_categories(channel_element)

        episodes = []
        for entry in entries:
            enclosure_url = _enclosure_url(entry)
            if not enclosure_url:
                continue

            episodes.append(
                Episode(
                    url=enclosure_url,
                    title=entry.get("title", UNKNOWN_TITLE),
                    published=_parse_published(entry),
                    authors=split_authors(entry.get("author")),
                    categories=categories,
                    description=entry.get("summary", ""),
                )
            )

        logger.info(f"Parsed feed '{title}': {len(episodes)} episode(s)")
        return Feed(title=title, episodes=tuple(episodes), cover_bytes=cover_bytes)

    @with_network_retry()
    async def _fetch(self, url: str, token: CancellationToken) -> bytes:
        """Stream a document into a single in-memory buffer."""
        buffer = BytesIO()
        try:
            async with self.client.stream("GET", url) as response:
                if response.status_code >= 400:
                    raise classify_http_error(response.status_code, url)
                async for chunk in response.aiter_bytes():
                    token.raise_if_cancelled()
                    buffer.write(chunk)
        except httpx.HTTPError as e:
            raise classify_httpx_error(e) from e
        # getvalue() hands over the buffer without copying it
        return buffer.getvalue()

    async def _fetch_cover(self, channel: dict[str, Any], token: CancellationToken) -> bytes | None:
        image = channel.get("image") or {}
        cover_url = (image.get("href") or image.get("url") or "").strip()
        if not cover_url:
            return None

        try:
            data = await self._fetch(cover_url, token)
            return resize_to_jpeg(data, max_size=self.cover_max_size)
        except Exception as e:
            logger.warning(f"Ignoring cover image {cover_url}: {type(e).__name__}: {e}")
            return None
