"""Episode audio downloader using httpx streaming."""

import logging
from pathlib import Path

import aiofiles
import httpx

from podarchive.utils.cancellation import CancellationToken
from podarchive.utils.errors import EpisodeDownloadError
from podarchive.utils.retry import (
    NonRetryableError,
    RetryableError,
    classify_http_error,
    classify_httpx_error,
    with_network_retry,
)

logger = logging.getLogger(__name__)

PARTIAL_SUFFIX = ".part"


class EpisodeDownloader:
    """Download episode audio to a file.

    Bytes are streamed into ``<destination>.part`` and renamed onto the
    destination only once the transfer has completed, so the destination
    path never holds a truncated file.
    """

    def __init__(self, client: httpx.AsyncClient, chunk_size: int = 64 * 1024):
        """Initialize episode downloader.

        Args:
            client: Shared HTTP client
            chunk_size: Size of streamed chunks in bytes
        """
        self.client = client
        self.chunk_size = chunk_size

    async def download(
        self,
        url: str,
        destination: Path,
        token: CancellationToken | None = None,
    ) -> Path:
        """Download ``url`` to ``destination``.

        Args:
            url: Audio URL
            destination: Final file path (parent directory must exist)
            token: Cancellation token checked between chunks

        Returns:
            ``destination``

        Raises:
            EpisodeDownloadError: If the download fails
            asyncio.CancelledError: If cancelled mid-transfer
        """
        token = token or CancellationToken()
        partial = destination.with_name(destination.name + PARTIAL_SUFFIX)

        try:
            size = await self._stream_to_file(url, partial, token)
            partial.replace(destination)
        except (RetryableError, NonRetryableError) as e:
            raise EpisodeDownloadError(
                f"Failed to download {url}: {e}", path=destination
            ) from e
        except OSError as e:
            raise EpisodeDownloadError(
                f"Failed to write {destination}: {e}", path=destination
            ) from e
        finally:
            partial.unlink(missing_ok=True)

        logger.debug(f"Downloaded {size} bytes to {destination}")
        return destination

    @with_network_retry()
    async def _stream_to_file(self, url: str, target: Path, token: CancellationToken) -> int:
        size = 0
        try:
            async with self.client.stream("GET", url) as response:
                if response.status_code >= 400:
                    raise classify_http_error(response.status_code, url)

                async with aiofiles.open(target, "wb") as f:
                    async for chunk in response.aiter_bytes(self.chunk_size):
                        token.raise_if_cancelled()
                        await f.write(chunk)
                        size += len(chunk)
        except httpx.HTTPError as e:
            raise classify_httpx_error(e) from e
        return size
