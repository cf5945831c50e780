"""Archiver service: runs every configured feed on a daily schedule."""

import logging
from collections.abc import Callable
from datetime import datetime

import httpx

from podarchive import __version__
from podarchive.archive.archiver import FeedArchiver
from podarchive.archive.models import FeedReport, PassReport
from podarchive.audio.downloader import EpisodeDownloader
from podarchive.config.schema import AppConfig
from podarchive.feeds.parser import RSSParser
from podarchive.scheduler import next_run_time
from podarchive.utils.cancellation import CancellationToken
from podarchive.utils.errors import FeedError

logger = logging.getLogger(__name__)


def create_http_client(config: AppConfig) -> httpx.AsyncClient:
    """Shared HTTP client for feed parsing and episode downloads."""
    return httpx.AsyncClient(
        timeout=config.request_timeout,
        follow_redirects=True,
        headers={"User-Agent": config.user_agent},
    )


class ArchiverService:
    """Top-level scheduling loop.

    Each pass archives the configured feeds one after another, in
    configured order. Between passes the service sleeps until the next
    configured time of day. Cancellation through the token (or of the
    running task) ends the loop from any state.
    """

    def __init__(
        self,
        config: AppConfig,
        client: httpx.AsyncClient,
        token: CancellationToken | None = None,
        archiver: FeedArchiver | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        """Initialize archiver service.

        Args:
            config: Loaded configuration
            client: Shared HTTP client (owned by the caller)
            token: Cancellation token
            archiver: Feed archiver (default: built from ``client``)
            clock: Returns the local wall-clock time used for scheduling
        """
        self.config = config
        self.client = client
        self.token = token or CancellationToken()
        self.archiver = archiver or FeedArchiver(
            output_path=config.output_path,
            parser=RSSParser(client),
            downloader=EpisodeDownloader(client),
            token=self.token,
        )
        self.clock = clock

    async def run(self) -> None:
        """Archive, sleep until the next run time, repeat until cancelled.

        Raises:
            asyncio.CancelledError: The only way this coroutine ends
        """
        logger.info(f"PodArchive started (Version: {__version__})")
        logger.info(f"Output path: {self.config.output_path}")

        run_times = self.config.effective_download_times

        while True:
            self.token.raise_if_cancelled()
            await self.run_once()

            now = self.clock()
            next_run = next_run_time(now, run_times)
            delay = (next_run - now).total_seconds()

            logger.info(
                f"Waiting until {next_run:%Y-%m-%d %H:%M} ({delay / 60:.0f} minutes)..."
            )
            await self.token.sleep(delay)

    async def run_once(self) -> PassReport:
        """Archive every configured feed once.

        A feed that fails is logged and skipped; the remaining feeds still run.

        Returns:
            One report per configured feed
        """
        feeds = self.config.feeds
        report = PassReport()

        logger.info(f"Archiving {len(feeds)} podcast feeds")

        for index, source in enumerate(feeds, start=1):
            self.token.raise_if_cancelled()
            logger.info(f"Feed {index}/{len(feeds)}: {source.title or source.url}")

            try:
                feed_report = await self.archiver.archive(source)
            except FeedError as e:
                logger.error(f"Skipping feed {source.url}: {e}")
                feed_report = FeedReport(url=str(source.url), title=source.title, error=str(e))
            except Exception as e:
                logger.exception(f"Archiving feed {source.url} failed: {e}")
                feed_report = FeedReport(url=str(source.url), title=source.title, error=str(e))

            report.feeds.append(feed_report)

        logger.info(
            f"Archive pass finished: {len(feeds) - report.failed_feeds} of {len(feeds)} feeds ok"
        )
        return report
