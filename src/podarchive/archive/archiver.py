"""Per-feed archiving: download, tag and retention cleanup."""

import asyncio
import logging
from collections.abc import Callable, Sequence
from pathlib import Path

from podarchive.archive import layout
from podarchive.archive.models import (
    CleanupReport,
    DownloadReport,
    EpisodeResult,
    EpisodeStatus,
    FeedReport,
)
from podarchive.audio.downloader import PARTIAL_SUFFIX, EpisodeDownloader
from podarchive.config.schema import FeedSource
from podarchive.feeds.models import Episode, Feed
from podarchive.feeds.parser import RSSParser
from podarchive.tagging.writer import TagWriter
from podarchive.utils.cancellation import CancellationToken
from podarchive.utils.errors import CleanupDeleteError, EpisodeError

logger = logging.getLogger(__name__)


class FeedArchiver:
    """Archives one feed at a time into ``output_path``.

    Handles:
    - Episode selection by retention count
    - Year-folder creation and file naming
    - Skipping files that already exist
    - Download and tagging, isolated per episode
    - Deleting the oldest files beyond the retention count

    Example:
        >>> archiver = FeedArchiver(Path("downloads"), parser, downloader)
        >>> report = await archiver.archive(FeedSource(url="https://example.com/feed.xml"))
        >>> report.download.downloaded
        3
    """

    def __init__(
        self,
        output_path: Path,
        parser: RSSParser,
        downloader: EpisodeDownloader,
        token: CancellationToken | None = None,
        tagger_factory: Callable[[Path], TagWriter] = TagWriter,
    ):
        """Initialize feed archiver.

        Args:
            output_path: Root directory holding every feed's year-folders
            parser: Feed parser (shares the HTTP client with the downloader)
            downloader: Episode downloader
            token: Cancellation token checked per episode and per deletion
            tagger_factory: Creates a tag writer for a downloaded file
        """
        self.output_path = Path(output_path)
        self.parser = parser
        self.downloader = downloader
        self.token = token or CancellationToken()
        self.tagger_factory = tagger_factory

    async def archive(self, source: FeedSource) -> FeedReport:
        """Parse a feed, download new episodes and apply retention.

        Raises:
            FetchError: If the feed document cannot be retrieved
            FeedParseError: If the feed document cannot be parsed
        """
        url = str(source.url)
        feed = await self.parser.parse(url, self.token)
        feed_title = source.title or feed.title

        logger.info(f"Starting archiving of feed: {feed_title}")
        logger.info(f"Feed url: {url}")
        logger.info(
            f"Max episodes: {source.count if source.count is not None else 'all'}"
        )

        download_report = await self.download(feed, feed_title, source.count)
        cleanup_report = self.cleanup(feed_title, source.count)

        logger.info(
            f"Finished feed {feed_title}: {download_report.downloaded} downloaded, "
            f"{download_report.skipped} skipped, {download_report.failed} failed, "
            f"{len(cleanup_report.deleted)} deleted"
        )

        return FeedReport(
            url=url,
            title=feed_title,
            download=download_report,
            cleanup=cleanup_report,
        )

    async def download(
        self,
        feed: Feed,
        feed_title: str,
        retention_count: int | None = None,
    ) -> DownloadReport:
        """Download and tag the selected episodes of ``feed``.

        Args:
            feed: Parsed feed
            feed_title: Title used for folder names and album tags
            retention_count: Only the first ``retention_count`` episodes are
                considered when set

        Returns:
            One result per selected episode

        Raises:
            asyncio.CancelledError: On cancellation; nothing else escapes
        """
        episodes = feed.episodes
        if retention_count is not None:
            episodes = episodes[:retention_count]

        report = DownloadReport()

        for year, group in layout.group_by_year(episodes).items():
            album_artists = layout.resolve_album_artists(group)
            album = layout.album_title(feed_title, year)
            target_folder = self.output_path / layout.folder_name(feed_title, year)

            for episode in group:
                self.token.raise_if_cancelled()
                result = await self._archive_episode(
                    episode, target_folder, album, feed.cover_bytes, album_artists
                )
                report.results.append(result)

        return report

    async def _archive_episode(
        self,
        episode: Episode,
        target_folder: Path,
        album: str,
        cover_bytes: bytes | None,
        album_artists: Sequence[str],
    ) -> EpisodeResult:
        file_path = target_folder / layout.file_name(episode)

        try:
            if not target_folder.exists():
                logger.info(f"Creating directory: {target_folder}")
                target_folder.mkdir(parents=True, exist_ok=True)

            if file_path.exists():
                logger.debug(f"Already archived: {file_path}")
                return EpisodeResult(
                    title=episode.title, path=file_path, status=EpisodeStatus.SKIPPED
                )

            logger.info(f"Downloading episode: {file_path}")
            await self.downloader.download(episode.url, file_path, self.token)

            logger.info(f"Tagging episode: {file_path}")
            loop = asyncio.get_running_loop()
            await loop.run_in_executor(
                None, self._tag, file_path, episode, album, cover_bytes, album_artists
            )

        except Exception as e:
            if isinstance(e, EpisodeError):
                logger.error(f'Download episode "{episode.title}" failed: {e}')
            else:
                logger.exception(f'Download episode "{episode.title}" failed: {e}')
            return EpisodeResult(
                title=episode.title,
                path=file_path,
                status=EpisodeStatus.FAILED,
                error=str(e),
                error_type=type(e).__name__,
            )

        return EpisodeResult(
            title=episode.title, path=file_path, status=EpisodeStatus.DOWNLOADED
        )

    def _tag(
        self,
        file_path: Path,
        episode: Episode,
        album: str,
        cover_bytes: bytes | None,
        album_artists: Sequence[str],
    ) -> None:
        tagger = self.tagger_factory(file_path)
        tagger.clear_all_tags()
        tagger.write_tags(episode, album, cover_bytes, album_artists)

    def cleanup(self, feed_title: str, retention_count: int | None = None) -> CleanupReport:
        """Delete the oldest archived files beyond ``retention_count``.

        Every year-folder of the feed is considered as one pool; files are
        ranked by the date in their name, newest first. Files without a
        parsable date rank last.

        Args:
            feed_title: Title used when the folders were created
            retention_count: Number of files to keep; no-op when None

        Returns:
            Deleted and failed paths
        """
        if retention_count is None:
            return CleanupReport()

        files = self._archived_files(feed_title)
        files.sort(key=lambda path: layout.parse_file_date(path.name), reverse=True)

        report = CleanupReport(kept=min(len(files), retention_count))

        for path in files[retention_count:]:
            self.token.raise_if_cancelled()
            logger.info(f"Deleting old episode: {path}")
            try:
                self._delete(path)
            except CleanupDeleteError as e:
                logger.error(str(e))
                report.failed.append(path)
            else:
                report.deleted.append(path)

        return report

    @staticmethod
    def _delete(path: Path) -> None:
        try:
            path.unlink()
        except OSError as e:
            raise CleanupDeleteError(f'Delete episode "{path}" failed: {e}', path=path) from e

    def _archived_files(self, feed_title: str) -> list[Path]:
        if not self.output_path.is_dir():
            return []

        prefix = layout.folder_prefix(feed_title)
        folders = sorted(
            d for d in self.output_path.iterdir() if d.is_dir() and d.name.startswith(prefix)
        )
        # Leftover partial downloads are not archived episodes
        return [
            f
            for folder in folders
            for f in sorted(folder.iterdir())
            if f.is_file() and not f.name.endswith(PARTIAL_SUFFIX)
        ]
