"""Feed archiving: download, tagging and retention cleanup."""

from podarchive.archive.archiver import FeedArchiver
from podarchive.archive.models import (
    CleanupReport,
    DownloadReport,
    EpisodeResult,
    EpisodeStatus,
    FeedReport,
    PassReport,
)

__all__ = [
    "FeedArchiver",
    "CleanupReport",
    "DownloadReport",
    "EpisodeResult",
    "EpisodeStatus",
    "FeedReport",
    "PassReport",
]
