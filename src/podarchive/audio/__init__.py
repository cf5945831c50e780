"""Audio download module for PodArchive."""

from podarchive.audio.downloader import PARTIAL_SUFFIX, EpisodeDownloader

__all__ = [
    "EpisodeDownloader",
    "PARTIAL_SUFFIX",
]
