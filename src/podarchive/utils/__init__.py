"""Utility functions and helpers for PodArchive."""

from podarchive.utils.errors import (
    CleanupDeleteError,
    ConfigError,
    ConfigNotFoundError,
    EpisodeDownloadError,
    EpisodeError,
    FeedError,
    FeedParseError,
    FetchError,
    InvalidConfigError,
    ParseError,
    PodArchiveError,
    TagWriteError,
)
from podarchive.utils.sanitize import sanitize_file_name, sanitize_folder_name

__all__ = [
    # Errors
    "PodArchiveError",
    "ConfigError",
    "InvalidConfigError",
    "ConfigNotFoundError",
    "FeedError",
    "FetchError",
    "FeedParseError",
    "ParseError",
    "EpisodeError",
    "EpisodeDownloadError",
    "TagWriteError",
    "CleanupDeleteError",
    # Names
    "sanitize_folder_name",
    "sanitize_file_name",
]
