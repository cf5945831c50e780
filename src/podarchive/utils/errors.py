"""Custom exceptions for PodArchive."""

from pathlib import Path


class PodArchiveError(Exception):
    """Base exception for all PodArchive errors."""

    pass


class ConfigError(PodArchiveError):
    """Configuration-related errors."""

    pass


class InvalidConfigError(ConfigError):
    """Invalid configuration data."""

    pass


class ConfigNotFoundError(ConfigError):
    """Configuration file not found."""

    pass


class FeedError(PodArchiveError):
    """Errors that abort the archive pass of a single feed."""

    pass


class FetchError(FeedError):
    """Feed document could not be retrieved."""

    pass


class FeedParseError(FeedError):
    """Feed document is malformed or has no channel."""

    pass


ParseError = FeedParseError


class EpisodeError(PodArchiveError):
    """Errors isolated to a single episode."""

    def __init__(self, message: str, path: Path | None = None) -> None:
        super().__init__(message)
        self.path = path


class EpisodeDownloadError(EpisodeError):
    """Episode audio could not be downloaded."""

    pass


class TagWriteError(EpisodeError):
    """Episode file exists but its tags could not be (fully) written."""

    pass


class CleanupDeleteError(PodArchiveError):
    """An old episode file could not be deleted."""

    def __init__(self, message: str, path: Path | None = None) -> None:
        super().__init__(message)
        self.path = path
