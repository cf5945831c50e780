"""On-disk layout of the archive.

The archive has no index: a feed's episodes live in one folder per
publication year, and the ``yyyy-MM-dd`` prefix of each file name is the
only record of an episode's date once it has been downloaded.
"""

from collections.abc import Iterable, Sequence
from datetime import date, datetime

from podarchive.feeds.models import Episode
from podarchive.utils.sanitize import sanitize_file_name, sanitize_folder_name

VARIOUS_ARTISTS = "Various Artists"
DATE_PREFIX_FORMAT = "%Y-%m-%d"
DATE_PREFIX_LENGTH = 10

# Sorts after every real date when ordering newest first
UNKNOWN_FILE_DATE = date.min


def album_title(feed_title: str, year: int) -> str:
    return f"{feed_title} ({year})"


def folder_name(feed_title: str, year: int) -> str:
    """Year-folder name, e.g. ``"My Show (2024)"``."""
    return sanitize_folder_name(album_title(feed_title, year))


def folder_prefix(feed_title: str) -> str:
    """Name prefix shared by every year-folder of a feed."""
    return sanitize_folder_name(feed_title) + " ("


def file_name(episode: Episode) -> str:
    """Episode file name, e.g. ``"2024-05-01 Pilot.mp3"``."""
    return (
        f"{episode.published.strftime(DATE_PREFIX_FORMAT)} "
        f"{sanitize_file_name(episode.title)}{episode.extension}"
    )


def parse_file_date(name: str) -> date:
    """Recover the publication date from a file name's prefix.

    Returns:
        The parsed date, or ``UNKNOWN_FILE_DATE`` if the prefix is not a
        valid ``yyyy-MM-dd`` date
    """
    prefix = name[:DATE_PREFIX_LENGTH]
    if len(prefix) != DATE_PREFIX_LENGTH:
        return UNKNOWN_FILE_DATE
    try:
        return datetime.strptime(prefix, DATE_PREFIX_FORMAT).date()
    except ValueError:
        return UNKNOWN_FILE_DATE


def group_by_year(episodes: Iterable[Episode]) -> dict[int, list[Episode]]:
    """Group episodes by publication year.

    Groups appear in order of each year's first occurrence and keep the
    episodes' relative order.
    """
    groups: dict[int, list[Episode]] = {}
    for episode in episodes:
        groups.setdefault(episode.year, []).append(episode)
    return groups


def resolve_album_artists(episodes: Sequence[Episode]) -> list[str]:
    """Album artists for a year-group.

    The common author list when every episode has exactly the same authors
    in the same order, ``["Various Artists"]`` otherwise.
    """
    if not episodes:
        return [VARIOUS_ARTISTS]

    first = episodes[0].authors
    if all(episode.authors == first for episode in episodes):
        return list(first)
    return [VARIOUS_ARTISTS]
