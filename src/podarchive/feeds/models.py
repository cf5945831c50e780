"""Data models for podcast episodes and feeds."""

import calendar
from datetime import datetime
from pathlib import PurePosixPath
from urllib.parse import unquote, urlparse

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_CATEGORY = "Podcast"
UNKNOWN_TITLE = "Unknown"


class Episode(BaseModel):
    """Represents a single downloadable podcast episode."""

    model_config = ConfigDict(frozen=True)

    url: str = Field(..., min_length=1, description="Enclosure media URL")
    title: str = UNKNOWN_TITLE
    published: datetime
    authors: tuple[str, ...] = ()
    categories: tuple[str, ...] = (DEFAULT_CATEGORY,)
    description: str = ""

    @property
    def year(self) -> int:
        return self.published.year

    @property
    def number(self) -> int:
        """Ordinal counting down from the start of the year.

        The last day of a year is number 1, January 1st is 365 (366 in leap years).
        """
        days_in_year = 366 if calendar.isleap(self.year) else 365
        day_of_year = self.published.timetuple().tm_yday
        return days_in_year + 1 - day_of_year

    @property
    def extension(self) -> str:
        """File extension of the enclosure URL path, e.g. ``.mp3``."""
        path = unquote(urlparse(self.url).path)
        return PurePosixPath(path).suffix


class Feed(BaseModel):
    """A parsed podcast feed."""

    model_config = ConfigDict(frozen=True)

    title: str = UNKNOWN_TITLE
    episodes: tuple[Episode, ...] = ()
    cover_bytes: bytes | None = None
