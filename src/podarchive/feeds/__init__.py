"""Feed fetching and RSS parsing for PodArchive."""

from podarchive.feeds.models import Episode, Feed
from podarchive.feeds.parser import RSSParser

__all__ = ["Episode", "Feed", "RSSParser"]
