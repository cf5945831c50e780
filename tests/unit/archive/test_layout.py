"""Tests for archive naming and grouping rules."""

from datetime import date, datetime, timedelta, timezone

import pytest

from podarchive.archive import layout
from podarchive.feeds.models import Episode


def _episode(
    published: datetime, title: str = "Ep", authors: tuple[str, ...] = (), url: str = "https://h/e.mp3"
) -> Episode:
    return Episode(url=url, title=title, published=published, authors=authors)


class TestNaming:
    """Test folder and file names."""

    def test_folder_name(self):
        """Test year-folder name is title plus year."""
        assert layout.folder_name("My Show", 2024) == "My Show (2024)"

    def test_folder_name_sanitized(self):
        """Test invalid path characters are removed from folder names."""
        assert layout.folder_name("A/B: Talk", 2023) == "AB Talk (2023)"

    def test_folder_prefix(self):
        """Test prefix matches every year-folder of the feed."""
        prefix = layout.folder_prefix(" My Show ")

        assert prefix == "My Show ("
        assert layout.folder_name(" My Show ", 2019).startswith(prefix)

    def test_file_name(self):
        """Test file name is date prefix, sanitized title and extension."""
        episode = _episode(datetime(2024, 5, 1, 23, 59), title='Pilot: "Hello"?')

        assert layout.file_name(episode) == "2024-05-01 Pilot Hello.mp3"

    def test_file_name_without_extension(self):
        """Test an extensionless URL yields a name without extension."""
        episode = _episode(datetime(2024, 5, 1), title="Pilot", url="https://h/audio")

        assert layout.file_name(episode) == "2024-05-01 Pilot"

    def test_file_name_uses_feed_local_date(self):
        """Test the date prefix uses the publisher's offset, not UTC."""
        published = datetime(2024, 1, 1, 0, 30, tzinfo=timezone(timedelta(hours=2)))

        assert layout.file_name(_episode(published)).startswith("2024-01-01 ")

    def test_album_title(self):
        """Test album title format."""
        assert layout.album_title("Show", 2020) == "Show (2020)"


class TestParseFileDate:
    """Test recovering dates from file names."""

    def test_valid_prefix(self):
        """Test a valid prefix is parsed."""
        assert layout.parse_file_date("2024-05-01 Pilot.mp3") == date(2024, 5, 1)

    @pytest.mark.parametrize(
        "name", ["notes.txt", "2024-13-01 Bad month.mp3", "2024-02-30 x.mp3", "2024", ""]
    )
    def test_invalid_prefix(self, name):
        """Test unparsable prefixes map to the minimum date."""
        assert layout.parse_file_date(name) == layout.UNKNOWN_FILE_DATE

    def test_unknown_sorts_last_newest_first(self):
        """Test unknown dates rank after every real date."""
        names = ["junk.mp3", "2024-01-01 a.mp3", "1901-01-01 b.mp3"]

        ordered = sorted(names, key=layout.parse_file_date, reverse=True)

        assert ordered == ["2024-01-01 a.mp3", "1901-01-01 b.mp3", "junk.mp3"]


class TestGroupByYear:
    """Test year grouping."""

    def test_first_occurrence_order(self):
        """Test groups follow the first occurrence of each year."""
        episodes = [
            _episode(datetime(2024, 3, 1), "c"),
            _episode(datetime(2023, 12, 1), "b"),
            _episode(datetime(2024, 1, 1), "a"),
        ]

        groups = layout.group_by_year(episodes)

        assert list(groups) == [2024, 2023]
        assert [e.title for e in groups[2024]] == ["c", "a"]
        assert [e.title for e in groups[2023]] == ["b"]

    def test_empty(self):
        """Test no episodes yield no groups."""
        assert layout.group_by_year([]) == {}


class TestResolveAlbumArtists:
    """Test album artist resolution."""

    def test_identical_authors(self):
        """Test identical author lists are used as album artists."""
        episodes = [
            _episode(datetime(2024, 1, 1), authors=("Alice", "Bob")),
            _episode(datetime(2024, 2, 1), authors=("Alice", "Bob")),
        ]

        assert layout.resolve_album_artists(episodes) == ["Alice", "Bob"]

    def test_different_order(self):
        """Test the same authors in another order count as different."""
        episodes = [
            _episode(datetime(2024, 1, 1), authors=("Alice", "Bob")),
            _episode(datetime(2024, 2, 1), authors=("Bob", "Alice")),
        ]

        assert layout.resolve_album_artists(episodes) == [layout.VARIOUS_ARTISTS]

    def test_different_authors(self):
        """Test differing authors give Various Artists."""
        episodes = [
            _episode(datetime(2024, 1, 1), authors=("Alice",)),
            _episode(datetime(2024, 2, 1), authors=()),
        ]

        assert layout.resolve_album_artists(episodes) == ["Various Artists"]

    def test_all_without_authors(self):
        """Test a group where nobody has authors yields an empty list."""
        episodes = [_episode(datetime(2024, 1, 1)), _episode(datetime(2024, 2, 1))]

        assert layout.resolve_album_artists(episodes) == []

    def test_single_episode(self):
        """Test a single episode's authors are used."""
        episodes = [_episode(datetime(2024, 1, 1), authors=("Carol",))]

        assert layout.resolve_album_artists(episodes) == ["Carol"]
