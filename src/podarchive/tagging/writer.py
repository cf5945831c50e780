"""Audio tag writer using mutagen.

Supports ID3 (MP3 and other ID3-tagged containers), MP4/M4A atoms and
Vorbis comments (FLAC, Ogg Vorbis, Ogg Opus).
"""

import base64
import logging
from collections.abc import Sequence
from pathlib import Path

import mutagen
from mutagen.flac import FLAC, Picture
from mutagen.id3 import (
    APIC,
    COMM,
    ID3,
    TALB,
    TCON,
    TDRC,
    TIT2,
    TPE1,
    TPE2,
    TRCK,
    PictureType,
)
from mutagen.mp4 import MP4Cover, MP4Tags
from mutagen.ogg import OggFileType

from podarchive.feeds.models import Episode
from podarchive.utils.datetime import now_utc
from podarchive.utils.errors import TagWriteError

logger = logging.getLogger(__name__)

MIN_TAG_YEAR = 1900
MAX_TAG_YEAR = 2100


def detect_image_mime(data: bytes) -> str:
    """PNG if the data starts with the PNG magic bytes, otherwise JPEG."""
    if len(data) >= 2 and data[0] == 0x89 and data[1] == 0x50:
        return "image/png"
    return "image/jpeg"


def tag_year(episode: Episode) -> int:
    if MIN_TAG_YEAR <= episode.year <= MAX_TAG_YEAR:
        return episode.year
    return now_utc().year


def tag_title(episode: Episode) -> str:
    return f"{episode.published:%d.%m.} {episode.title}"


class TagWriter:
    """Writes a fresh tag set into one downloaded episode file.

    Example:
        >>> writer = TagWriter(Path("Show (2024)/2024-05-01 Pilot.mp3"))
        >>> writer.clear_all_tags()
        >>> writer.write_tags(episode, "Show (2024)", cover, ["Host"])
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def _open(self) -> mutagen.FileType:
        audio = mutagen.File(self.path)
        if audio is None:
            raise TagWriteError(f"Unsupported audio format: {self.path}", path=self.path)
        return audio

    def clear_all_tags(self) -> None:
        """Remove every tag container from the file.

        Raises:
            TagWriteError: If the file cannot be opened or saved
        """
        try:
            audio = self._open()
            audio.delete()
        except TagWriteError:
            raise
        except Exception as e:
            raise TagWriteError(f"Failed to clear tags of {self.path}: {e}", path=self.path) from e

    def write_tags(
        self,
        episode: Episode,
        album_title: str,
        cover_bytes: bytes | None,
        album_artists: Sequence[str],
    ) -> None:
        """Write episode and album metadata, replacing existing values.

        Args:
            episode: Episode the file was downloaded from
            album_title: Album name, ``"{feed title} ({year})"``
            cover_bytes: Cover image to embed as front cover, if any
            album_artists: Album artist list of the episode's year-group

        Raises:
            TagWriteError: If the file format is unsupported or saving fails
        """
        try:
            audio = self._open()
            if audio.tags is None:
                audio.add_tags()

            tags = audio.tags
            if isinstance(tags, ID3):
                self._write_id3(tags, episode, album_title, cover_bytes, album_artists)
            elif isinstance(tags, MP4Tags):
                self._write_mp4(tags, episode, album_title, cover_bytes, album_artists)
            elif isinstance(audio, (FLAC, OggFileType)):
                self._write_vorbis(audio, episode, album_title, cover_bytes, album_artists)
            else:
                raise TagWriteError(
                    f"Unsupported tag container {type(tags).__name__}: {self.path}",
                    path=self.path,
                )

            audio.save()
        except TagWriteError:
            raise
        except Exception as e:
            raise TagWriteError(f"Failed to write tags to {self.path}: {e}", path=self.path) from e

        logger.debug(f"Tagged {self.path}")

    def _write_id3(self, tags, episode, album_title, cover_bytes, album_artists) -> None:
        tags.add(TIT2(encoding=3, text=tag_title(episode)))
        tags.add(TRCK(encoding=3, text=str(episode.number)))
        tags.add(TALB(encoding=3, text=album_title))
        if episode.authors:
            tags.add(TPE1(encoding=3, text=list(episode.authors)))
        if album_artists:
            tags.add(TPE2(encoding=3, text=list(album_artists)))
        if episode.categories:
            tags.add(TCON(encoding=3, text=list(episode.categories)))
        tags.add(TDRC(encoding=3, text=str(tag_year(episode))))
        tags.add(COMM(encoding=3, lang="eng", desc="", text=episode.description))

        if cover_bytes is not None:
            tags.delall("APIC")
            tags.add(
                APIC(
                    encoding=3,
                    mime=detect_image_mime(cover_bytes),
                    type=PictureType.COVER_FRONT,
                    desc="Cover",
                    data=cover_bytes,
                )
            )

    def _write_mp4(self, tags, episode, album_title, cover_bytes, album_artists) -> None:
        tags["\xa9nam"] = [tag_title(episode)]
        tags["trkn"] = [(episode.number, 0)]
        tags["\xa9alb"] = [album_title]
        if episode.authors:
            tags["\xa9ART"] = list(episode.authors)
        if album_artists:
            tags["aART"] = list(album_artists)
        if episode.categories:
            tags["\xa9gen"] = list(episode.categories)
        tags["\xa9day"] = [str(tag_year(episode))]
        tags["\xa9cmt"] = [episode.description]

        if cover_bytes is not None:
            image_format = (
                MP4Cover.FORMAT_PNG
                if detect_image_mime(cover_bytes) == "image/png"
                else MP4Cover.FORMAT_JPEG
            )
            tags["covr"] = [MP4Cover(cover_bytes, imageformat=image_format)]

    def _write_vorbis(self, audio, episode, album_title, cover_bytes, album_artists) -> None:
        tags = audio.tags
        tags["title"] = [tag_title(episode)]
        tags["tracknumber"] = [str(episode.number)]
        tags["album"] = [album_title]
        if episode.authors:
            tags["artist"] = list(episode.authors)
        if album_artists:
            tags["albumartist"] = list(album_artists)
        if episode.categories:
            tags["genre"] = list(episode.categories)
        tags["date"] = [str(tag_year(episode))]
        tags["comment"] = [episode.description]

        if cover_bytes is None:
            return

        picture = Picture()
        picture.type = PictureType.COVER_FRONT
        picture.mime = detect_image_mime(cover_bytes)
        picture.desc = "Cover"
        picture.data = cover_bytes

        if isinstance(audio, FLAC):
            audio.clear_pictures()
            audio.add_picture(picture)
        else:
            tags["metadata_block_picture"] = [base64.b64encode(picture.write()).decode("ascii")]
