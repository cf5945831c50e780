"""Result models for archive runs."""

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field


class EpisodeStatus(str, Enum):
    """Outcome of processing one episode."""

    DOWNLOADED = "downloaded"
    SKIPPED = "skipped"
    FAILED = "failed"


class EpisodeResult(BaseModel):
    """Outcome for a single episode of a download batch."""

    title: str
    path: Path | None = None
    status: EpisodeStatus
    error: str | None = None
    error_type: str | None = None


class DownloadReport(BaseModel):
    """Aggregated results of one feed's download step."""

    results: list[EpisodeResult] = Field(default_factory=list)

    def _count(self, status: EpisodeStatus) -> int:
        return sum(1 for result in self.results if result.status == status)

    @property
    def downloaded(self) -> int:
        return self._count(EpisodeStatus.DOWNLOADED)

    @property
    def skipped(self) -> int:
        return self._count(EpisodeStatus.SKIPPED)

    @property
    def failed(self) -> int:
        return self._count(EpisodeStatus.FAILED)


class CleanupReport(BaseModel):
    """Results of one feed's retention cleanup."""

    kept: int = 0
    deleted: list[Path] = Field(default_factory=list)
    failed: list[Path] = Field(default_factory=list)


class FeedReport(BaseModel):
    """Everything that happened to one feed during an archive pass."""

    url: str
    title: str | None = None
    download: DownloadReport = Field(default_factory=DownloadReport)
    cleanup: CleanupReport = Field(default_factory=CleanupReport)
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class PassReport(BaseModel):
    """Reports of every feed in one archive pass, in configured order."""

    feeds: list[FeedReport] = Field(default_factory=list)

    @property
    def failed_feeds(self) -> int:
        return sum(1 for feed in self.feeds if not feed.ok)
