"""Configuration schema models using Pydantic."""

from datetime import time
from pathlib import Path
from typing import Any, Literal

from pydantic import AliasChoices, BaseModel, Field, HttpUrl, field_validator

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]

DEFAULT_DOWNLOAD_TIME = time(2, 0)


class FeedSource(BaseModel):
    """Configuration for a single podcast feed."""

    url: HttpUrl
    title: str | None = None  # Overrides the channel title
    count: int | None = Field(
        default=None,
        ge=0,
        validation_alias=AliasChoices("count", "retention_count"),
        description="Maximum number of episodes to keep (None = unlimited)",
    )


class AppConfig(BaseModel):
    """Global PodArchive configuration."""

    output_path: Path = Field(
        default=Path("downloads"),
        validation_alias=AliasChoices("output_path", "outputPath"),
    )
    download_times: list[time] = Field(
        default_factory=list,
        validation_alias=AliasChoices("download_times", "downloadTimes"),
    )
    feeds: list[FeedSource] = Field(default_factory=list)

    log_level: LogLevel = "INFO"
    log_file: Path | None = None

    # HTTP
    request_timeout: float = Field(default=60.0, gt=0)
    user_agent: str = "podarchive"

    @field_validator("download_times", mode="before")
    @classmethod
    def _parse_download_times(cls, value: Any) -> Any:
        """Accept YAML sexagesimal integers.

        YAML 1.1 reads an unquoted ``14:30`` as the integer 870, i.e. minutes
        after midnight.
        """
        if value is None:
            return []
        if not isinstance(value, list):
            return value

        parsed = []
        for item in value:
            if isinstance(item, int) and not isinstance(item, bool):
                hours, minutes = divmod(item, 60)
                parsed.append(time(hours, minutes))
            else:
                parsed.append(item)
        return parsed

    @property
    def effective_download_times(self) -> list[time]:
        """Configured run times, or 02:00 when none are configured."""
        return list(self.download_times) or [DEFAULT_DOWNLOAD_TIME]
