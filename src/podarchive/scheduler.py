"""Daily run-time scheduling."""

from collections.abc import Sequence
from datetime import datetime, time, timedelta

from podarchive.config.schema import DEFAULT_DOWNLOAD_TIME


def next_run_time(now: datetime, times: Sequence[time]) -> datetime:
    """Soonest configured time of day strictly after ``now``.

    Considers today's and tomorrow's occurrences of every time in ``times``.
    The result carries ``now``'s tzinfo.

    Example:
        >>> next_run_time(datetime(2024, 5, 1, 3, 0), [time(2), time(14)])
        datetime.datetime(2024, 5, 1, 14, 0)
    """
    times = list(times) or [DEFAULT_DOWNLOAD_TIME]
    today = now.date()

    candidates = [
        datetime.combine(day, run_time).replace(tzinfo=now.tzinfo)
        for day in (today, today + timedelta(days=1))
        for run_time in times
    ]
    return min(candidate for candidate in candidates if candidate > now)
