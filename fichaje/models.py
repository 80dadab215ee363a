from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone

MS_PER_SECOND = 1000
MS_PER_MINUTE = 60 * MS_PER_SECOND
MS_PER_HOUR = 60 * MS_PER_MINUTE


def timedelta_to_ms(value: timedelta) -> int:
    return value // timedelta(milliseconds=1)


def elapsed_ms(start: datetime, end: datetime) -> int:
    """Milliseconds between two instants.

    Both sides go through UTC first: subtracting datetimes that share a
    ZoneInfo compares wall clocks and drifts by an hour across DST.
    """
    return timedelta_to_ms(end.astimezone(timezone.utc) - start.astimezone(timezone.utc))


@dataclass(frozen=True, slots=True)
class ActiveSession:
    id: int
    start_time: datetime


@dataclass(frozen=True, slots=True)
class WorkSession:
    id: int
    start_time: datetime
    end_time: datetime
    duration: str = ""

    @property
    def duration_ms(self) -> int:
        """Gross duration recomputed from the timestamps, floored at zero."""
        return max(0, elapsed_ms(self.start_time, self.end_time))


@dataclass(frozen=True, slots=True)
class DayCoverage:
    day: date
    day_start: datetime
    overlap_ms: int


@dataclass(frozen=True, slots=True)
class TimeBreakdown:
    duration_ms: int
    dates: tuple[date, ...]


@dataclass(frozen=True, slots=True)
class WeekData:
    id: str
    start_date: datetime
    end_date: datetime
    sessions: tuple[WorkSession, ...]
    total_duration: int
    total_duration_with_breaks: int


@dataclass(frozen=True, slots=True)
class GlobalSummary:
    total_duration: int
    total_duration_with_breaks: int
    night_duration: int
    holiday_duration: int
    nocturnal_dates: tuple[date, ...]
    holiday_dates: tuple[date, ...]
