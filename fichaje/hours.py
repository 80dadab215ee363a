from __future__ import annotations

from collections.abc import Iterable, Iterator
from datetime import date, datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo

from .models import DayCoverage, TimeBreakdown, WorkSession, timedelta_to_ms

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
NIGHT_END = time(6, 0)
NIGHT_START = time(22, 0)
SUNDAY = 6


def to_epoch_ms(value: datetime) -> int:
    if value.tzinfo is None:
        raise ValueError("Datetime must be timezone-aware")
    return timedelta_to_ms(value - EPOCH)


def interval_overlap(start1: int, end1: int, start2: int, end2: int) -> int:
    """Length in ms shared by [start1, end1) and [start2, end2), zero when disjoint."""
    return max(0, min(end1, end2) - max(start1, start2))


def local_midnight(day: date, tz: ZoneInfo) -> datetime:
    return datetime.combine(day, time.min, tzinfo=tz)


def _clock_ms(day: date, clock: time, tz: ZoneInfo) -> int:
    return to_epoch_ms(datetime.combine(day, clock, tzinfo=tz))


def iter_session_days(start: datetime, end: datetime, tz: ZoneInfo) -> Iterator[DayCoverage]:
    """Yield every local calendar day touched by [start, end) with the time spent in it.

    Days are walked on the calendar, so a DST transition day spans 23 or 25
    real hours and still maps to exactly one entry.
    """
    start_ms = to_epoch_ms(start)
    end_ms = to_epoch_ms(end)

    day = start.astimezone(tz).date()
    day_start = local_midnight(day, tz)
    day_start_ms = to_epoch_ms(day_start)

    while day_start_ms < end_ms:
        next_day = day + timedelta(days=1)
        next_start = local_midnight(next_day, tz)
        next_start_ms = to_epoch_ms(next_start)

        overlap = interval_overlap(start_ms, end_ms, day_start_ms, next_start_ms)
        yield DayCoverage(day=day, day_start=day_start, overlap_ms=overlap)

        day, day_start, day_start_ms = next_day, next_start, next_start_ms


def worked_days(sessions: Iterable[WorkSession], tz: ZoneInfo) -> set[date]:
    days: set[date] = set()
    for session in sessions:
        for coverage in iter_session_days(session.start_time, session.end_time, tz):
            if coverage.overlap_ms > 0:
                days.add(coverage.day)
    return days


def calculate_night_hours(session: WorkSession, tz: ZoneInfo) -> TimeBreakdown:
    """Time worked between 22:00 and 06:00 local, and the dates it fell on."""
    start_ms = to_epoch_ms(session.start_time)
    end_ms = to_epoch_ms(session.end_time)

    total = 0
    dates: set[date] = set()
    for coverage in iter_session_days(session.start_time, session.end_time, tz):
        day = coverage.day
        early = interval_overlap(
            start_ms,
            end_ms,
            to_epoch_ms(coverage.day_start),
            _clock_ms(day, NIGHT_END, tz),
        )
        late = interval_overlap(
            start_ms,
            end_ms,
            _clock_ms(day, NIGHT_START, tz),
            to_epoch_ms(local_midnight(day + timedelta(days=1), tz)),
        )
        if early > 0 or late > 0:
            total += early + late
            dates.add(day)

    return TimeBreakdown(duration_ms=total, dates=tuple(sorted(dates)))


def calculate_day_hours(session: WorkSession, tz: ZoneInfo) -> int:
    """Time worked between 06:00 and 22:00 local."""
    start_ms = to_epoch_ms(session.start_time)
    end_ms = to_epoch_ms(session.end_time)

    total = 0
    for coverage in iter_session_days(session.start_time, session.end_time, tz):
        total += interval_overlap(
            start_ms,
            end_ms,
            _clock_ms(coverage.day, NIGHT_END, tz),
            _clock_ms(coverage.day, NIGHT_START, tz),
        )
    return total


def calculate_holiday_hours(session: WorkSession, tz: ZoneInfo) -> TimeBreakdown:
    """Time worked on Sundays. Public holidays are not considered."""
    total = 0
    dates: set[date] = set()
    for coverage in iter_session_days(session.start_time, session.end_time, tz):
        if coverage.day.weekday() != SUNDAY or coverage.overlap_ms <= 0:
            continue
        total += coverage.overlap_ms
        dates.add(coverage.day)

    return TimeBreakdown(duration_ms=total, dates=tuple(sorted(dates)))
