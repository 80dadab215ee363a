from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import date, datetime, time, timedelta
from zoneinfo import ZoneInfo

from .hours import calculate_holiday_hours, calculate_night_hours, local_midnight, worked_days
from .models import MS_PER_MINUTE, GlobalSummary, WeekData, WorkSession

DEFAULT_BREAK_MINUTES = 30
WEEK_END_CLOCK = time(23, 59, 59, 999000)


def week_start(value: datetime, tz: ZoneInfo) -> date:
    """Monday of the local week containing ``value``."""
    local_day = value.astimezone(tz).date()
    return local_day - timedelta(days=local_day.weekday())


def break_deduction_ms(sessions: Iterable[WorkSession], tz: ZoneInfo, break_minutes: int) -> int:
    # One flat break per distinct calendar day worked, however short the work was.
    return len(worked_days(sessions, tz)) * break_minutes * MS_PER_MINUTE


def _with_breaks(total_ms: int, deduction_ms: int) -> int:
    return max(0, total_ms - deduction_ms)


def build_weekly_data(
    sessions: Sequence[WorkSession],
    tz: ZoneInfo,
    break_minutes: int = DEFAULT_BREAK_MINUTES,
) -> list[WeekData]:
    grouped: dict[date, list[WorkSession]] = {}
    for session in sessions:
        grouped.setdefault(week_start(session.start_time, tz), []).append(session)

    weeks: list[WeekData] = []
    for monday, members in grouped.items():
        total = sum(session.duration_ms for session in members)
        deduction = break_deduction_ms(members, tz, break_minutes)
        weeks.append(
            WeekData(
                id=monday.isoformat(),
                start_date=local_midnight(monday, tz),
                end_date=datetime.combine(monday + timedelta(days=6), WEEK_END_CLOCK, tzinfo=tz),
                sessions=tuple(members),
                total_duration=total,
                total_duration_with_breaks=_with_breaks(total, deduction),
            )
        )

    weeks.sort(key=lambda week: week.start_date, reverse=True)
    return weeks


def build_global_summary(
    sessions: Sequence[WorkSession],
    tz: ZoneInfo,
    break_minutes: int = DEFAULT_BREAK_MINUTES,
) -> GlobalSummary:
    total = 0
    night_total = 0
    holiday_total = 0
    # Keyed by YYYY-MM-DD so overlapping sessions never report a date twice.
    nocturnal: set[str] = set()
    holidays: set[str] = set()

    for session in sessions:
        total += session.duration_ms

        night = calculate_night_hours(session, tz)
        night_total += night.duration_ms
        nocturnal.update(day.isoformat() for day in night.dates)

        holiday = calculate_holiday_hours(session, tz)
        holiday_total += holiday.duration_ms
        holidays.update(day.isoformat() for day in holiday.dates)

    deduction = break_deduction_ms(sessions, tz, break_minutes)
    return GlobalSummary(
        total_duration=total,
        total_duration_with_breaks=_with_breaks(total, deduction),
        night_duration=night_total,
        holiday_duration=holiday_total,
        nocturnal_dates=tuple(date.fromisoformat(key) for key in sorted(nocturnal)),
        holiday_dates=tuple(date.fromisoformat(key) for key in sorted(holidays)),
    )
