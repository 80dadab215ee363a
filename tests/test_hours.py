from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from fichaje.hours import (
    calculate_day_hours,
    calculate_holiday_hours,
    calculate_night_hours,
    interval_overlap,
    iter_session_days,
    to_epoch_ms,
    worked_days,
)
from fichaje.models import MS_PER_HOUR, WorkSession

MADRID = ZoneInfo("Europe/Madrid")


def local(*args: int) -> datetime:
    return datetime(*args, tzinfo=MADRID)


def make_session(start: datetime, end: datetime, session_id: int = 1) -> WorkSession:
    return WorkSession(id=session_id, start_time=start, end_time=end)


def test_interval_overlap_is_symmetric_and_clamped() -> None:
    assert interval_overlap(0, 10, 5, 20) == 5
    assert interval_overlap(5, 20, 0, 10) == 5
    assert interval_overlap(0, 100, 10, 20) == 10
    assert interval_overlap(0, 5, 5, 10) == 0
    assert interval_overlap(0, 5, 50, 60) == 0
    assert interval_overlap(50, 60, 0, 5) == 0


def test_to_epoch_ms_requires_aware_datetime() -> None:
    assert to_epoch_ms(datetime(1970, 1, 1, 0, 0, 1, tzinfo=timezone.utc)) == 1000
    with pytest.raises(ValueError):
        to_epoch_ms(datetime(2025, 3, 3, 9, 0))


def test_day_shift_has_no_night_or_holiday_hours() -> None:
    session = make_session(local(2025, 3, 3, 9, 0), local(2025, 3, 3, 17, 0))

    assert session.duration_ms == 8 * MS_PER_HOUR
    assert calculate_night_hours(session, MADRID).duration_ms == 0
    assert calculate_night_hours(session, MADRID).dates == ()
    assert calculate_holiday_hours(session, MADRID).duration_ms == 0


def test_night_shift_across_midnight_touches_both_days() -> None:
    session = make_session(local(2025, 3, 3, 23, 0), local(2025, 3, 4, 2, 0))

    days = list(iter_session_days(session.start_time, session.end_time, MADRID))
    assert [(day.day, day.overlap_ms) for day in days] == [
        (date(2025, 3, 3), 1 * MS_PER_HOUR),
        (date(2025, 3, 4), 2 * MS_PER_HOUR),
    ]

    night = calculate_night_hours(session, MADRID)
    assert night.duration_ms == 3 * MS_PER_HOUR
    assert night.dates == (date(2025, 3, 3), date(2025, 3, 4))


def test_sunday_shift_counts_as_holiday() -> None:
    session = make_session(local(2025, 3, 9, 10, 0), local(2025, 3, 9, 18, 0))

    holiday = calculate_holiday_hours(session, MADRID)

    assert holiday.duration_ms == 8 * MS_PER_HOUR
    assert holiday.dates == (date(2025, 3, 9),)


def test_weekend_marathon_splits_night_and_holiday_hours() -> None:
    session = make_session(local(2025, 3, 8, 20, 0), local(2025, 3, 10, 3, 0))

    holiday = calculate_holiday_hours(session, MADRID)
    assert holiday.duration_ms == 24 * MS_PER_HOUR
    assert holiday.dates == (date(2025, 3, 9),)

    night = calculate_night_hours(session, MADRID)
    # Sat 22-24, Sun 00-06 and 22-24, Mon 00-03.
    assert night.duration_ms == 13 * MS_PER_HOUR
    assert night.dates == (date(2025, 3, 8), date(2025, 3, 9), date(2025, 3, 10))


def test_both_night_windows_on_one_day_record_the_date_once() -> None:
    session = make_session(local(2025, 3, 4, 5, 0), local(2025, 3, 4, 23, 0))

    night = calculate_night_hours(session, MADRID)

    assert night.duration_ms == 2 * MS_PER_HOUR
    assert night.dates == (date(2025, 3, 4),)


def test_night_window_edges_are_half_open() -> None:
    session = make_session(local(2025, 3, 4, 6, 0), local(2025, 3, 4, 22, 0))

    assert calculate_night_hours(session, MADRID).duration_ms == 0


def test_multi_day_session_reports_partial_edges() -> None:
    session = make_session(local(2025, 3, 3, 8, 0), local(2025, 3, 5, 10, 0))

    days = list(iter_session_days(session.start_time, session.end_time, MADRID))

    assert [day.overlap_ms for day in days] == [16 * MS_PER_HOUR, 24 * MS_PER_HOUR, 10 * MS_PER_HOUR]
    assert days[0].day_start == local(2025, 3, 3)


def test_walker_stops_when_day_boundary_reaches_end() -> None:
    start = local(2025, 3, 3)
    days = list(iter_session_days(start, start + timedelta(hours=48), MADRID))

    assert [day.day for day in days] == [date(2025, 3, 3), date(2025, 3, 4)]


def test_walker_is_restartable() -> None:
    start, end = local(2025, 3, 3, 20, 0), local(2025, 3, 5, 4, 0)

    assert list(iter_session_days(start, end, MADRID)) == list(iter_session_days(start, end, MADRID))


def test_walker_follows_calendar_days_across_dst() -> None:
    # Europe/Madrid springs forward on 2025-03-30, a 23 hour day.
    start, end = local(2025, 3, 29, 20, 0), local(2025, 3, 31, 8, 0)

    days = list(iter_session_days(start, end, MADRID))

    assert [(day.day, day.overlap_ms) for day in days] == [
        (date(2025, 3, 29), 4 * MS_PER_HOUR),
        (date(2025, 3, 30), 23 * MS_PER_HOUR),
        (date(2025, 3, 31), 8 * MS_PER_HOUR),
    ]
    assert sum(day.overlap_ms for day in days) == make_session(start, end).duration_ms


def test_day_boundaries_use_local_time_not_utc() -> None:
    # 23:30 UTC is already 00:30 of the next day in Madrid.
    start = datetime(2025, 3, 3, 23, 30, tzinfo=timezone.utc)
    session = make_session(start, start + timedelta(hours=1))

    assert worked_days([session], MADRID) == {date(2025, 3, 4)}
    assert calculate_night_hours(session, MADRID).dates == (date(2025, 3, 4),)
    assert worked_days([session], ZoneInfo("UTC")) == {date(2025, 3, 3), date(2025, 3, 4)}


def test_night_plus_day_equals_total() -> None:
    sessions = [
        make_session(local(2025, 3, 3, 9, 0), local(2025, 3, 3, 17, 0)),
        make_session(local(2025, 3, 3, 21, 15), local(2025, 3, 4, 7, 45)),
        make_session(local(2025, 3, 29, 18, 0), local(2025, 3, 31, 9, 30)),
        make_session(local(2025, 10, 25, 21, 0), local(2025, 10, 26, 8, 0)),
        make_session(local(2025, 3, 30, 0, 0), local(2025, 3, 30, 5, 0)),
        make_session(local(2025, 10, 26, 0, 0), local(2025, 10, 26, 6, 0)),
    ]

    for session in sessions:
        night = calculate_night_hours(session, MADRID).duration_ms
        assert night + calculate_day_hours(session, MADRID) == session.duration_ms


def test_inverted_session_contributes_nothing() -> None:
    session = make_session(local(2025, 3, 3, 23, 0), local(2025, 3, 3, 22, 0))

    assert session.duration_ms == 0
    assert calculate_night_hours(session, MADRID).duration_ms == 0
    assert worked_days([session], MADRID) == set()


def test_durations_count_real_hours_across_dst() -> None:
    spring = make_session(local(2025, 3, 30, 0, 0), local(2025, 3, 30, 5, 0))
    autumn = make_session(local(2025, 10, 26, 0, 0), local(2025, 10, 26, 6, 0))

    assert spring.duration_ms == 4 * MS_PER_HOUR
    assert calculate_night_hours(spring, MADRID).duration_ms == 4 * MS_PER_HOUR
    assert calculate_day_hours(spring, MADRID) == 0

    assert autumn.duration_ms == 7 * MS_PER_HOUR
    assert calculate_night_hours(autumn, MADRID).duration_ms == 7 * MS_PER_HOUR


def test_day_hours_cover_six_to_twenty_two() -> None:
    assert calculate_day_hours(make_session(local(2025, 3, 3, 9, 0), local(2025, 3, 3, 17, 0)), MADRID) == 8 * MS_PER_HOUR
    assert calculate_day_hours(make_session(local(2025, 3, 3, 5, 0), local(2025, 3, 3, 23, 0)), MADRID) == 16 * MS_PER_HOUR
    assert calculate_day_hours(make_session(local(2025, 3, 3, 22, 0), local(2025, 3, 4, 6, 0)), MADRID) == 0
