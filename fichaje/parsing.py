from __future__ import annotations

from datetime import datetime, timezone
from zoneinfo import ZoneInfo

from .tracker import InvalidSessionError

DATETIME_FORMATS = ("%Y-%m-%d %H:%M", "%Y-%m-%dT%H:%M", "%d/%m/%Y %H:%M")


def _existing_local(value: datetime, text: str) -> datetime:
    # Wall-clock times skipped by a spring-forward change do not survive a UTC round trip.
    # Repeated autumn times keep fold=0, the first occurrence.
    wall = value.replace(tzinfo=None)
    if value.astimezone(timezone.utc).astimezone(value.tzinfo).replace(tzinfo=None) != wall:
        raise InvalidSessionError(f"`{text}` does not exist in local time (daylight saving change).")
    return value


def parse_local_datetime(text: str, tz: ZoneInfo, now_utc: datetime) -> datetime:
    """Parse ``HH:MM`` (today, local) or a full local date and time."""
    value = " ".join(text.split())
    if not value:
        raise InvalidSessionError("A date and time are required.")

    try:
        clock = datetime.strptime(value, "%H:%M").time()
    except ValueError:
        clock = None

    if clock is not None:
        today = now_utc.astimezone(tz).date()
        return _existing_local(datetime.combine(today, clock, tzinfo=tz), value)

    for fmt in DATETIME_FORMATS:
        try:
            parsed = datetime.strptime(value, fmt)
        except ValueError:
            continue
        return _existing_local(parsed.replace(tzinfo=tz), value)

    raise InvalidSessionError(f"Unrecognized time `{value}`. Use HH:MM or YYYY-MM-DD HH:MM.")
