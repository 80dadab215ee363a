from __future__ import annotations

import unicodedata
from collections.abc import Sequence
from zoneinfo import ZoneInfo

from .formatting import format_long_date
from .hours import calculate_holiday_hours, calculate_night_hours
from .models import WorkSession

NIGHT_KEYWORDS = ("nocturna", "noche")
HOLIDAY_KEYWORDS = ("festivo", "domingo")


def normalize_text(value: str) -> str:
    """Lowercase and strip accents so ``miércoles`` matches ``miercoles``."""
    decomposed = unicodedata.normalize("NFD", value.lower())
    return "".join(char for char in decomposed if not unicodedata.combining(char))


def _matches_any(keyword: str, words: Sequence[str]) -> bool:
    # Partial typing counts: "noc" already selects night sessions.
    return any(keyword in word for word in words)


def session_matches(session: WorkSession, keywords: Sequence[str], tz: ZoneInfo) -> bool:
    date_text = normalize_text(format_long_date(session.start_time.astimezone(tz).date()))
    has_night = calculate_night_hours(session, tz).duration_ms > 0
    has_holiday = calculate_holiday_hours(session, tz).duration_ms > 0

    for keyword in keywords:
        if keyword in date_text:
            continue
        if has_night and _matches_any(keyword, NIGHT_KEYWORDS):
            continue
        if has_holiday and _matches_any(keyword, HOLIDAY_KEYWORDS):
            continue
        return False
    return True


def filter_sessions(sessions: Sequence[WorkSession], term: str | None, tz: ZoneInfo) -> list[WorkSession]:
    """Keep sessions matching every keyword of ``term``; a blank term keeps all."""
    if not term or not term.strip():
        return list(sessions)

    keywords = [word for word in normalize_text(term).split(" ") if word]
    return [session for session in sessions if session_matches(session, keywords, tz)]
