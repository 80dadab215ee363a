from __future__ import annotations

from datetime import date

from .models import MS_PER_MINUTE, MS_PER_SECOND, WeekData

WEEKDAY_NAMES = ("lunes", "martes", "miércoles", "jueves", "viernes", "sábado", "domingo")
MONTH_NAMES = (
    "enero",
    "febrero",
    "marzo",
    "abril",
    "mayo",
    "junio",
    "julio",
    "agosto",
    "septiembre",
    "octubre",
    "noviembre",
    "diciembre",
)
SHORT_MONTH_NAMES = ("ene", "feb", "mar", "abr", "may", "jun", "jul", "ago", "sept", "oct", "nov", "dic")


def format_duration(duration_ms: int) -> str:
    """Render a duration as HH:MM:SS; hours are not wrapped at 24."""
    total_seconds = max(0, int(duration_ms)) // MS_PER_SECOND
    hours, remainder = divmod(total_seconds, 3600)
    minutes, seconds = divmod(remainder, 60)
    return f"{hours:02}:{minutes:02}:{seconds:02}"


def format_hours_minutes(duration_ms: int) -> str:
    total_minutes = max(0, int(duration_ms)) // MS_PER_MINUTE
    hours, minutes = divmod(total_minutes, 60)
    if hours == 0 and minutes == 0:
        return "0 Min"

    parts = []
    if hours > 0:
        parts.append(f"{hours}H")
    if minutes > 0:
        parts.append(f"{minutes}Min")
    return " ".join(parts)


def format_long_date(value: date) -> str:
    """Spanish long date, e.g. ``lunes, 3 de marzo de 2025``."""
    weekday = WEEKDAY_NAMES[value.weekday()]
    month = MONTH_NAMES[value.month - 1]
    return f"{weekday}, {value.day} de {month} de {value.year}"


def format_day_label(value: date) -> str:
    weekday = WEEKDAY_NAMES[value.weekday()]
    return f"{weekday}, {value.day} de {MONTH_NAMES[value.month - 1]}"


def format_short_date(value: date) -> str:
    return f"{value.day} {SHORT_MONTH_NAMES[value.month - 1]}"


def format_week_range(week: WeekData) -> str:
    return f"{format_short_date(week.start_date.date())} - {format_short_date(week.end_date.date())}"
