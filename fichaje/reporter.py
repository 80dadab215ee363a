from __future__ import annotations

from datetime import datetime

from .formatting import (
    format_day_label,
    format_duration,
    format_hours_minutes,
    format_long_date,
    format_week_range,
)
from .models import GlobalSummary, WeekData, WorkSession
from .tracker import WorkTracker, utc_now

# Discord rejects messages above 2000 characters.
MESSAGE_LIMIT = 2000


def _truncate(content: str) -> str:
    if len(content) <= MESSAGE_LIMIT:
        return content
    return content[: MESSAGE_LIMIT - 2] + "\n…"


class Reporter:
    def __init__(self, tracker: WorkTracker) -> None:
        self.tracker = tracker

    def describe_session(self, session: WorkSession) -> str:
        tz = self.tracker.tz
        start = session.start_time.astimezone(tz)
        end = session.end_time.astimezone(tz)
        end_label = end.strftime("%H:%M")
        if end.date() != start.date():
            end_label = f"{end.strftime('%H:%M')} ({format_day_label(end.date())})"
        return (
            f"`{session.id}` {format_day_label(start.date())}: "
            f"{start.strftime('%H:%M')} - {end_label} · `{format_duration(session.duration_ms)}`"
        )

    def build_summary_content(self, summary: GlobalSummary, weeks: list[WeekData]) -> str:
        lines = [
            "**Overall summary**",
            f"Gross total: `{format_hours_minutes(summary.total_duration)}`",
            f"Net total (-{self.tracker.break_minutes} min/day): "
            f"`{format_hours_minutes(summary.total_duration_with_breaks)}`",
            f"Night hours: `{format_hours_minutes(summary.night_duration)}`",
            f"Sunday hours: `{format_hours_minutes(summary.holiday_duration)}`",
        ]
        if summary.nocturnal_dates:
            lines.append("Night shifts on: " + ", ".join(format_day_label(d) for d in summary.nocturnal_dates))
        if summary.holiday_dates:
            lines.append("Sundays worked: " + ", ".join(format_day_label(d) for d in summary.holiday_dates))

        if weeks:
            lines.append("")
            lines.append("**Weeks** (gross / net)")
            lines.extend(
                f"- {format_week_range(week)}: `{format_hours_minutes(week.total_duration)}` / "
                f"`{format_hours_minutes(week.total_duration_with_breaks)}`"
                for week in weeks
            )
        return "\n".join(lines)

    def build_history_content(self, term: str | None = None) -> str:
        summary, weeks = self.tracker.history(term)

        if not weeks:
            if term and term.strip():
                return f'No results for "{term.strip()}". Try another search or clear the filter.'
            return "No sessions recorded yet. Use /clock-in to start tracking your day."

        sections = [self.build_summary_content(summary, weeks)]
        for week in weeks:
            header = f"**Week {format_week_range(week)}** · `{format_hours_minutes(week.total_duration)}`"
            body = "\n".join(f"- {self.describe_session(session)}" for session in week.sessions)
            sections.append(f"{header}\n{body}")
        return _truncate("\n\n".join(sections))

    def build_status_content(self, now_utc: datetime | None = None) -> str:
        now = now_utc or utc_now()
        tz = self.tracker.tz
        now_local = now.astimezone(tz)
        lines = [f"Now: {format_long_date(now_local.date())}, {now_local.strftime('%H:%M:%S')}"]

        active = self.tracker.active_session
        if active is None:
            lines.append("Status: clocked out")
        else:
            started = active.start_time.astimezone(tz)
            lines.append(f"Status: clocked in since {started.strftime('%Y-%m-%d %H:%M')}")
            lines.append(f"Elapsed: `{format_duration(self.tracker.elapsed_ms(now))}`")

        lines.append(f"Stored sessions: {len(self.tracker.sessions)}")
        return "\n".join(lines)
