from __future__ import annotations

import logging
from datetime import datetime, timezone
from zoneinfo import ZoneInfo

from .aggregator import DEFAULT_BREAK_MINUTES, build_global_summary, build_weekly_data
from .backup import dump_document, load_document
from .db import Database
from .formatting import format_duration
from .hours import to_epoch_ms
from .models import ActiveSession, GlobalSummary, WeekData, WorkSession, elapsed_ms
from .search import filter_sessions


class TrackerError(Exception):
    """Base class for session lifecycle failures reported back to the user."""


class SessionStateError(TrackerError):
    pass


class SessionNotFoundError(TrackerError):
    pass


class InvalidSessionError(TrackerError):
    pass


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _require_aware(value: datetime) -> None:
    if value.tzinfo is None:
        raise InvalidSessionError("Datetime must be timezone-aware")


def _start_instant(session: WorkSession) -> datetime:
    return session.start_time.astimezone(timezone.utc)


def _ensure_ordered(start: datetime, end: datetime) -> None:
    if elapsed_ms(start, end) <= 0:
        raise InvalidSessionError("The clock-out time must be after the clock-in time.")


class WorkTracker:
    def __init__(
        self,
        db: Database,
        tz: ZoneInfo,
        break_minutes: int = DEFAULT_BREAK_MINUTES,
        logger: logging.Logger | None = None,
    ) -> None:
        self.db = db
        self.tz = tz
        self.break_minutes = break_minutes
        self.logger = logger or logging.getLogger(__name__)

        self.sessions: list[WorkSession] = db.load_sessions()
        self.active_session: ActiveSession | None = db.load_active_session()
        self.logger.debug(
            "Loaded %d sessions (active=%s)", len(self.sessions), self.active_session is not None
        )

    def _save_sessions(self) -> None:
        self.sessions.sort(key=_start_instant, reverse=True)
        self.db.save_sessions(self.sessions)

    def _new_id(self, now: datetime) -> int:
        candidate = to_epoch_ms(now)
        taken = {session.id for session in self.sessions}
        while candidate in taken:
            candidate += 1
        return candidate

    def _find(self, session_id: int) -> int:
        for index, session in enumerate(self.sessions):
            if session.id == session_id:
                return index
        raise SessionNotFoundError(f"No session with id {session_id}.")

    def list_sessions(self) -> list[WorkSession]:
        return sorted(self.sessions, key=_start_instant, reverse=True)

    def clock_in(self, started_at: datetime | None = None) -> ActiveSession:
        if self.active_session is not None:
            raise SessionStateError("A session is already active.")

        now = utc_now()
        started = started_at or now
        _require_aware(started)

        self.active_session = ActiveSession(id=self._new_id(now), start_time=started)
        self.db.save_active_session(self.active_session)
        self.logger.info("Clocked in: id=%s start=%s", self.active_session.id, started.isoformat())
        return self.active_session

    def clock_out(self, ended_at: datetime | None = None) -> WorkSession:
        active = self.active_session
        if active is None:
            raise SessionStateError("No active session to close.")

        ended = ended_at or utc_now()
        _require_aware(ended)
        _ensure_ordered(active.start_time, ended)

        session = WorkSession(
            id=active.id,
            start_time=active.start_time,
            end_time=ended,
            duration=format_duration(elapsed_ms(active.start_time, ended)),
        )
        self.sessions.append(session)
        self._save_sessions()

        self.active_session = None
        self.db.save_active_session(None)
        self.logger.info("Clocked out: id=%s duration=%s", session.id, session.duration)
        return session

    def edit_session(self, session_id: int, start: datetime, end: datetime) -> WorkSession:
        index = self._find(session_id)
        _require_aware(start)
        _require_aware(end)
        _ensure_ordered(start, end)

        updated = WorkSession(
            id=session_id,
            start_time=start,
            end_time=end,
            duration=format_duration(elapsed_ms(start, end)),
        )
        self.sessions[index] = updated
        self._save_sessions()
        self.logger.info("Edited session %s: %s -> %s", session_id, start.isoformat(), end.isoformat())
        return updated

    def delete_session(self, session_id: int) -> WorkSession:
        removed = self.sessions.pop(self._find(session_id))
        self._save_sessions()
        self.logger.info("Deleted session %s", session_id)
        return removed

    def elapsed_ms(self, now: datetime | None = None) -> int:
        if self.active_session is None:
            return 0
        current = now or utc_now()
        return max(0, elapsed_ms(self.active_session.start_time, current))

    def history(self, term: str | None = None) -> tuple[GlobalSummary, list[WeekData]]:
        filtered = filter_sessions(self.list_sessions(), term, self.tz)
        summary = build_global_summary(filtered, self.tz, self.break_minutes)
        weeks = build_weekly_data(filtered, self.tz, self.break_minutes)
        return summary, weeks

    def export_backup(self) -> str:
        return dump_document(self.list_sessions(), self.active_session)

    def import_backup(self, text: str | bytes) -> int:
        """Replace every stored session with the backup's content."""
        sessions, active = load_document(text)

        self.sessions = sessions
        self._save_sessions()
        self.active_session = active
        self.db.save_active_session(active)
        self.logger.info("Imported %d sessions (active=%s)", len(sessions), active is not None)
        return len(sessions)
