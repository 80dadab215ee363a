from __future__ import annotations

import json
from datetime import date, datetime, timezone
from typing import Any

from .formatting import format_duration
from .models import ActiveSession, WorkSession, elapsed_ms

BACKUP_MONTHS = ("Ene", "Feb", "Mar", "Abr", "May", "Jun", "Jul", "Ago", "Sep", "Oct", "Nov", "Dic")


class BackupFormatError(ValueError):
    """Raised when a backup document cannot be decoded into sessions."""


def parse_iso(value: Any) -> datetime:
    """Parse an ISO-8601 timestamp; values without an offset are taken as UTC."""
    if not isinstance(value, str) or not value:
        raise BackupFormatError(f"Invalid timestamp: {value!r}")

    text = value[:-1] + "+00:00" if value.endswith("Z") else value
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError as exc:
        raise BackupFormatError(f"Invalid timestamp: {value!r}") from exc

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_iso(value: datetime) -> str:
    if value.tzinfo is None:
        raise ValueError("Datetime must be timezone-aware")
    utc = value.astimezone(timezone.utc)
    return utc.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _record_id(record: dict[str, Any]) -> int:
    raw = record.get("id")
    # bool is an int subclass and never a valid id.
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        raise BackupFormatError(f"Invalid session id: {raw!r}")
    if isinstance(raw, float) and not raw.is_integer():
        raise BackupFormatError(f"Invalid session id: {raw!r}")
    return int(raw)


def session_to_record(session: WorkSession) -> dict[str, Any]:
    return {
        "id": session.id,
        "startTime": format_iso(session.start_time),
        "endTime": format_iso(session.end_time),
        "duration": session.duration,
    }


def session_from_record(record: Any) -> WorkSession:
    if not isinstance(record, dict):
        raise BackupFormatError("Session record must be an object")

    start = parse_iso(record.get("startTime"))
    end = parse_iso(record.get("endTime"))
    if elapsed_ms(start, end) <= 0:
        raise BackupFormatError(f"Session {record.get('id')!r} ends before it starts")

    duration = record.get("duration")
    if not isinstance(duration, str) or not duration:
        duration = format_duration(elapsed_ms(start, end))

    return WorkSession(id=_record_id(record), start_time=start, end_time=end, duration=duration)


def active_to_record(active: ActiveSession) -> dict[str, Any]:
    return {"id": active.id, "startTime": format_iso(active.start_time)}


def active_from_record(record: Any) -> ActiveSession:
    if not isinstance(record, dict):
        raise BackupFormatError("Active session must be an object")
    return ActiveSession(id=_record_id(record), start_time=parse_iso(record.get("startTime")))


def dump_document(sessions: list[WorkSession], active: ActiveSession | None) -> str:
    document = {
        "workSessions": [session_to_record(session) for session in sessions],
        "activeSession": active_to_record(active) if active is not None else None,
    }
    return json.dumps(document, indent=2, ensure_ascii=False)


def load_document(text: str | bytes) -> tuple[list[WorkSession], ActiveSession | None]:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise BackupFormatError(f"Backup is not valid JSON: {exc}") from exc

    if not isinstance(data, dict) or not isinstance(data.get("workSessions"), list):
        raise BackupFormatError("Invalid file format: 'workSessions' array not found")

    sessions = [session_from_record(record) for record in data["workSessions"]]
    raw_active = data.get("activeSession")
    active = active_from_record(raw_active) if raw_active else None
    return sessions, active


def backup_filename(today: date) -> str:
    return f"Fichaje-{BACKUP_MONTHS[today.month - 1]}-{today.day}.json"
