from __future__ import annotations

import json
import sqlite3
from pathlib import Path

from .backup import active_from_record, active_to_record, session_from_record, session_to_record
from .models import ActiveSession, WorkSession

SESSIONS_KEY = "workSessions"
ACTIVE_SESSION_KEY = "activeSession"


class Database:
    """Thin SQLite key/value store holding the tracker's two state slots."""

    def __init__(self, db_path: str | Path) -> None:
        self._conn = sqlite3.connect(str(db_path))
        self._conn.row_factory = sqlite3.Row
        self._closed = False

    def close(self) -> None:
        if self._closed:
            return
        self._conn.close()
        self._closed = True

    def initialize(self) -> None:
        # meta: workSessions holds a JSON array, activeSession a JSON object when clocked in.
        self._conn.executescript(
            """
            CREATE TABLE IF NOT EXISTS meta (
              key TEXT PRIMARY KEY,
              value TEXT NOT NULL
            );
            """
        )
        self._conn.commit()

    def get_meta(self, key: str) -> str | None:
        row = self._conn.execute("SELECT value FROM meta WHERE key = ?", (key,)).fetchone()
        if row is None:
            return None
        return str(row["value"])

    def set_meta(self, key: str, value: str) -> None:
        self._conn.execute(
            """
            INSERT INTO meta (key, value)
            VALUES (?, ?)
            ON CONFLICT(key)
            DO UPDATE SET value=excluded.value
            """,
            (key, value),
        )
        self._conn.commit()

    def delete_meta(self, key: str) -> None:
        self._conn.execute("DELETE FROM meta WHERE key = ?", (key,))
        self._conn.commit()

    def load_sessions(self) -> list[WorkSession]:
        raw = self.get_meta(SESSIONS_KEY)
        if raw is None:
            return []
        return [session_from_record(record) for record in json.loads(raw)]

    def save_sessions(self, sessions: list[WorkSession]) -> None:
        payload = json.dumps([session_to_record(session) for session in sessions])
        self.set_meta(SESSIONS_KEY, payload)

    def load_active_session(self) -> ActiveSession | None:
        raw = self.get_meta(ACTIVE_SESSION_KEY)
        if raw is None:
            return None
        return active_from_record(json.loads(raw))

    def save_active_session(self, active: ActiveSession | None) -> None:
        if active is None:
            self.delete_meta(ACTIVE_SESSION_KEY)
            return
        self.set_meta(ACTIVE_SESSION_KEY, json.dumps(active_to_record(active)))
