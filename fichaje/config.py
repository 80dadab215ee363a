from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .aggregator import DEFAULT_BREAK_MINUTES

DEFAULT_DATABASE_PATH = "fichaje.db"


@dataclass(frozen=True, slots=True)
class Config:
    discord_token: str
    guild_id: int
    owner_user_id: int
    timezone: ZoneInfo
    database_path: Path
    break_minutes: int


def _required_env(name: str) -> str:
    value = os.getenv(name)
    if not value:
        raise ValueError(f"Missing required environment variable: {name}")
    return value.strip()


def _required_int_env(name: str) -> int:
    value = _required_env(name)
    try:
        parsed = int(value)
    except ValueError as exc:
        raise ValueError(f"Environment variable {name} must be an integer") from exc

    if parsed <= 0:
        raise ValueError(f"Environment variable {name} must be positive")
    return parsed


def _timezone_from_env(name: str) -> ZoneInfo:
    tz_name = _required_env(name)
    try:
        return ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValueError(f"Invalid timezone in {name}: {tz_name}") from exc


def load_config() -> Config:
    break_raw = os.getenv("BREAK_MINUTES", str(DEFAULT_BREAK_MINUTES)).strip()
    try:
        break_minutes = int(break_raw)
    except ValueError as exc:
        raise ValueError("BREAK_MINUTES must be an integer") from exc

    if break_minutes < 0:
        raise ValueError("BREAK_MINUTES must not be negative")

    database_path = os.getenv("DATABASE_PATH", "").strip() or DEFAULT_DATABASE_PATH

    return Config(
        discord_token=_required_env("DISCORD_TOKEN"),
        guild_id=_required_int_env("GUILD_ID"),
        owner_user_id=_required_int_env("OWNER_USER_ID"),
        timezone=_timezone_from_env("TIMEZONE"),
        database_path=Path(database_path),
        break_minutes=break_minutes,
    )
