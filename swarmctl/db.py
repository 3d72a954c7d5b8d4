from __future__ import annotations

import os
import sqlite3
from dataclasses import dataclass
from datetime import datetime, timezone

from .settings import settings


def utc_now() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def _resolve_db_path() -> str:
    """Return a file path usable by sqlite.

    A bind-mounted path that did not exist on the host shows up as a
    directory inside the container; in that case the DB file goes inside it.
    """

    p = os.path.abspath(settings.db_path)

    if os.path.isdir(p):
        p = os.path.join(p, "swarmctl.db")

    parent = os.path.dirname(p)
    if parent and not os.path.exists(parent):
        os.makedirs(parent, exist_ok=True)

    return p


def connect() -> sqlite3.Connection:
    conn = sqlite3.connect(_resolve_db_path(), check_same_thread=False)
    conn.row_factory = sqlite3.Row
    _create_schema(conn)
    return conn


def _create_schema(conn: sqlite3.Connection) -> None:
    conn.executescript(
        """
        CREATE TABLE IF NOT EXISTS events (
          id INTEGER PRIMARY KEY AUTOINCREMENT,
          ts TEXT NOT NULL,
          level TEXT NOT NULL,
          service_name TEXT,
          message TEXT NOT NULL
        );

        CREATE INDEX IF NOT EXISTS idx_events_ts ON events(ts);
        """
    )


def init_db() -> None:
    """Create tables if they do not exist."""
    with connect():
        pass


def log_event(level: str, message: str, service_name: str | None = None) -> None:
    with connect() as conn:
        conn.execute(
            "INSERT INTO events (ts, level, service_name, message) VALUES (?, ?, ?, ?)",
            (utc_now(), level.upper(), service_name, message),
        )


@dataclass(frozen=True)
class EventRow:
    id: int
    ts: str
    level: str
    service_name: str | None
    message: str


def list_events(limit: int = 50, service_name: str | None = None) -> list[EventRow]:
    limit = max(1, min(1000, int(limit)))
    with connect() as conn:
        if service_name:
            rows = conn.execute(
                "SELECT * FROM events WHERE service_name = ? ORDER BY id DESC LIMIT ?",
                (service_name, limit),
            ).fetchall()
        else:
            rows = conn.execute("SELECT * FROM events ORDER BY id DESC LIMIT ?", (limit,)).fetchall()
    return [EventRow(**dict(r)) for r in rows]
