"""SQLite connection setup and storage errors for pomo."""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path

logger = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS sessions (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    started_at TEXT NOT NULL,
    duration INTEGER NOT NULL CHECK (duration > 0),
    type TEXT NOT NULL CHECK (type IN ('work', 'break'))
);

CREATE INDEX IF NOT EXISTS idx_sessions_started_at ON sessions(started_at);
CREATE INDEX IF NOT EXISTS idx_sessions_type ON sessions(type);
"""


class StorageError(Exception):
    """The session store failed (backend unavailable, constraint violation, ...)."""


class SessionNotFound(StorageError):
    """No session of the requested type exists yet."""


def init_db(conn: sqlite3.Connection) -> None:
    conn.executescript(SCHEMA)
    conn.commit()


def connect(path: str | Path) -> sqlite3.Connection:
    """Open (and create if needed) the session database.

    Pass ":memory:" for a throwaway database.
    """
    try:
        if str(path) != ":memory:":
            Path(path).parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(str(path), check_same_thread=False)
        conn.row_factory = sqlite3.Row
        init_db(conn)
    except (sqlite3.Error, OSError) as e:
        raise StorageError(f"cannot open database {path}: {e}") from e
    logger.debug("opened session database %s", path)
    return conn
