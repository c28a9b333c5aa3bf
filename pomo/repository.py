"""Session store: durable log of completed intervals and its aggregate queries."""

from __future__ import annotations

import sqlite3
from datetime import date, datetime, timedelta
from pathlib import Path

from pomo.db import SessionNotFound, StorageError, connect
from pomo.models import AllTimeStats, DailyStat, Session, SessionType, to_millis
from pomo.stats import normalize_stats

DATE_FORMAT = "%Y-%m-%d"


class SessionRepo:
    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn

    def close(self) -> None:
        self.conn.close()

    def create_session(self, started_at: datetime, duration: timedelta, session_type: SessionType) -> None:
        """Insert a new session record."""
        if duration <= timedelta(0):
            raise ValueError(f"session duration must be positive, got {duration}")
        try:
            with self.conn:
                self.conn.execute(
                    "INSERT INTO sessions (started_at, duration, type) VALUES (?, ?, ?)",
                    (
                        started_at.astimezone().isoformat(timespec="milliseconds"),
                        to_millis(duration),
                        SessionType(session_type).value,
                    ),
                )
        except sqlite3.Error as e:
            raise StorageError(f"failed to create session: {e}") from e

    def extend_latest_session(self, duration: timedelta, session_type: SessionType) -> None:
        """Add *duration* to the most recently inserted session of the same type.

        Raises SessionNotFound when no session of that type exists.
        """
        try:
            with self.conn:
                cur = self.conn.execute(
                    """
                    UPDATE sessions
                    SET duration = duration + ?
                    WHERE id = (
                        SELECT id
                        FROM sessions
                        WHERE type = ?
                        ORDER BY id DESC
                        LIMIT 1
                    )
                    """,
                    (to_millis(duration), SessionType(session_type).value),
                )
        except sqlite3.Error as e:
            raise StorageError(f"failed to extend latest session: {e}") from e

        if cur.rowcount == 0:
            raise SessionNotFound(f"no {SessionType(session_type).value} session to extend")

    def get_all_time_stats(self) -> AllTimeStats:
        """Aggregate statistics across all sessions."""
        try:
            row = self.conn.execute(
                """
                SELECT
                    COUNT(*) AS total_sessions,
                    COALESCE(SUM(CASE WHEN type = 'work' THEN duration ELSE 0 END), 0) AS total_work,
                    COALESCE(SUM(CASE WHEN type = 'break' THEN duration ELSE 0 END), 0) AS total_break
                FROM sessions
                """
            ).fetchone()
        except sqlite3.Error as e:
            raise StorageError(f"failed to fetch all-time stats: {e}") from e

        return AllTimeStats(
            total_sessions=row["total_sessions"],
            total_work_duration=timedelta(milliseconds=row["total_work"]),
            total_break_duration=timedelta(milliseconds=row["total_break"]),
        )

    def get_daily_stats(self, start: date, end: date) -> list[DailyStat]:
        """Daily work totals between *start* and *end*, inclusive.

        Days are local calendar days of started_at; the result has one entry
        per day in the range.
        """
        try:
            rows = self.conn.execute(
                """
                SELECT
                    date(started_at, 'localtime') AS day,
                    COALESCE(SUM(CASE WHEN type = 'work' THEN duration ELSE 0 END), 0) AS work_duration
                FROM sessions
                WHERE date(started_at, 'localtime') BETWEEN ? AND ?
                GROUP BY day
                ORDER BY day
                """,
                (start.strftime(DATE_FORMAT), end.strftime(DATE_FORMAT)),
            ).fetchall()
        except sqlite3.Error as e:
            raise StorageError(f"failed to fetch daily stats: {e}") from e

        raw = [
            DailyStat(date=date.fromisoformat(r["day"]), work_duration=timedelta(milliseconds=r["work_duration"]))
            for r in rows
        ]
        return normalize_stats(start, end, raw)

    def get_distinct_work_days(self) -> list[date]:
        """Local calendar days with at least one work session, newest first."""
        try:
            rows = self.conn.execute(
                """
                SELECT DISTINCT date(started_at, 'localtime') AS day
                FROM sessions
                WHERE type = 'work'
                ORDER BY day DESC
                """
            ).fetchall()
        except sqlite3.Error as e:
            raise StorageError(f"failed to fetch work days: {e}") from e
        return [date.fromisoformat(r["day"]) for r in rows]

    def list_sessions(self, limit: int = 50) -> list[Session]:
        """Most recently inserted sessions, newest first."""
        try:
            rows = self.conn.execute(
                "SELECT id, started_at, duration, type FROM sessions ORDER BY id DESC LIMIT ?",
                (limit,),
            ).fetchall()
        except sqlite3.Error as e:
            raise StorageError(f"failed to list sessions: {e}") from e
        return [
            Session(
                id=r["id"],
                started_at=datetime.fromisoformat(r["started_at"]),
                duration=timedelta(milliseconds=r["duration"]),
                type=SessionType(r["type"]),
            )
            for r in rows
        ]


def open_repo(path: str | Path) -> SessionRepo:
    """Connect to the database at *path* and wrap it in a SessionRepo."""
    return SessionRepo(connect(path))
