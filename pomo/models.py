"""Typed dataclasses for the pomo data model.

Derived statistics expose to_dict() for the JSON surfaces; durations are
serialized as integer milliseconds. Configuration models use from_dict and
accept both snake_case and camelCase keys. Unknown keys are ignored; missing
keys use defaults.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Any


# ── Primitives ────────────────────────────────────────────────


class SessionType(str, Enum):
    WORK = "work"
    BREAK = "break"

    def opposite(self) -> SessionType:
        return SessionType.BREAK if self is SessionType.WORK else SessionType.WORK


_DURATION_RE = re.compile(r"^(?:(\d+)h)?(?:(\d+)m)?(?:(\d+)s)?$")


def parse_duration(value: Any) -> timedelta:
    """Parse a configured duration.

    Integers are minutes; strings may be '25', '25m', '1h30m', '90s'.
    Zero and negative durations are rejected.
    """
    duration = _parse_duration(value)
    if duration <= timedelta(0):
        raise ValueError(f"Duration must be positive: {value!r}")
    return duration


def _parse_duration(value: Any) -> timedelta:
    if isinstance(value, timedelta):
        return value
    if isinstance(value, bool):
        raise ValueError(f"Invalid duration: {value!r}")
    if isinstance(value, (int, float)):
        return timedelta(minutes=value)
    s = str(value).strip().lower().replace(" ", "")
    if s.isdigit():
        return timedelta(minutes=int(s))
    m = _DURATION_RE.match(s)
    if not s or not m or not any(m.groups()):
        raise ValueError(f"Invalid duration: {value!r}")
    hours, minutes, seconds = (int(g) if g else 0 for g in m.groups())
    return timedelta(hours=hours, minutes=minutes, seconds=seconds)


def to_millis(d: timedelta) -> int:
    return int(d / timedelta(milliseconds=1))


# ── Sessions & statistics ─────────────────────────────────────


@dataclass
class Session:
    """One persisted interval."""

    started_at: datetime
    duration: timedelta
    type: SessionType
    id: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "startedAt": self.started_at.isoformat(),
            "durationMs": to_millis(self.duration),
            "type": self.type.value,
        }


@dataclass
class DailyStat:
    date: date
    work_duration: timedelta = field(default_factory=timedelta)

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "workDurationMs": to_millis(self.work_duration),
        }


@dataclass
class AllTimeStats:
    total_sessions: int = 0
    total_work_duration: timedelta = field(default_factory=timedelta)
    total_break_duration: timedelta = field(default_factory=timedelta)

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalSessions": self.total_sessions,
            "totalWorkDurationMs": to_millis(self.total_work_duration),
            "totalBreakDurationMs": to_millis(self.total_break_duration),
        }


@dataclass
class StreakStats:
    current_streak: int = 0
    best_streak: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "currentStreak": self.current_streak,
            "bestStreak": self.best_streak,
        }


# ── Configuration ─────────────────────────────────────────────


@dataclass
class Task:
    title: str
    duration: timedelta

    @classmethod
    def from_dict(cls, d: dict[str, Any], default: Task) -> Task:
        if not d or not isinstance(d, dict):
            return cls(title=default.title, duration=default.duration)
        duration = d.get("duration")
        return cls(
            title=str(d.get("title", default.title)),
            duration=parse_duration(duration) if duration is not None else default.duration,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "duration": f"{int(self.duration.total_seconds() // 60)}m",
        }


DEFAULT_WORK_TASK = Task(title="work session", duration=timedelta(minutes=25))
DEFAULT_BREAK_TASK = Task(title="break session", duration=timedelta(minutes=5))


@dataclass
class Config:
    work: Task = field(default_factory=lambda: Task(DEFAULT_WORK_TASK.title, DEFAULT_WORK_TASK.duration))
    break_: Task = field(default_factory=lambda: Task(DEFAULT_BREAK_TASK.title, DEFAULT_BREAK_TASK.duration))
    ask_to_continue: bool = True
    database: bool = True
    database_path: str | None = None
    hooks: dict[str, list[Any]] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Config:
        if not d or not isinstance(d, dict):
            return cls()
        try:
            work = Task.from_dict(d.get("work") or {}, DEFAULT_WORK_TASK)
        except ValueError as e:
            raise ValueError(f"work.duration: {e}") from e
        try:
            brk = Task.from_dict(d.get("break") or {}, DEFAULT_BREAK_TASK)
        except ValueError as e:
            raise ValueError(f"break.duration: {e}") from e
        hooks = d.get("hooks") or {}
        return cls(
            work=work,
            break_=brk,
            ask_to_continue=bool(d.get("ask_to_continue", d.get("askToContinue", True))),
            database=bool(d.get("database", True)),
            database_path=d.get("database_path", d.get("databasePath")),
            hooks=hooks if isinstance(hooks, dict) else {},
        )

    def task_for(self, task_type: SessionType) -> Task:
        return self.work if task_type is SessionType.WORK else self.break_

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "work": self.work.to_dict(),
            "break": self.break_.to_dict(),
            "ask_to_continue": self.ask_to_continue,
            "database": self.database,
        }
        if self.database_path:
            out["database_path"] = self.database_path
        out["hooks"] = self.hooks
        return out
