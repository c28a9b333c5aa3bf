"""In-memory summary of the intervals recorded during one run."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import timedelta

from pomo.clock import format_duration_compact
from pomo.models import SessionType


@dataclass(frozen=True)
class TypeSummary:
    sessions: int = 0
    duration: timedelta = field(default_factory=timedelta)


@dataclass(frozen=True)
class RunSummary:
    """Per-type counters for this process; never persisted.

    Updates return a new summary.
    """

    work: TypeSummary = field(default_factory=TypeSummary)
    break_: TypeSummary = field(default_factory=TypeSummary)

    def get(self, task_type: SessionType) -> TypeSummary:
        return self.work if task_type is SessionType.WORK else self.break_

    def _with(self, task_type: SessionType, value: TypeSummary) -> RunSummary:
        if task_type is SessionType.WORK:
            return replace(self, work=value)
        return replace(self, break_=value)

    def add_session(self, task_type: SessionType, elapsed: timedelta) -> RunSummary:
        """Count a full interval and its elapsed time."""
        cur = self.get(task_type)
        return self._with(task_type, TypeSummary(cur.sessions + 1, cur.duration + elapsed))

    def add_duration(self, task_type: SessionType, elapsed: timedelta) -> RunSummary:
        """Add elapsed time without counting a new interval (short sessions)."""
        cur = self.get(task_type)
        return self._with(task_type, TypeSummary(cur.sessions, cur.duration + elapsed))

    def is_empty(self) -> bool:
        return self.work == TypeSummary() and self.break_ == TypeSummary()

    def report(self) -> str:
        """Multi-line end-of-run report; empty string when nothing was recorded."""
        if self.is_empty():
            return ""
        lines = ["Session summary"]
        for task_type in SessionType:
            s = self.get(task_type)
            noun = "session" if s.sessions == 1 else "sessions"
            lines.append(
                f"  {task_type.value:<5}  {s.sessions} {noun}  {format_duration_compact(s.duration)}"
            )
        return "\n".join(lines)
