"""Elapsed-time arithmetic for a running countdown."""

from __future__ import annotations

from datetime import datetime, timedelta

TICK_INTERVAL = timedelta(seconds=1)


def session_start_time(now: datetime, elapsed: timedelta) -> datetime:
    """When an interval that has run for *elapsed* actually began."""
    if elapsed <= timedelta(0):
        return now
    return now - elapsed


def percent(elapsed: timedelta, duration: timedelta) -> float:
    """Fraction of the countdown that has passed, capped at 1.0."""
    if duration <= timedelta(0):
        return 1.0
    return min(1.0, max(0.0, elapsed / duration))


def remaining(elapsed: timedelta, duration: timedelta) -> timedelta:
    return max(timedelta(0), duration - elapsed)


def format_countdown(d: timedelta) -> str:
    """mm:ss, or h:mm:ss for an hour or more."""
    total = int(d.total_seconds())
    hours, rest = divmod(total, 3600)
    minutes, seconds = divmod(rest, 60)
    if hours:
        return f"{hours}:{minutes:02d}:{seconds:02d}"
    return f"{minutes:02d}:{seconds:02d}"


def format_duration_compact(d: timedelta) -> str:
    """Render a duration as 0m, 45s, 25m, 2h or 1h35m."""
    if d <= timedelta(0):
        return "0m"

    if d < timedelta(minutes=1):
        seconds = int(d.total_seconds())
        return f"{seconds or 1}s"

    total_minutes = int(d.total_seconds() // 60)
    hours, minutes = divmod(total_minutes, 60)
    if hours == 0:
        return f"{total_minutes}m"
    if minutes == 0:
        return f"{hours}h"
    return f"{hours}h{minutes}m"
