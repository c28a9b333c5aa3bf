"""Statistics engine for pomo.

Pure derivations over session-store query results: normalized daily series,
the weekly and heat-map date windows, and consecutive-day streaks.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Any, Callable, Protocol

from pomo.clock import format_duration_compact
from pomo.models import AllTimeStats, DailyStat, StreakStats

logger = logging.getLogger(__name__)

NUMBER_OF_MONTHS = 3

ONE_DAY = timedelta(days=1)


class StatsSource(Protocol):
    def get_all_time_stats(self) -> AllTimeStats: ...

    def get_daily_stats(self, start: date, end: date) -> list[DailyStat]: ...

    def get_distinct_work_days(self) -> list[date]: ...


class StatsError(Exception):
    """A statistics query failed; the message names which one."""


# ── Normalization & windows ───────────────────────────────────


def normalize_stats(start: date, end: date, stats: list[DailyStat]) -> list[DailyStat]:
    """One entry per day from *start* to *end* inclusive, zero-filled."""
    by_day = {s.date: s.work_duration for s in stats}
    normalized = []
    current = start
    while current <= end:
        normalized.append(DailyStat(date=current, work_duration=by_day.get(current, timedelta(0))))
        current += ONE_DAY
    return normalized


def weekly_range(today: date) -> tuple[date, date]:
    """The 7-day window ending today."""
    return today - timedelta(days=6), today


def months_range(today: date, months: int) -> tuple[date, date]:
    """From day 1 of the month *months* before the current one, to today."""
    month_index = today.year * 12 + (today.month - 1) - months
    year, month = divmod(month_index, 12)
    return date(year, month + 1, 1), today


def get_weekly_stats(repo: StatsSource, today: date) -> list[DailyStat]:
    return repo.get_daily_stats(*weekly_range(today))


def get_last_months_stats(repo: StatsSource, today: date, months: int = NUMBER_OF_MONTHS) -> list[DailyStat]:
    return repo.get_daily_stats(*months_range(today, months))


# ── Streaks ───────────────────────────────────────────────────


def calculate_streak(days: list[date], today: date) -> StreakStats:
    """Current and best runs of consecutive work days.

    *days* are the distinct days with at least one work session. The current
    streak may start yesterday so that a day without a session yet does not
    break it.
    """
    ordered = sorted(set(days), reverse=True)
    if not ordered:
        return StreakStats()

    present = set(ordered)
    current = 0
    if today in present:
        day = today
    elif today - ONE_DAY in present:
        day = today - ONE_DAY
    else:
        day = None
    while day is not None and day in present:
        current += 1
        day -= ONE_DAY

    best = run = 1
    for newer, older in zip(ordered, ordered[1:]):
        if newer - older == ONE_DAY:
            run += 1
        else:
            run = 1
        best = max(best, run)

    return StreakStats(current_streak=current, best_streak=best)


def get_streak_stats(repo: StatsSource, today: date) -> StreakStats:
    return calculate_streak(repo.get_distinct_work_days(), today)


# ── Report ────────────────────────────────────────────────────


@dataclass
class StatsReport:
    all_time: AllTimeStats = field(default_factory=AllTimeStats)
    weekly: list[DailyStat] = field(default_factory=list)
    monthly: list[DailyStat] = field(default_factory=list)
    streak: StreakStats = field(default_factory=StreakStats)

    def to_dict(self) -> dict[str, Any]:
        return {
            "allTime": self.all_time.to_dict(),
            "weekly": [s.to_dict() for s in self.weekly],
            "monthly": [s.to_dict() for s in self.monthly],
            "streak": self.streak.to_dict(),
        }


def fetch_stats(
    open_repo: Callable[[], StatsSource],
    today: date,
    months: int = NUMBER_OF_MONTHS,
) -> StatsReport:
    """Run every statistics query, raising StatsError naming the one that failed."""
    try:
        repo = open_repo()
    except StatsError:
        raise
    except Exception as e:
        logger.warning("stats: connect failed: %s", e)
        raise StatsError("failed to connect to the database") from e

    steps: list[tuple[str, Callable[[], Any]]] = [
        ("failed to fetch all-time stats", repo.get_all_time_stats),
        ("failed to fetch weekly stats", lambda: get_weekly_stats(repo, today)),
        ("failed to fetch heatmap stats", lambda: get_last_months_stats(repo, today, months)),
        ("failed to fetch streak stats", lambda: get_streak_stats(repo, today)),
    ]
    results = []
    for message, query in steps:
        try:
            results.append(query())
        except Exception as e:
            logger.warning("stats: %s: %s", message, e)
            raise StatsError(message) from e

    all_time, weekly, monthly, streak = results
    return StatsReport(all_time=all_time, weekly=weekly, monthly=monthly, streak=streak)


def today_work_line(stats: list[DailyStat], today: date) -> str:
    """'today work 1h35m' from a daily series; 0m when today is absent."""
    duration = next((s.work_duration for s in stats if s.date == today), timedelta(0))
    return f"today work {format_duration_compact(duration)}"
