"""Tests for pomo/stats.py — normalization, date windows, streaks, fetch errors."""

from datetime import date, timedelta

import pytest

from conftest import local
from pomo.models import DailyStat, SessionType
from pomo.stats import (
    StatsError,
    calculate_streak,
    fetch_stats,
    months_range,
    normalize_stats,
    today_work_line,
    weekly_range,
)


TODAY = date(2026, 2, 8)


def test_streak_with_gap():
    days = [date(2026, 2, 8), date(2026, 2, 7), date(2026, 2, 5)]
    streak = calculate_streak(days, TODAY)
    assert streak.current_streak == 2
    assert streak.best_streak == 2


def test_streak_no_consecutive_days():
    streak = calculate_streak([date(2026, 2, 8), date(2026, 2, 6)], TODAY)
    assert streak.current_streak == 1
    assert streak.best_streak == 1


def test_streak_empty():
    streak = calculate_streak([], TODAY)
    assert (streak.current_streak, streak.best_streak) == (0, 0)


def test_streak_counts_from_yesterday():
    streak = calculate_streak([date(2026, 2, 7), date(2026, 2, 6)], TODAY)
    assert streak.current_streak == 2


def test_streak_single_old_day():
    streak = calculate_streak([date(2026, 1, 30)], TODAY)
    assert streak.current_streak == 0
    assert streak.best_streak == 1


@pytest.mark.parametrize("day", [TODAY, TODAY - timedelta(days=1)])
def test_streak_single_recent_day(day):
    streak = calculate_streak([day], TODAY)
    assert (streak.current_streak, streak.best_streak) == (1, 1)


def test_best_streak_in_the_past():
    days = [date(2026, 2, 8)] + [date(2026, 1, d) for d in (20, 19, 18, 17)]
    streak = calculate_streak(days, TODAY)
    assert streak.current_streak == 1
    assert streak.best_streak == 4


def test_streak_stops_two_days_ago():
    streak = calculate_streak([date(2026, 2, 6), date(2026, 2, 5)], TODAY)
    assert streak.current_streak == 0
    assert streak.best_streak == 2


def test_normalize_fills_gaps():
    raw = [DailyStat(date(2026, 2, 3), timedelta(minutes=40))]
    stats = normalize_stats(date(2026, 2, 1), date(2026, 2, 7), raw)
    assert len(stats) == (date(2026, 2, 7) - date(2026, 2, 1)).days + 1
    assert [s.date for s in stats] == sorted(s.date for s in stats)
    assert stats[2].work_duration == timedelta(minutes=40)
    assert sum((s.work_duration for s in stats), timedelta()) == timedelta(minutes=40)


def test_weekly_range():
    assert weekly_range(TODAY) == (date(2026, 2, 2), TODAY)


def test_months_range():
    assert months_range(date(2026, 5, 17), 3) == (date(2026, 2, 1), date(2026, 5, 17))
    assert months_range(date(2026, 2, 8), 3) == (date(2025, 11, 1), date(2026, 2, 8))
    assert months_range(date(2026, 2, 8), 0) == (date(2026, 2, 1), date(2026, 2, 8))


def test_fetch_stats(repo):
    repo.create_session(local(2026, 2, 8, 9), timedelta(minutes=95), SessionType.WORK)
    repo.create_session(local(2026, 2, 7, 9), timedelta(minutes=40), SessionType.WORK)
    repo.create_session(local(2026, 2, 7, 10), timedelta(minutes=5), SessionType.BREAK)

    report = fetch_stats(lambda: repo, TODAY)
    assert report.all_time.total_sessions == 3
    assert len(report.weekly) == 7
    assert report.weekly[-1].work_duration == timedelta(minutes=95)
    assert report.monthly[0].date == date(2025, 11, 1)
    assert report.monthly[-1].date == TODAY
    assert report.streak.current_streak == 2
    assert report.to_dict()["allTime"]["totalWorkDurationMs"] == 135 * 60 * 1000


def test_fetch_stats_connect_failure():
    def broken():
        raise OSError("no such file")

    with pytest.raises(StatsError, match="failed to connect to the database"):
        fetch_stats(broken, TODAY)


class _FailingRepo:
    def __init__(self, repo, failing: str):
        self._repo = repo
        self._failing = failing

    def __getattr__(self, name):
        if name == self._failing:
            def fail(*args, **kwargs):
                raise RuntimeError("boom")
            return fail
        return getattr(self._repo, name)


@pytest.mark.parametrize(
    "failing, message",
    [
        ("get_all_time_stats", "failed to fetch all-time stats"),
        ("get_distinct_work_days", "failed to fetch streak stats"),
    ],
)
def test_fetch_stats_names_failed_query(repo, failing, message):
    with pytest.raises(StatsError, match=message):
        fetch_stats(lambda: _FailingRepo(repo, failing), TODAY)


def test_fetch_stats_weekly_failure_comes_first(repo):
    with pytest.raises(StatsError, match="failed to fetch weekly stats"):
        fetch_stats(lambda: _FailingRepo(repo, "get_daily_stats"), TODAY)


def test_today_work_line():
    stats = [
        DailyStat(date(2026, 2, 7), timedelta(minutes=40)),
        DailyStat(date(2026, 2, 8), timedelta(minutes=95)),
    ]
    assert today_work_line(stats, TODAY) == "today work 1h35m"


def test_today_work_line_no_today_data():
    stats = [DailyStat(date(2026, 2, 7), timedelta(minutes=40))]
    assert today_work_line(stats, TODAY) == "today work 0m"


def test_fetch_stats_heatmap_failure(repo):
    calls = {"n": 0}
    real = repo.get_daily_stats

    def second_call_fails(start, end):
        calls["n"] += 1
        if calls["n"] == 2:
            raise RuntimeError("boom")
        return real(start, end)

    repo.get_daily_stats = second_call_fails
    with pytest.raises(StatsError, match="failed to fetch heatmap stats"):
        fetch_stats(lambda: repo, TODAY)


def test_fetch_stats_keeps_opener_message():
    def disabled():
        raise StatsError("statistics are disabled (database: false)")

    with pytest.raises(StatsError, match="statistics are disabled"):
        fetch_stats(disabled, TODAY)
