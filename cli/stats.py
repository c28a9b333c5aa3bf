"""pomo statistics view — all-time totals, streaks and recent days."""

from __future__ import annotations

from datetime import date
from pathlib import Path

from textual import work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import VerticalScroll
from textual.widgets import Footer, Header, Label, Static

from pomo.clock import format_duration_compact
from pomo.config import open_stats_repo
from pomo.models import AllTimeStats, Config, DailyStat, StreakStats
from pomo.stats import StatsError, StatsReport, fetch_stats, today_work_line
from pomo.workspace import today_local

BAR_WIDTH = 30


def duration_ratio_line(stats: AllTimeStats, width: int = BAR_WIDTH) -> str:
    """'work 10h ████████░░ break 2h': share of work vs. break time."""
    total = stats.total_work_duration + stats.total_break_duration
    filled = round(width * (stats.total_work_duration / total)) if total else 0
    bar = "█" * filled + "░" * (width - filled)
    return (
        f"work {format_duration_compact(stats.total_work_duration)} {bar} "
        f"break {format_duration_compact(stats.total_break_duration)}"
    )


def streak_line(streak: StreakStats) -> str:
    return f"current streak {streak.current_streak}d   best streak {streak.best_streak}d"


def weekly_lines(stats: list[DailyStat]) -> list[str]:
    longest = max((s.work_duration for s in stats), default=None)
    lines = []
    for s in stats:
        filled = round(BAR_WIDTH * (s.work_duration / longest)) if longest else 0
        lines.append(f"{s.date.strftime('%a %m-%d')}  {'█' * filled:<{BAR_WIDTH}}  {format_duration_compact(s.work_duration)}")
    return lines


def active_days_line(stats: list[DailyStat]) -> str:
    active = sum(1 for s in stats if s.work_duration)
    start = stats[0].date.isoformat() if stats else "-"
    return f"{active} of {len(stats)} days active since {start}"


def render_report(report: StatsReport, today: date) -> str:
    lines = [
        f"{report.all_time.total_sessions} sessions",
        duration_ratio_line(report.all_time),
        "",
        today_work_line(report.weekly, today),
        streak_line(report.streak),
        "",
        *weekly_lines(report.weekly),
        "",
        active_days_line(report.monthly),
    ]
    return "\n".join(lines)


class StatsApp(App[None]):
    CSS = """
    #stats-pane { align: center middle; }
    #stats-error { color: $error; }
    """

    BINDINGS = [Binding("q,escape", "quit", "Quit")]

    def __init__(self, config: Config, root: Path | None = None) -> None:
        super().__init__()
        self.config = config
        self.root = root

    def compose(self) -> ComposeResult:
        yield Header()
        yield VerticalScroll(
            Label("Pomodoro statistics", classes="section-title"),
            Static("loading…", id="stats-body"),
            Static(id="stats-error"),
            id="stats-pane",
        )
        yield Footer()

    def on_mount(self) -> None:
        self.title = "pomo stats"
        self._load_stats()

    @work(thread=True)
    def _load_stats(self) -> None:
        today = today_local()
        opened = []

        def open_and_track():
            repo = open_stats_repo(self.config, self.root)
            opened.append(repo)
            return repo

        try:
            report = fetch_stats(open_and_track, today)
        except StatsError as e:
            self.call_from_thread(self._show_error, str(e))
            return
        finally:
            for repo in opened:
                repo.close()
        self.call_from_thread(self._show_report, render_report(report, today))

    def _show_report(self, text: str) -> None:
        self.query_one("#stats-body", Static).update(text)

    def _show_error(self, message: str) -> None:
        self.query_one("#stats-body", Static).update("An error occurred while fetching statistics.")
        self.query_one("#stats-error", Static).update(message)
