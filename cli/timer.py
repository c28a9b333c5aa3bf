#!/usr/bin/env python3
"""pomo TUI — interactive focus timer powered by Textual."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path

from textual import work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.screen import ModalScreen
from textual.widgets import Footer, Header, Label, ProgressBar, Static

from pomo.clock import TICK_INTERVAL, format_countdown, format_duration_compact, remaining
from pomo.config import load_config, open_configured_repo, write_default_config
from pomo.db import StorageError
from pomo.hooks import run_post_actions
from pomo.models import Config, SessionType
from pomo.recorder import Recorder
from pomo.summary import RunSummary
from pomo.timer import (
    Action,
    Choice,
    Effect,
    Event,
    Exit,
    PersistSession,
    RunPostActions,
    ShowConfirm,
    Tick,
    TimerState,
    new_timer,
    update,
)
from pomo.workspace import data_root, log_path, now_local

logger = logging.getLogger(__name__)


# ── Confirm dialog ─────────────────────────────────────────────


class ConfirmScreen(ModalScreen[Choice]):
    """Asks whether to start the next interval once one completes."""

    BINDINGS = [
        Binding("y,enter", "choose('confirm')", "Continue"),
        Binding("s", "choose('short_session')", "Short session"),
        Binding("n,q,escape", "choose('cancel')", "Cancel"),
    ]

    def __init__(self, finished_title: str, next_title: str) -> None:
        super().__init__()
        self._finished_title = finished_title
        self._next_title = next_title

    def compose(self) -> ComposeResult:
        yield Vertical(
            Label(f"{self._finished_title} finished.", classes="section-title"),
            Label(f"Start {self._next_title}?"),
            Static(id="idle-time"),
            Label("[y] continue   [s] short session   [n] cancel", classes="muted"),
            id="confirm-dialog",
        )

    def on_mount(self) -> None:
        self._refresh_idle()
        # one tick per second keeps the idle time current
        self.set_interval(1.0, self._refresh_idle)

    def _refresh_idle(self) -> None:
        idle = self.app.timer.idle_time(now_local())
        self.query_one("#idle-time", Static).update(f"idle {format_countdown(idle)}")

    def action_choose(self, choice: str) -> None:
        self.dismiss(Choice(choice))


# ── Timer app ──────────────────────────────────────────────────


class PomoApp(App[RunSummary]):
    """Runs one timer: every tick, key press and dialog choice goes through update()."""

    CSS = """
    #timer-pane { align: center middle; height: 100%; }
    #task-title { text-style: bold; }
    #confirm-dialog { width: 50; height: auto; border: round $accent; padding: 1 2; }
    ConfirmScreen { align: center middle; }
    .muted { color: $text-muted; }
    """

    BINDINGS = [
        Binding("space", "press('pause')", "Pause"),
        Binding("r", "press('reset')", "Reset"),
        Binding("s", "press('skip')", "Skip"),
        Binding("up,plus", "press('increase')", "+1m"),
        Binding("q", "press('quit')", "Quit"),
        Binding("ctrl+q", "quit", "Quit", show=False, priority=True),
    ]

    def __init__(
        self,
        config: Config,
        recorder: Recorder,
        task_type: SessionType = SessionType.WORK,
        root: Path | None = None,
    ) -> None:
        super().__init__()
        self.config = config
        self.recorder = recorder
        self.root = root
        self.timer = new_timer(config, task_type)

    def compose(self) -> ComposeResult:
        yield Header()
        yield Vertical(
            Label(id="task-title"),
            Static(id="countdown"),
            ProgressBar(total=100, show_eta=False, id="progress"),
            Static(id="status", classes="muted"),
            id="timer-pane",
        )
        yield Footer()

    def on_mount(self) -> None:
        self.set_interval(TICK_INTERVAL.total_seconds(), self._on_tick)
        self._refresh_view()

    # ── Event dispatch ─────────────────────────────────────────

    def _on_tick(self) -> None:
        self._dispatch(Tick(TICK_INTERVAL))

    def action_press(self, action: str) -> None:
        self._dispatch(Action(action))

    def action_quit(self) -> None:
        """ctrl+q: quit through the timer so the running interval is recorded."""
        if self.timer.state is TimerState.SHOWING_CONFIRM and isinstance(self.screen, ConfirmScreen):
            self.screen.dismiss(Choice.CANCEL)
        elif self.timer.state is TimerState.QUITTING:
            self.exit(self.timer.summary)
        else:
            self._dispatch(Action.QUIT)

    def _on_choice(self, choice: Choice | None) -> None:
        self._dispatch(choice or Choice.CANCEL)

    def _dispatch(self, event: Event) -> None:
        self.timer, effects = update(self.timer, event, now_local())
        self._refresh_view()
        self._run_effects(effects)

    def _run_effects(self, effects: list[Effect]) -> None:
        for i, effect in enumerate(effects):
            if isinstance(effect, PersistSession):
                self.recorder.persist(effect)
            elif isinstance(effect, RunPostActions):
                # the rest waits until the hooks have finished
                self._post_actions(effect, effects[i + 1:])
                return
            elif isinstance(effect, ShowConfirm):
                self.push_screen(
                    ConfirmScreen(self.timer.task.title, self.config.task_for(self.timer.task_type.opposite()).title),
                    callback=self._on_choice,
                )
            elif isinstance(effect, Exit):
                self.exit(self.timer.summary)

    @work(thread=True)
    def _post_actions(self, effect: RunPostActions, rest: list[Effect]) -> None:
        run_post_actions(effect.task_type, effect.task, self.config, self.root)
        self.call_from_thread(self._run_effects, rest)

    # ── View ───────────────────────────────────────────────────

    def _refresh_view(self) -> None:
        timer = self.timer
        self.title = "pomo"
        self.sub_title = timer.state.value.replace("_", " ").upper()
        self.query_one("#task-title", Label).update(timer.task.title)
        self.query_one("#countdown", Static).update(
            format_countdown(remaining(timer.elapsed, timer.duration))
        )
        self.query_one("#progress", ProgressBar).update(progress=round(timer.percent * 100, 1))

        work_summary = timer.summary.get(SessionType.WORK)
        status = f"work {work_summary.sessions} ({format_duration_compact(work_summary.duration)})"
        if timer.state is TimerState.PAUSED:
            status = "paused  ·  " + status
        self.query_one("#status", Static).update(status)


# ── Entry point ────────────────────────────────────────────────


def _setup_logging(root: Path) -> None:
    root.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(
        filename=str(log_path(root)),
        level=os.environ.get("POMO_LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="pomo", description="Terminal focus timer.")
    parser.add_argument(
        "command",
        nargs="?",
        default="work",
        choices=["work", "break", "stats", "init"],
        help="start a work or break interval, show statistics, or write a default config",
    )
    return parser


def run_timer(config: Config, task_type: SessionType, root: Path) -> RunSummary | None:
    repo = None
    try:
        repo = open_configured_repo(config, root)
    except StorageError as e:
        logger.warning("session database unavailable, statistics will not be saved: %s", e)

    app = PomoApp(config, Recorder(repo), task_type, root)
    return app.run()


def main(argv: list[str] | None = None) -> None:
    args = _build_parser().parse_args(argv)
    root = data_root()
    _setup_logging(root)

    if args.command == "init":
        path = write_default_config(root)
        print(f"Wrote {path}" if path else "Config already exists.")
        return

    try:
        config = load_config(root)
    except ValueError as e:
        print(f"Invalid config: {e}")
        sys.exit(1)

    if args.command == "stats":
        from cli.stats import StatsApp

        StatsApp(config, root).run()
        return

    summary = run_timer(config, SessionType(args.command), root)
    if summary is not None and not summary.is_empty():
        print(summary.report())


if __name__ == "__main__":
    main()
