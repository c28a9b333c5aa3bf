"""Session lifecycle state machine for pomo.

The timer is an immutable value. Every event handler takes the current
Timer (plus the current time where it matters) and returns the next Timer
together with a list of effects for the caller to carry out, in order:

- PersistSession: write the finished interval to the session store
- RunPostActions: run the configured post-completion hooks and wait
- ShowConfirm: present the continue / short session / cancel prompt
- Exit: end the program

Nothing here touches a clock, a terminal or a database.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta
from enum import Enum
from typing import Union

from pomo.clock import TICK_INTERVAL, percent, session_start_time
from pomo.models import Config, SessionType, Task
from pomo.summary import RunSummary

logger = logging.getLogger(__name__)

MIN_RECORDED_ELAPSED = timedelta(seconds=1)
SHORT_SESSION_DURATION = timedelta(minutes=2)
INCREASE_STEP = timedelta(minutes=1)


class TimerState(str, Enum):
    RUNNING = "running"
    PAUSED = "paused"
    SHOWING_CONFIRM = "showing_confirm"
    QUITTING = "quitting"


# ── Events ────────────────────────────────────────────────────


class Action(str, Enum):
    PAUSE = "pause"
    RESET = "reset"
    SKIP = "skip"
    QUIT = "quit"
    INCREASE = "increase"


class Choice(str, Enum):
    CONFIRM = "confirm"
    SHORT_SESSION = "short_session"
    CANCEL = "cancel"


@dataclass(frozen=True)
class Tick:
    interval: timedelta = TICK_INTERVAL


Event = Union[Tick, Action, Choice]


# ── Effects ───────────────────────────────────────────────────


@dataclass(frozen=True)
class PersistSession:
    started_at: datetime
    elapsed: timedelta
    task_type: SessionType
    short: bool = False


@dataclass(frozen=True)
class RunPostActions:
    task_type: SessionType
    task: Task


@dataclass(frozen=True)
class ShowConfirm:
    pass


@dataclass(frozen=True)
class Exit:
    pass


Effect = Union[PersistSession, RunPostActions, ShowConfirm, Exit]


# ── Timer value ───────────────────────────────────────────────


@dataclass(frozen=True)
class Timer:
    config: Config
    task_type: SessionType
    task: Task
    duration: timedelta
    state: TimerState = TimerState.RUNNING
    elapsed: timedelta = timedelta(0)
    is_short_session: bool = False
    summary: RunSummary = field(default_factory=RunSummary)
    confirm_started_at: datetime | None = None

    @property
    def percent(self) -> float:
        return percent(self.elapsed, self.duration)

    def idle_time(self, now: datetime) -> timedelta:
        """Time spent waiting on the confirm prompt."""
        if self.state is not TimerState.SHOWING_CONFIRM or self.confirm_started_at is None:
            return timedelta(0)
        return max(timedelta(0), now - self.confirm_started_at)


def new_timer(config: Config, task_type: SessionType = SessionType.WORK) -> Timer:
    task = config.task_for(task_type)
    return Timer(config=config, task_type=task_type, task=task, duration=task.duration)


# ── Transitions ───────────────────────────────────────────────


def start_session(timer: Timer, task_type: SessionType, task: Task, short: bool = False) -> Timer:
    """Begin a fresh interval of *task_type* in the Running state."""
    return replace(
        timer,
        task_type=task_type,
        task=task,
        duration=task.duration,
        elapsed=timedelta(0),
        is_short_session=short,
        state=TimerState.RUNNING,
        confirm_started_at=None,
    )


def next_session(timer: Timer) -> Timer:
    """Start the opposite task type (work <-> break)."""
    next_type = timer.task_type.opposite()
    return start_session(timer, next_type, timer.config.task_for(next_type))


def short_session(timer: Timer) -> Timer:
    """Start a short retry of the current task type."""
    configured = timer.config.task_for(timer.task_type)
    task = Task(title=f"short {configured.title}", duration=SHORT_SESSION_DURATION)
    return start_session(timer, timer.task_type, task, short=True)


def record_session(timer: Timer, now: datetime) -> tuple[Timer, list[Effect]]:
    """Count the current interval in the run summary and ask for it to be persisted.

    Intervals shorter than MIN_RECORDED_ELAPSED are dropped entirely. Short
    sessions add time without counting a new interval.
    """
    elapsed = timer.elapsed
    if elapsed < MIN_RECORDED_ELAPSED:
        logger.debug("discarding %s interval of %s", timer.task_type.value, elapsed)
        return timer, []

    if timer.is_short_session:
        summary = timer.summary.add_duration(timer.task_type, elapsed)
    else:
        summary = timer.summary.add_session(timer.task_type, elapsed)

    effect = PersistSession(
        started_at=session_start_time(now, elapsed),
        elapsed=elapsed,
        task_type=timer.task_type,
        short=timer.is_short_session,
    )
    return replace(timer, summary=summary), [effect]


def quit_timer(timer: Timer) -> tuple[Timer, list[Effect]]:
    return replace(timer, state=TimerState.QUITTING), [Exit()]


def handle_completion(timer: Timer, now: datetime) -> tuple[Timer, list[Effect]]:
    """Record the finished interval, run post-actions, then prompt or quit."""
    logger.info("%s interval completed after %s", timer.task_type.value, timer.elapsed)

    timer, effects = record_session(timer, now)
    effects.append(RunPostActions(task_type=timer.task_type, task=timer.task))

    if timer.config.ask_to_continue:
        timer = replace(timer, state=TimerState.SHOWING_CONFIRM, confirm_started_at=now)
        effects.append(ShowConfirm())
        return timer, effects

    timer, quit_effects = quit_timer(timer)
    return timer, effects + quit_effects


def handle_tick(timer: Timer, tick: Tick, now: datetime) -> tuple[Timer, list[Effect]]:
    if timer.state is not TimerState.RUNNING:
        return timer, []

    timer = replace(timer, elapsed=timer.elapsed + tick.interval)
    if timer.elapsed >= timer.duration:
        return handle_completion(timer, now)
    return timer, []


def handle_action(timer: Timer, action: Action, now: datetime) -> tuple[Timer, list[Effect]]:
    if timer.state not in (TimerState.RUNNING, TimerState.PAUSED):
        return timer, []

    if action is Action.PAUSE:
        paused = timer.state is TimerState.RUNNING
        return replace(timer, state=TimerState.PAUSED if paused else TimerState.RUNNING), []

    if action is Action.RESET:
        return replace(
            timer,
            elapsed=timedelta(0),
            duration=timer.task.duration,
            state=TimerState.RUNNING,
        ), []

    if action is Action.INCREASE:
        return replace(timer, duration=timer.duration + INCREASE_STEP), []

    if action is Action.SKIP:
        timer, effects = record_session(timer, now)
        return next_session(timer), effects

    if action is Action.QUIT:
        timer, effects = record_session(timer, now)
        timer, quit_effects = quit_timer(timer)
        return timer, effects + quit_effects

    return timer, []


def handle_choice(timer: Timer, choice: Choice) -> tuple[Timer, list[Effect]]:
    if timer.state is not TimerState.SHOWING_CONFIRM:
        return timer, []

    if choice is Choice.CONFIRM:
        return next_session(timer), []
    if choice is Choice.SHORT_SESSION:
        return short_session(timer), []
    return quit_timer(timer)


def update(timer: Timer, event: Event, now: datetime) -> tuple[Timer, list[Effect]]:
    """Process one event to completion."""
    if isinstance(event, Tick):
        return handle_tick(timer, event, now)
    if isinstance(event, Action):
        return handle_action(timer, event, now)
    if isinstance(event, Choice):
        return handle_choice(timer, event)
    raise TypeError(f"unknown timer event: {event!r}")
