"""pomo core library — timer state machine, session store and statistics.

Public API re-exports for convenient imports:
    from pomo import new_timer, update, SessionRepo, fetch_stats, ...
"""

# Workspace & paths
from pomo.workspace import (
    data_root,
    now_local,
    today_local,
    config_path,
    database_path,
    log_path,
)

# Models
from pomo.models import (
    SessionType,
    Session,
    DailyStat,
    AllTimeStats,
    StreakStats,
    Task,
    Config,
    parse_duration,
)

# Clock
from pomo.clock import (
    session_start_time,
    format_countdown,
    format_duration_compact,
)

# Run summary
from pomo.summary import RunSummary

# Storage
from pomo.db import StorageError, SessionNotFound, connect
from pomo.repository import SessionRepo, open_repo

# Statistics
from pomo.stats import (
    StatsError,
    StatsReport,
    calculate_streak,
    normalize_stats,
    fetch_stats,
    get_weekly_stats,
    get_last_months_stats,
    get_streak_stats,
    today_work_line,
)

# Timer
from pomo.timer import (
    Timer,
    TimerState,
    Action,
    Choice,
    Tick,
    PersistSession,
    RunPostActions,
    ShowConfirm,
    Exit,
    new_timer,
    update,
    record_session,
)
from pomo.recorder import Recorder

# Config & hooks
from pomo.config import load_config, write_default_config, open_configured_repo, open_stats_repo
from pomo.hooks import run_hooks, run_post_actions
