"""Data directory, path helpers and local-time helpers for pomo."""

from __future__ import annotations

import os
from datetime import date, datetime
from pathlib import Path


def data_root() -> Path:
    """Get the data directory (holds config.yaml, pomo.db and pomo.log)."""
    return Path(
        os.environ.get("POMO_ROOT", str(Path.home() / ".pomo"))
    ).expanduser().resolve()


def now_local() -> datetime:
    """Current time as an aware datetime in the process's local time zone."""
    return datetime.now().astimezone()


def today_local() -> date:
    return now_local().date()


# ── Path helpers ──────────────────────────────────────────────

def config_path(root: Path | None = None) -> Path:
    if root is None:
        root = data_root()
    return root / "config.yaml"


def database_path(root: Path | None = None) -> Path:
    if root is None:
        root = data_root()
    return root / "pomo.db"


def log_path(root: Path | None = None) -> Path:
    if root is None:
        root = data_root()
    return root / "pomo.log"
