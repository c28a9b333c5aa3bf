"""Configuration loading for pomo (config.yaml in the data directory)."""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import Any

import yaml

from pomo.models import Config
from pomo.repository import SessionRepo, open_repo
from pomo.stats import StatsError
from pomo.workspace import config_path, data_root, database_path

logger = logging.getLogger(__name__)

STATS_DISABLED_MESSAGE = "statistics are disabled (database: false)"


def _read_config_file(path: Path) -> dict[str, Any]:
    """Parsed config.yaml, or an empty dict if missing, empty or not a mapping."""
    if not path.exists():
        return {}
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    data = yaml.safe_load(text)
    return data if isinstance(data, dict) else {}


def load_config(root: Path | None = None) -> Config:
    """Load config.yaml, falling back to defaults when it is missing or empty.

    Raises ValueError for malformed or non-positive durations.
    """
    if root is None:
        root = data_root()
    path = config_path(root)
    config = Config.from_dict(_read_config_file(path))
    logger.debug("loaded config from %s", path)
    return config


def write_default_config(root: Path | None = None) -> Path | None:
    """Create config.yaml with defaults. Returns None if one already exists."""
    if root is None:
        root = data_root()
    path = config_path(root)
    if path.exists():
        return None

    content = yaml.dump(Config().to_dict(), default_flow_style=False, allow_unicode=True, sort_keys=False)
    path.parent.mkdir(parents=True, exist_ok=True)
    # temp file + rename so a half-written config is never picked up
    fd, temp_path = tempfile.mkstemp(dir=path.parent, prefix=".tmp_", suffix=".yaml")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
        os.replace(temp_path, path)
    except Exception:
        if os.path.exists(temp_path):
            os.unlink(temp_path)
        raise
    return path


def resolve_database_path(config: Config, root: Path | None = None) -> Path:
    if config.database_path:
        return Path(config.database_path).expanduser()
    return database_path(root)


def open_configured_repo(config: Config, root: Path | None = None) -> SessionRepo | None:
    """The session store for this run, or None when persistence is disabled."""
    if not config.database:
        return None
    return open_repo(resolve_database_path(config, root))


def open_stats_repo(config: Config, root: Path | None = None) -> SessionRepo:
    """The session store for a statistics view.

    Raises StatsError when persistence is disabled; no database is created.
    """
    repo = open_configured_repo(config, root)
    if repo is None:
        raise StatsError(STATS_DISABLED_MESSAGE)
    return repo
