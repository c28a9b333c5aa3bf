"""Shared test fixtures for pomo tests."""

from __future__ import annotations

import os
from datetime import datetime, timedelta
from pathlib import Path

import pytest
import yaml

from pomo.db import SessionNotFound, StorageError, connect
from pomo.models import Config, SessionType, Task
from pomo.repository import SessionRepo


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """Create a temporary data directory with a config.yaml."""
    root = tmp_path / "pomo"
    root.mkdir(parents=True)

    config = {
        "work": {"title": "deep work", "duration": "25m"},
        "break": {"title": "coffee", "duration": 5},
        "ask_to_continue": True,
        "database": True,
    }
    (root / "config.yaml").write_text(
        yaml.dump(config, default_flow_style=False), encoding="utf-8"
    )

    os.environ["POMO_ROOT"] = str(root)
    yield root
    if "POMO_ROOT" in os.environ:
        del os.environ["POMO_ROOT"]


@pytest.fixture
def repo() -> SessionRepo:
    """Session repo backed by an in-memory database."""
    conn = connect(":memory:")
    yield SessionRepo(conn)
    conn.close()


@pytest.fixture
def config() -> Config:
    return Config(
        work=Task(title="work", duration=timedelta(minutes=25)),
        break_=Task(title="break", duration=timedelta(minutes=5)),
        ask_to_continue=True,
    )


def local(year: int, month: int, day: int, hour: int = 12, minute: int = 0) -> datetime:
    """Aware datetime in the process's local time zone."""
    return datetime(year, month, day, hour, minute).astimezone()


class FakeStore:
    """Records store calls; extend succeeds only for types that have rows."""

    def __init__(self, existing: set[SessionType] | None = None, fail: bool = False) -> None:
        self.existing = set(existing or ())
        self.fail = fail
        self.calls: list[tuple] = []

    def create_session(self, started_at, duration, session_type) -> None:
        self.calls.append(("create", started_at, duration, session_type))
        if self.fail:
            raise StorageError("disk I/O error")
        self.existing.add(session_type)

    def extend_latest_session(self, duration, session_type) -> None:
        self.calls.append(("extend", duration, session_type))
        if self.fail:
            raise StorageError("database is locked")
        if session_type not in self.existing:
            raise SessionNotFound(f"no {session_type.value} session to extend")

    def count(self, kind: str) -> int:
        return sum(1 for c in self.calls if c[0] == kind)


@pytest.fixture
def fake_store() -> FakeStore:
    return FakeStore()
