"""Tests for ui/app.py — JSON statistics endpoints."""

from datetime import timedelta

import pytest
from fastapi.testclient import TestClient

from pomo.models import SessionType
from pomo.repository import open_repo
from pomo.workspace import now_local


@pytest.fixture
def client(workspace):
    from ui.app import app

    with TestClient(app) as c:
        yield c


def test_healthz(client):
    assert client.get("/healthz").json() == {"ok": "true"}


def test_stats_empty(client):
    r = client.get("/api/stats")
    assert r.status_code == 200
    data = r.json()
    assert data["allTime"] == {"totalSessions": 0, "totalWorkDurationMs": 0, "totalBreakDurationMs": 0}
    assert len(data["weekly"]) == 7
    assert data["streak"] == {"currentStreak": 0, "bestStreak": 0}


def test_stats_with_sessions(client, workspace):
    repo = open_repo(workspace / "pomo.db")
    repo.create_session(now_local() - timedelta(minutes=30), timedelta(minutes=25), SessionType.WORK)
    repo.conn.close()

    data = client.get("/api/stats").json()
    assert data["allTime"]["totalSessions"] == 1
    assert data["streak"]["currentStreak"] == 1

    streak = client.get("/api/stats/streak").json()
    assert streak == {"currentStreak": 1, "bestStreak": 1}


def test_monthly_window(client):
    days = client.get("/api/stats/monthly", params={"months": 0}).json()["days"]
    assert days[0]["date"].endswith("-01")
    assert client.get("/api/stats/monthly", params={"months": -1}).status_code == 400


def test_stats_storage_failure(client, workspace):
    (workspace / "config.yaml").write_text(
        f"database_path: {workspace / 'missing-dir' / 'file.db' / 'nested.db'}\n", encoding="utf-8"
    )
    (workspace / "missing-dir").mkdir()
    (workspace / "missing-dir" / "file.db").write_text("not a directory", encoding="utf-8")

    r = client.get("/api/stats")
    assert r.status_code == 503
    assert r.json()["detail"] == "failed to connect to the database"


def test_basic_auth(client, monkeypatch):
    monkeypatch.setenv("POMO_USERNAME", "me")
    monkeypatch.setenv("POMO_PASSWORD", "secret")
    assert client.get("/api/stats").status_code == 401
    assert client.get("/api/stats", auth=("me", "secret")).status_code == 200


def test_stats_disabled_does_not_create_database(client, workspace):
    (workspace / "config.yaml").write_text("database: false\n", encoding="utf-8")

    r = client.get("/api/stats")
    assert r.status_code == 503
    assert r.json()["detail"] == "statistics are disabled (database: false)"
    assert not (workspace / "pomo.db").exists()
