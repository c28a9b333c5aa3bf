"""HTTP surface for pomo statistics (JSON only)."""

from __future__ import annotations

import os
import secrets
from typing import Any

from fastapi import Depends, FastAPI, HTTPException, status
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from pomo import (
    StatsError,
    data_root,
    fetch_stats,
    load_config,
    today_local,
)
from pomo.config import open_stats_repo
from pomo.repository import SessionRepo
from pomo.stats import NUMBER_OF_MONTHS, StatsReport


# ── Auth ──────────────────────────────────────────────────────

app = FastAPI(title="pomo stats", version="0.1.0")

security = HTTPBasic(auto_error=False)


def get_current_user(credentials: HTTPBasicCredentials | None = Depends(security)) -> str:
    expected_username = os.environ.get("POMO_USERNAME", "")
    expected_password = os.environ.get("POMO_PASSWORD", "")

    if not expected_username or not expected_password:
        return "guest"

    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Basic"},
        )

    correct_username = secrets.compare_digest(credentials.username.encode("utf-8"), expected_username.encode("utf-8"))
    correct_password = secrets.compare_digest(credentials.password.encode("utf-8"), expected_password.encode("utf-8"))

    if not (correct_username and correct_password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Basic"},
        )

    return credentials.username


# ── Helpers ───────────────────────────────────────────────────


def _open_repo() -> SessionRepo:
    root = data_root()
    return open_stats_repo(load_config(root), root)


def _report(months: int = NUMBER_OF_MONTHS) -> StatsReport:
    opened: list[SessionRepo] = []

    def open_and_track() -> SessionRepo:
        repo = _open_repo()
        opened.append(repo)
        return repo

    try:
        return fetch_stats(open_and_track, today_local(), months)
    except StatsError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))
    finally:
        for repo in opened:
            repo.close()


# ── Endpoints ─────────────────────────────────────────────────

@app.get("/healthz")
def healthz() -> dict[str, str]:
    return {"ok": "true"}


@app.get("/api/stats")
def api_stats(username: str = Depends(get_current_user)) -> dict[str, Any]:
    """All-time totals, weekly and heat-map series, and streaks."""
    return _report().to_dict()


@app.get("/api/stats/weekly")
def api_weekly(username: str = Depends(get_current_user)) -> dict[str, Any]:
    report = _report()
    return {"days": [s.to_dict() for s in report.weekly]}


@app.get("/api/stats/monthly")
def api_monthly(months: int = NUMBER_OF_MONTHS, username: str = Depends(get_current_user)) -> dict[str, Any]:
    if months < 0 or months > 24:
        raise HTTPException(status_code=400, detail=f"Invalid months: {months}")
    report = _report(months)
    return {"days": [s.to_dict() for s in report.monthly]}


@app.get("/api/stats/streak")
def api_streak(username: str = Depends(get_current_user)) -> dict[str, Any]:
    return _report().streak.to_dict()
