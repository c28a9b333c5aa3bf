"""Tests for pomo/hooks.py — post-completion hooks."""

import json
from datetime import timedelta

from pomo.hooks import hook_point_for, run_hooks, run_post_actions
from pomo.models import Config, SessionType, Task


def test_run_hooks_no_config(workspace):
    results = run_hooks("on_work_complete", {"type": "work"}, Config(), workspace)
    assert results == []


def test_run_hooks_with_echo(workspace):
    """Hook that echoes context via stdin."""
    config = Config(hooks={"on_work_complete": ["cat"]})

    results = run_hooks("on_work_complete", {"type": "work"}, config, workspace)
    assert len(results) == 1
    assert results[0]["exit_code"] == 0
    output = json.loads(results[0]["stdout"])
    assert output["type"] == "work"


def test_run_hooks_invalid_hook_point(workspace):
    config = Config(hooks={"pre_everything": ["true"]})
    assert run_hooks("pre_everything", {}, config, workspace) == []


def test_run_hooks_timeout(workspace):
    config = Config(hooks={"on_break_complete": [{"command": "sleep 10", "timeout": 1}]})

    results = run_hooks("on_break_complete", {}, config, workspace)
    assert len(results) == 1
    assert results[0]["exit_code"] == -1
    assert "timed out" in results[0].get("error", "").lower()


def test_run_hooks_failing_command(workspace):
    config = Config(hooks={"on_work_complete": ["exit 3", "", 42]})
    results = run_hooks("on_work_complete", {}, config, workspace)
    assert [r["exit_code"] for r in results] == [3]


def test_run_post_actions_context(workspace):
    config = Config(hooks={"on_break_complete": ["cat"]})
    task = Task(title="coffee", duration=timedelta(minutes=5))

    [result] = run_post_actions(SessionType.BREAK, task, config, workspace)
    assert json.loads(result["stdout"]) == {"type": "break", "title": "coffee", "durationSeconds": 300}


def test_hook_point_for():
    assert hook_point_for(SessionType.WORK) == "on_work_complete"
    assert hook_point_for(SessionType.BREAK) == "on_break_complete"
