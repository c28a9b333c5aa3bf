"""Post-completion hooks for pomo.

Hooks run shell commands when an interval finishes. Configured in
config.yaml under `hooks`:

    hooks:
      on_work_complete:
        - notify-send "Work done"
        - {command: "./log.sh", timeout: 5}
      on_break_complete: [...]

The context (task type, title, duration) is passed as JSON on stdin.
"""

from __future__ import annotations

import json
import logging
import subprocess
from pathlib import Path
from typing import Any

from pomo.models import Config, SessionType, Task
from pomo.workspace import data_root

logger = logging.getLogger(__name__)

VALID_HOOK_POINTS = {
    "on_work_complete",
    "on_break_complete",
}

DEFAULT_TIMEOUT = 30


def hook_point_for(task_type: SessionType) -> str:
    return f"on_{task_type.value}_complete"


def run_hooks(
    hook_point: str,
    context: dict[str, Any],
    config: Config,
    root: Path | None = None,
) -> list[dict[str, Any]]:
    """Run all hooks registered for a given hook point, one after another.

    Returns list of results with stdout/stderr and exit codes.
    """
    if hook_point not in VALID_HOOK_POINTS:
        return []

    if root is None:
        root = data_root()

    hooks = config.hooks.get(hook_point, [])
    if not hooks or not isinstance(hooks, list):
        return []

    results = []
    context_json = json.dumps(context, ensure_ascii=False)

    for hook in hooks:
        if isinstance(hook, str):
            command = hook
            timeout = DEFAULT_TIMEOUT
        elif isinstance(hook, dict):
            command = hook.get("command", "")
            timeout = hook.get("timeout", DEFAULT_TIMEOUT)
        else:
            continue

        if not command:
            continue

        result: dict[str, Any] = {"command": command, "hook_point": hook_point}
        try:
            proc = subprocess.run(
                command,
                shell=True,
                input=context_json,
                capture_output=True,
                text=True,
                timeout=timeout,
                cwd=str(root) if root.exists() else None,
            )
            result["exit_code"] = proc.returncode
            result["stdout"] = proc.stdout[:4096]
            result["stderr"] = proc.stderr[:4096]
        except subprocess.TimeoutExpired:
            result["exit_code"] = -1
            result["error"] = f"Hook timed out after {timeout}s"
        except Exception as e:
            result["exit_code"] = -1
            result["error"] = str(e)

        if result["exit_code"] != 0:
            logger.warning("hook %r (%s) failed: %s", command, hook_point, result.get("error") or result.get("stderr"))
        results.append(result)

    return results


def run_post_actions(
    task_type: SessionType,
    task: Task,
    config: Config,
    root: Path | None = None,
) -> list[dict[str, Any]]:
    """Run the post-completion hooks for a finished interval."""
    context = {
        "type": task_type.value,
        "title": task.title,
        "durationSeconds": int(task.duration.total_seconds()),
    }
    return run_hooks(hook_point_for(task_type), context, config, root)
