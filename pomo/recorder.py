"""Carries out the timer's persistence effects against the session store.

Writes are best-effort: failures are logged and never reach the timer.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Protocol

from pomo.db import SessionNotFound, StorageError
from pomo.models import SessionType
from pomo.timer import PersistSession

logger = logging.getLogger(__name__)


class SessionStore(Protocol):
    def create_session(self, started_at: datetime, duration: timedelta, session_type: SessionType) -> None: ...

    def extend_latest_session(self, duration: timedelta, session_type: SessionType) -> None: ...


class Recorder:
    def __init__(self, store: SessionStore | None = None) -> None:
        self.store = store

    def persist(self, effect: PersistSession) -> None:
        # no database configured: the run summary is all we keep
        if self.store is None:
            return

        if effect.short:
            self._persist_short(effect)
            return

        try:
            self.store.create_session(effect.started_at, effect.elapsed, effect.task_type)
        except StorageError as e:
            logger.warning("failed to record session: %s", e)

    def _persist_short(self, effect: PersistSession) -> None:
        """Extend the previous same-type session, or create one if there is none."""
        assert self.store is not None
        try:
            self.store.extend_latest_session(effect.elapsed, effect.task_type)
            return
        except SessionNotFound:
            logger.info("no previous %s session to extend, recording a new one", effect.task_type.value)
        except StorageError as e:
            logger.warning("failed to extend latest session: %s", e)
            return

        try:
            self.store.create_session(effect.started_at, effect.elapsed, effect.task_type)
        except StorageError as e:
            logger.warning("failed to record short session: %s", e)
