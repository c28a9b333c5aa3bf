"""Tests for pomo/recorder.py — persistence of timer effects."""

from datetime import timedelta

from conftest import FakeStore, local
from pomo.models import SessionType
from pomo.recorder import Recorder
from pomo.timer import PersistSession

NOW = local(2026, 2, 8, 10)


def _effect(short: bool, minutes: int = 45, task_type=SessionType.WORK) -> PersistSession:
    elapsed = timedelta(minutes=minutes)
    return PersistSession(started_at=NOW - elapsed, elapsed=elapsed, task_type=task_type, short=short)


def test_full_session_creates(fake_store):
    Recorder(fake_store).persist(_effect(short=False))
    assert fake_store.calls == [("create", NOW - timedelta(minutes=45), timedelta(minutes=45), SessionType.WORK)]


def test_short_session_without_prior_row_creates(fake_store):
    Recorder(fake_store).persist(_effect(short=True))
    assert fake_store.count("create") == 1
    # the lookup found nothing to extend
    assert fake_store.existing == {SessionType.WORK}


def test_short_session_with_prior_row_extends():
    store = FakeStore(existing={SessionType.WORK})
    Recorder(store).persist(_effect(short=True))
    assert store.count("extend") == 1
    assert store.count("create") == 0


def test_short_session_against_real_store(repo):
    recorder = Recorder(repo)
    recorder.persist(_effect(short=True))
    assert repo.get_all_time_stats().total_sessions == 1

    recorder.persist(_effect(short=True, minutes=2))
    stats = repo.get_all_time_stats()
    assert stats.total_sessions == 1
    assert stats.total_work_duration == timedelta(minutes=47)


def test_short_break_does_not_extend_work(repo):
    recorder = Recorder(repo)
    recorder.persist(_effect(short=False, minutes=25))
    recorder.persist(_effect(short=True, minutes=2, task_type=SessionType.BREAK))
    stats = repo.get_all_time_stats()
    assert stats.total_sessions == 2
    assert stats.total_break_duration == timedelta(minutes=2)


def test_storage_failures_are_swallowed(caplog):
    store = FakeStore(fail=True)
    recorder = Recorder(store)
    recorder.persist(_effect(short=False))
    recorder.persist(_effect(short=True))
    # extend failed with a non-not-found error: no fallback insert
    assert store.count("create") == 1
    assert store.count("extend") == 1
    assert "failed to record session" in caplog.text
    assert "failed to extend latest session" in caplog.text


def test_no_store_configured(caplog):
    recorder = Recorder(None)
    with caplog.at_level("WARNING", logger="pomo.recorder"):
        assert recorder.persist(_effect(short=True)) is None
        assert recorder.persist(_effect(short=False)) is None
    assert recorder.store is None
    assert not caplog.records
