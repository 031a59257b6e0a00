from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from triage.config import Settings
from triage.domain.enums import AlertSignal, NotificationKind
from triage.domain.errors import AudioPlaybackError
from triage.services.context import TriageContext
from triage.ui.ticker import ReminderTicker, ToastExpiry


def test_ticker_feeds_clock_to_callback(qt_app, now: datetime) -> None:
    seen = []
    ticker = ReminderTicker(seen.append, interval_sec=60, clock=lambda: now)

    ticker.timer.timeout.emit()

    assert seen == [now]
    assert ticker.timer.interval() == 60_000


def test_ticker_start_is_idempotent(qt_app) -> None:
    ticker = ReminderTicker(lambda _: None, interval_sec=1)

    ticker.start()
    ticker.start()
    assert ticker.is_running()

    ticker.stop()
    assert not ticker.is_running()


def test_context_replaces_and_stops_ticker(qt_app) -> None:
    context = TriageContext(Settings())
    first = ReminderTicker(context.tick)
    second = ReminderTicker(context.tick)

    context.attach_ticker(first)
    context.attach_ticker(second)
    assert not first.is_running()
    assert second.is_running()

    context.close()
    assert not second.is_running()


def test_context_tick_and_delete(now: datetime) -> None:
    context = TriageContext(Settings(presentation="toast", toast_timeout_sec=10))
    signals = []
    context.audio.subscribe(signals.append)
    task = context.tasks.create_task(
        {"title": "Renew passport", "due_date": now - timedelta(days=1)}, now
    )

    context.tick(now)
    assert context.lifecycle.find_live(task.id, NotificationKind.DUE_DATE) is not None

    context.delete_task(task.id)

    assert context.lifecycle.active == []
    assert context.tasks.get_task(task.id) is None
    assert signals == [AlertSignal.START, AlertSignal.STOP]


def test_context_close_releases_audio(now: datetime) -> None:
    context = TriageContext(Settings())
    signals = []
    context.audio.subscribe(signals.append)
    context.tasks.create_task({"title": "Backup", "due_date": now}, now)
    context.tick(now)

    context.close()

    assert signals == [AlertSignal.START, AlertSignal.STOP]
    assert context.audio.active is False


def test_qt_sink_refuses_missing_sound(qt_app, tmp_path) -> None:
    pytest.importorskip("PySide6.QtMultimedia")
    from triage.ui.audio import QtAudioSink

    sink = QtAudioSink()

    with pytest.raises(AudioPlaybackError):
        sink.play(None)
    with pytest.raises(AudioPlaybackError):
        sink.play(str(tmp_path / "missing.wav"))


class FakeExpiry:
    def __init__(self) -> None:
        self.armed = 0
        self.stopped = 0

    def arm(self) -> None:
        self.armed += 1

    def stop(self) -> None:
        self.stopped += 1


def test_context_arms_toast_expiry_when_a_toast_shows(now: datetime) -> None:
    context = TriageContext(Settings(presentation="toast"))
    expiry = FakeExpiry()
    context.attach_toast_timer(expiry)
    task = context.tasks.create_task({"title": "Stand up", "due_date": now - timedelta(days=1)}, now)

    context.tick(now)
    assert expiry.armed == 1

    notification = context.lifecycle.find_live(task.id, NotificationKind.DUE_DATE)
    context.touch(notification.id, now + timedelta(seconds=5))
    assert expiry.armed == 2

    context.close()
    assert expiry.stopped == 1


def test_panel_context_never_arms_expiry(now: datetime) -> None:
    context = TriageContext(Settings(presentation="panel"))
    expiry = FakeExpiry()
    context.attach_toast_timer(expiry)
    context.tasks.create_task({"title": "Stand up", "due_date": now - timedelta(days=1)}, now)

    context.tick(now)

    assert expiry.armed == 0
    assert len(context.lifecycle.active) == 1


def test_toast_goes_away_without_waiting_for_the_ticker(qt_app) -> None:
    QTest = pytest.importorskip("PySide6.QtTest").QTest
    context = TriageContext(Settings(presentation="toast", toast_timeout_sec=1, tick_interval_sec=60))
    expiry = ToastExpiry(context.tick, timedelta(seconds=1))
    context.attach_toast_timer(expiry)
    started = datetime.now()
    context.tasks.create_task({"title": "Stand up", "due_date": started - timedelta(days=1)}, started)

    context.tick(started)
    assert len(context.lifecycle.active) == 1
    assert expiry.pending() == 1

    QTest.qWait(1500)

    assert context.lifecycle.active == []
    assert expiry.pending() == 0
    context.close()


def test_toast_expiry_feeds_clock_after_timeout(qt_app, now: datetime) -> None:
    seen = []
    expiry = ToastExpiry(seen.append, timedelta(seconds=10), clock=lambda: now)

    expiry.arm()
    expiry.arm()
    assert expiry.pending() == 2

    expiry.stop()
    assert expiry.pending() == 0
    assert seen == []
