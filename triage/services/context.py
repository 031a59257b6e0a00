from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Protocol

from triage.config import SETTINGS, Settings
from triage.domain.enums import NotificationState, Presentation
from triage.infra.repository import TaskRepository

from .notifications import AudioAlert, AudioSink, LifecycleEvent, NotificationLifecycle
from .phrase_parser import PhraseParser
from .scheduler import ReminderScheduler
from .task_service import TaskService

logger = logging.getLogger(__name__)


class Ticker(Protocol):
    def start(self) -> None:
        ...

    def stop(self) -> None:
        ...


class ExpiryTimer(Protocol):
    def arm(self) -> None:
        ...

    def stop(self) -> None:
        ...


class TriageContext:
    """Owns the task state and every collaborator that reads or changes it."""

    def __init__(
        self,
        settings: Settings = SETTINGS,
        *,
        repo: TaskRepository | None = None,
        sink: AudioSink | None = None,
    ) -> None:
        self.settings = settings
        self.repo = repo or TaskRepository()
        self.parser = PhraseParser()
        self.tasks = TaskService(self.repo, self.parser)
        self.audio = AudioAlert(
            sink,
            reminder_sound=settings.alert_sound,
            critical_sound=settings.critical_sound,
        )
        self.lifecycle = NotificationLifecycle(
            self.tasks,
            self.audio,
            presentation=Presentation(settings.presentation),
            snooze=timedelta(minutes=settings.snooze_minutes),
            toast_timeout=timedelta(seconds=settings.toast_timeout_sec),
        )
        self.scheduler = ReminderScheduler(
            self.tasks,
            self.lifecycle,
            due_soon=timedelta(minutes=settings.due_soon_minutes),
            dismiss_cooldown=timedelta(minutes=settings.dismiss_cooldown_minutes),
        )
        self._ticker: Ticker | None = None
        self._toast_timer: ExpiryTimer | None = None
        self.lifecycle.subscribe(self._on_notification)

    def attach_ticker(self, ticker: Ticker) -> None:
        if self._ticker is not None and self._ticker is not ticker:
            self._ticker.stop()
        self._ticker = ticker
        ticker.start()

    def attach_toast_timer(self, timer: ExpiryTimer) -> None:
        """Use ``timer`` to re-tick once a toast can have sat idle for the full timeout."""
        if self._toast_timer is not None and self._toast_timer is not timer:
            self._toast_timer.stop()
        self._toast_timer = timer

    def _arm_toast_timer(self) -> None:
        if self._toast_timer is not None and self.lifecycle.presentation == Presentation.TOAST:
            self._toast_timer.arm()

    def _on_notification(self, event: LifecycleEvent) -> None:
        if event.state == NotificationState.ACTIVE:
            self._arm_toast_timer()

    def tick(self, now: datetime) -> None:
        self.scheduler.tick(now)

    def touch(self, notification_id: int, now: datetime) -> None:
        self.lifecycle.touch(notification_id, now)
        if any(item.id == notification_id for item in self.lifecycle.active):
            self._arm_toast_timer()

    def delete_task(self, task_id: int) -> None:
        self.lifecycle.clear_task(task_id)
        self.scheduler.forget(task_id)
        self.tasks.delete_task(task_id)

    def close(self) -> None:
        if self._ticker is not None:
            self._ticker.stop()
            self._ticker = None
        if self._toast_timer is not None:
            self._toast_timer.stop()
            self._toast_timer = None
        self.audio.release()
        logger.debug("Triage context closed")
