"""Reminder notifications and the shared audio alert.

A notification moves pending -> active when its ``due_at`` passes, and leaves
the active set by being dismissed, completed or snoozed (snoozing re-arms it
as pending). The audio alert belongs to the active set as a whole: it starts
when the set stops being empty and stops when the set empties again.
"""

from __future__ import annotations

import itertools
import logging
from collections import deque
from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from typing import Callable, Iterator, Optional, Protocol

from triage.domain.entities import NotificationEntity, TaskEntity
from triage.domain.enums import AlertSignal, NotificationKind, NotificationState, Presentation
from triage.domain.errors import AudioPlaybackError

logger = logging.getLogger(__name__)

DEFAULT_SNOOZE = timedelta(hours=1)
DEFAULT_TOAST_TIMEOUT = timedelta(seconds=10)


class AudioSink(Protocol):
    def play(self, source: str | None) -> None:
        """Start looping ``source``; raise AudioPlaybackError if refused."""

    def stop(self) -> None:
        """Stop playback and rewind to the start."""


class TaskToggler(Protocol):
    def toggle_task(self, task_id: int, now: datetime) -> Optional[TaskEntity]:
        ...


class AudioAlert:
    """Acquire/release handle around a single looping alert sound."""

    def __init__(
        self,
        sink: AudioSink | None = None,
        *,
        reminder_sound: str | None = None,
        critical_sound: str | None = None,
    ) -> None:
        self._sink = sink
        self._reminder_sound = reminder_sound
        self._critical_sound = critical_sound or reminder_sound
        self._active = False
        self._source: str | None = None
        self._listeners: list[Callable[[AlertSignal], None]] = []
        self._warning_listeners: list[Callable[[str], None]] = []
        self.playing = False
        self.last_warning: str | None = None

    @property
    def active(self) -> bool:
        return self._active

    @property
    def source(self) -> str | None:
        return self._source

    def attach_sink(self, sink: AudioSink) -> None:
        self._sink = sink
        if self._active:
            self._play()

    def subscribe(self, listener: Callable[[AlertSignal], None]) -> None:
        self._listeners.append(listener)

    def on_warning(self, listener: Callable[[str], None]) -> None:
        self._warning_listeners.append(listener)

    def ensure_active(self, *, critical: bool = False) -> None:
        source = self._critical_sound if critical else self._reminder_sound
        if self._active:
            if source != self._source:
                logger.debug("Switching alert sound to %s", source)
                self._source = source
                self._play()
            return
        self._active = True
        self._source = source
        logger.info("Alert loop started")
        self._emit(AlertSignal.START)
        self._play()

    def release(self) -> None:
        if not self._active:
            return
        self._active = False
        self.playing = False
        if self._sink is not None:
            self._sink.stop()
        logger.info("Alert loop stopped")
        self._emit(AlertSignal.STOP)

    def report_playback_failure(self, reason: str) -> None:
        self.playing = False
        self.last_warning = reason
        logger.warning("Audio playback failed: %s", reason)
        for listener in self._warning_listeners:
            listener(reason)

    def _play(self) -> None:
        if self._sink is None:
            return
        try:
            self._sink.play(self._source)
        except AudioPlaybackError as exc:
            self.report_playback_failure(str(exc))
            return
        self.playing = True

    def _emit(self, signal: AlertSignal) -> None:
        for listener in self._listeners:
            listener(signal)


@dataclass(frozen=True)
class LifecycleEvent:
    state: NotificationState
    notification: NotificationEntity


class NotificationLifecycle:
    def __init__(
        self,
        tasks: TaskToggler,
        audio: AudioAlert,
        *,
        presentation: Presentation = Presentation.PANEL,
        snooze: timedelta = DEFAULT_SNOOZE,
        toast_timeout: timedelta = DEFAULT_TOAST_TIMEOUT,
        history_limit: int = 200,
    ) -> None:
        self._tasks = tasks
        self._audio = audio
        self._presentation = Presentation(presentation)
        self._snooze = snooze
        self._toast_timeout = toast_timeout
        self._pending: dict[int, NotificationEntity] = {}
        self._active: dict[int, NotificationEntity] = {}
        self._history: deque[NotificationEntity] = deque(maxlen=history_limit)
        self._last_interaction: dict[int, datetime] = {}
        self._dismissed_at: dict[int, datetime] = {}
        self._ids = itertools.count(1)
        self._listeners: list[Callable[[LifecycleEvent], None]] = []

    @property
    def presentation(self) -> Presentation:
        return self._presentation

    @property
    def active(self) -> list[NotificationEntity]:
        return list(self._active.values())

    @property
    def pending(self) -> list[NotificationEntity]:
        return sorted(self._pending.values(), key=lambda item: item.due_at)

    @property
    def history(self) -> list[NotificationEntity]:
        return list(self._history)

    def subscribe(self, listener: Callable[[LifecycleEvent], None]) -> None:
        self._listeners.append(listener)

    def _known(self) -> Iterator[NotificationEntity]:
        # live entries first, finished ones from history after
        return itertools.chain(self._active.values(), self._pending.values(), reversed(self._history))

    def get(self, notification_id: int) -> Optional[NotificationEntity]:
        return next((item for item in self._known() if item.id == notification_id), None)

    def find_live(self, task_id: int, kind: NotificationKind) -> Optional[NotificationEntity]:
        for item in self._known():
            if item.is_live and item.task_id == task_id and item.kind == kind:
                return item
        return None

    def recently_dismissed(self, task_id: int, now: datetime, within: timedelta) -> bool:
        dismissed_at = self._dismissed_at.get(task_id)
        return dismissed_at is not None and now - dismissed_at < within

    def schedule(
        self,
        task_id: int,
        message: str,
        due_at: datetime,
        *,
        kind: NotificationKind = NotificationKind.REMINDER,
        now: datetime | None = None,
    ) -> NotificationEntity:
        existing = self.find_live(task_id, kind)
        if existing is not None:
            return existing
        notification = NotificationEntity(
            id=next(self._ids),
            task_id=task_id,
            message=message,
            kind=kind,
            state=NotificationState.PENDING,
            due_at=due_at,
            created_at=now or due_at,
        )
        self._pending[notification.id] = notification
        logger.debug("Scheduled %s notification %s for %s", kind, notification.id, due_at)
        self._emit(notification)
        return notification

    def tick(self, now: datetime) -> list[NotificationEntity]:
        """Activate everything that came due and apply the toast timeout."""
        activated = []
        for notification in self.pending:
            if notification.due_at > now:
                break
            del self._pending[notification.id]
            current = replace(notification, state=NotificationState.ACTIVE, activated_at=now)
            self._active[current.id] = current
            self._last_interaction[current.id] = now
            logger.info("Notification %s active: %s", current.id, current.message)
            self._emit(current)
            activated.append(current)

        if self._presentation == Presentation.TOAST:
            for notification in list(self._active.values()):
                idle_since = self._last_interaction.get(notification.id, now)
                if now - idle_since >= self._toast_timeout:
                    self._finish(notification, NotificationState.DISMISSED)
                    self._dismissed_at[notification.task_id] = now

        self._sync_audio()
        return activated

    def touch(self, notification_id: int, now: datetime) -> None:
        if notification_id in self._active:
            self._last_interaction[notification_id] = now

    def dismiss(self, notification_id: int, now: datetime) -> Optional[NotificationEntity]:
        notification = self._active.get(notification_id)
        if notification is None:
            return None
        finished = self._finish(notification, NotificationState.DISMISSED)
        self._dismissed_at[notification.task_id] = now
        self._sync_audio()
        return finished

    def snooze(self, notification_id: int, now: datetime) -> Optional[NotificationEntity]:
        notification = self._active.pop(notification_id, None)
        if notification is None:
            return None
        self._last_interaction.pop(notification_id, None)
        self._emit(replace(notification, state=NotificationState.SNOOZED))

        rearmed = replace(
            notification,
            state=NotificationState.PENDING,
            due_at=now + self._snooze,
            activated_at=None,
            snooze_count=notification.snooze_count + 1,
        )
        self._pending[rearmed.id] = rearmed
        logger.info("Notification %s snoozed until %s", rearmed.id, rearmed.due_at)
        self._emit(rearmed)
        self._sync_audio()
        return rearmed

    def complete(self, notification_id: int, now: datetime) -> Optional[NotificationEntity]:
        notification = self._active.get(notification_id)
        if notification is None:
            return None
        finished = self._finish(notification, NotificationState.COMPLETED)
        if self._tasks.toggle_task(notification.task_id, now) is None:
            logger.debug("Task %s is gone, completion left it untouched", notification.task_id)
        self._sync_audio()
        return finished

    def clear_task(self, task_id: int) -> int:
        live = [
            item
            for item in self._known()
            if item.is_live and item.task_id == task_id
        ]
        for notification in live:
            self._finish(notification, NotificationState.DISMISSED)
        self._sync_audio()
        return len(live)

    def _finish(self, notification: NotificationEntity, state: NotificationState) -> NotificationEntity:
        self._active.pop(notification.id, None)
        self._pending.pop(notification.id, None)
        self._last_interaction.pop(notification.id, None)
        finished = replace(notification, state=state)
        self._history.append(finished)
        logger.info("Notification %s %s", finished.id, state)
        self._emit(finished)
        return finished

    def _sync_audio(self) -> None:
        if self._active:
            critical = any(item.kind == NotificationKind.DUE_DATE for item in self._active.values())
            self._audio.ensure_active(critical=critical)
        else:
            self._audio.release()

    def _emit(self, notification: NotificationEntity) -> None:
        event = LifecycleEvent(state=notification.state, notification=notification)
        for listener in self._listeners:
            listener(event)
