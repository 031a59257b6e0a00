from __future__ import annotations

import logging
from datetime import datetime, timedelta

from triage.domain.entities import NotificationEntity, TaskEntity
from triage.domain.enums import NotificationKind
from triage.domain.filters import TaskFilters

from . import recurrence
from .notifications import NotificationLifecycle
from .task_service import TaskService

logger = logging.getLogger(__name__)


class ReminderScheduler:
    """Turns task due dates and recurrence rules into notifications.

    ``tick`` is meant to be called periodically. Occurrence counters for
    count-limited series are tracked here per task; occurrences that elapse
    while an earlier one is still on screen are skipped, not counted.
    """

    def __init__(
        self,
        tasks: TaskService,
        lifecycle: NotificationLifecycle,
        *,
        due_soon: timedelta = timedelta(minutes=60),
        dismiss_cooldown: timedelta = timedelta(minutes=60),
    ) -> None:
        self._tasks = tasks
        self._lifecycle = lifecycle
        self._due_soon = due_soon
        self._dismiss_cooldown = dismiss_cooldown
        self._armed: dict[int, datetime] = {}
        self._fired: dict[int, int] = {}
        self._last_fired: dict[int, datetime] = {}

    def tick(self, now: datetime) -> list[NotificationEntity]:
        for task in self._tasks.list_tasks(TaskFilters(), now):
            if not task.is_done:
                self._check_due_date(task, now)
            self._arm_occurrence(task, now)

        activated = self._lifecycle.tick(now)
        for notification in activated:
            if notification.kind != NotificationKind.OCCURRENCE or notification.snooze_count:
                continue
            fired_at = self._armed.pop(notification.task_id, notification.due_at)
            self._fired[notification.task_id] = self._fired.get(notification.task_id, 0) + 1
            self._last_fired[notification.task_id] = fired_at
        return activated

    def set_reminder(self, task_id: int, minutes: int, now: datetime) -> NotificationEntity | None:
        task = self._tasks.get_task(task_id)
        if not task:
            return None
        return self._lifecycle.schedule(
            task.id,
            f"{task.title} (Reminder)",
            now + timedelta(minutes=max(int(minutes), 0)),
            kind=NotificationKind.REMINDER,
            now=now,
        )

    def fired_count(self, task_id: int) -> int:
        return self._fired.get(task_id, 0)

    def forget(self, task_id: int) -> None:
        self._armed.pop(task_id, None)
        self._fired.pop(task_id, None)
        self._last_fired.pop(task_id, None)

    def _check_due_date(self, task: TaskEntity, now: datetime) -> None:
        if task.due_date is None or task.due_date > now + self._due_soon:
            return
        if self._lifecycle.find_live(task.id, NotificationKind.DUE_DATE):
            return
        if self._lifecycle.recently_dismissed(task.id, now, self._dismiss_cooldown):
            return
        label = "OVERDUE" if task.due_date < now else "DUE NOW"
        self._lifecycle.schedule(
            task.id, f"{label}: {task.title}", now, kind=NotificationKind.DUE_DATE, now=now
        )

    def _arm_occurrence(self, task: TaskEntity, now: datetime) -> None:
        rule = task.recurrence
        if rule is None or not rule.enabled:
            return
        if self._lifecycle.find_live(task.id, NotificationKind.OCCURRENCE):
            return

        after = max(self._last_fired.get(task.id, now), now)
        anchor = task.due_date or task.created_at
        upcoming = recurrence.next_occurrence(
            rule, after, anchor=anchor, count=self._fired.get(task.id, 0)
        )
        if upcoming is None:
            return
        self._armed[task.id] = upcoming
        self._lifecycle.schedule(
            task.id,
            f"{task.title} ({recurrence.describe(rule)})",
            upcoming,
            kind=NotificationKind.OCCURRENCE,
            now=now,
        )
