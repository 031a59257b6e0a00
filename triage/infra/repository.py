from __future__ import annotations

import itertools
import logging
from dataclasses import replace
from datetime import date, timedelta
from typing import Iterable, Mapping, Optional

from triage.domain.entities import TaskEntity
from triage.domain.enums import Quadrant, TaskStatus
from triage.domain.filters import TaskFilters

logger = logging.getLogger(__name__)

UPCOMING_DAYS = 7


def _matches(task: TaskEntity, filters: TaskFilters, today: date) -> bool:
    due_day = task.due_date.date() if task.due_date else None

    if filters.filter_key == "todo" and task.status != TaskStatus.TODO:
        return False
    if filters.filter_key == "done" and task.status != TaskStatus.DONE:
        return False
    if filters.filter_key == "overdue":
        if task.is_done or due_day is None or due_day >= today:
            return False
    if filters.filter_key == "upcoming":
        horizon = today + timedelta(days=UPCOMING_DAYS)
        if task.is_done or due_day is None or not today <= due_day <= horizon:
            return False

    if filters.due_on and due_day != filters.due_on:
        return False

    if filters.quadrant and task.quadrant != filters.quadrant:
        return False

    if filters.search:
        needle = filters.search.lower()
        haystack = " ".join(
            part for part in (task.title, task.project or "", task.assignee or "") if part
        ).lower()
        if needle not in haystack:
            return False

    return True


class TaskRepository:
    """Owns the id -> task mapping for one session.

    Records are immutable; every write swaps in a new ``TaskEntity`` and
    returns it. ``snapshot`` and ``load`` hand the whole mapping to and from
    the caller's store in one step.
    """

    def __init__(self, tasks: Iterable[TaskEntity] = ()) -> None:
        self._tasks: dict[int, TaskEntity] = {}
        self._ids = itertools.count(1)
        self.load({task.id: task for task in tasks})

    def list_tasks(self, filters: TaskFilters, today: date) -> list[TaskEntity]:
        return [task for task in self._tasks.values() if _matches(task, filters, today)]

    def get_task(self, task_id: int) -> Optional[TaskEntity]:
        return self._tasks.get(task_id)

    def create_task(self, data: dict) -> TaskEntity:
        task = TaskEntity(id=next(self._ids), **data)
        self._tasks[task.id] = task
        logger.debug("Created task %s (%s)", task.id, task.quadrant)
        return task

    def update_task(self, task_id: int, data: dict) -> Optional[TaskEntity]:
        task = self._tasks.get(task_id)
        if not task:
            return None
        updated = replace(task, **data)
        self._tasks[task_id] = updated
        return updated

    def delete_task(self, task_id: int) -> None:
        self._tasks.pop(task_id, None)

    def get_stats(self, today: date) -> dict[str, int]:
        tasks = list(self._tasks.values())
        open_tasks = [task for task in tasks if not task.is_done]
        stats = {
            "total": len(tasks),
            "todo": len(open_tasks),
            "done": len(tasks) - len(open_tasks),
            "overdue": sum(
                1 for task in open_tasks if task.due_date and task.due_date.date() < today
            ),
            "due_today": sum(
                1 for task in tasks if task.due_date and task.due_date.date() == today
            ),
        }
        for quadrant in Quadrant:
            stats[quadrant.value] = sum(1 for task in open_tasks if task.quadrant == quadrant)
        return stats

    def snapshot(self) -> dict[int, TaskEntity]:
        return dict(self._tasks)

    def load(self, tasks: Mapping[int, TaskEntity]) -> None:
        loaded = {int(task_id): task for task_id, task in tasks.items()}
        highest = max(loaded, default=0)
        self._tasks = loaded
        self._ids = itertools.count(highest + 1)
        logger.info("Loaded %d tasks", len(loaded))
