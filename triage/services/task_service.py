from __future__ import annotations

import logging
from datetime import datetime

from triage.domain.entities import Plan, RecurrenceRule, TaskEntity, coerce_enum
from triage.domain.enums import Priority, Quadrant, TaskStatus
from triage.domain.filters import TaskFilters
from triage.infra.repository import TaskRepository

from .classifier import PRIORITY_QUADRANTS, determine_quadrant, generate_plan
from .phrase_parser import PhraseParser
from .quick_add import parse_task_input

logger = logging.getLogger(__name__)

TASK_FIELDS = {
    "title",
    "status",
    "quadrant",
    "due_date",
    "completed_at",
    "recurrence",
    "priority",
    "assignee",
    "project",
    "duration",
}


class TaskService:
    def __init__(self, repo: TaskRepository, parser: PhraseParser | None = None) -> None:
        self._repo = repo
        self._parser = parser or PhraseParser()

    def list_tasks(self, filters: TaskFilters, now: datetime) -> list[TaskEntity]:
        return self._repo.list_tasks(filters, now.date())

    def get_task(self, task_id: int) -> TaskEntity | None:
        return self._repo.get_task(task_id)

    def create_task(self, data: dict, now: datetime) -> TaskEntity:
        normalized = self._normalize_data(data)
        title = normalized.setdefault("title", "")
        normalized.setdefault("status", TaskStatus.TODO)
        normalized.setdefault("priority", Priority.NONE)

        if "due_date" not in normalized:
            parsed = self._parser.parse(title, now)
            normalized["due_date"] = parsed.date if parsed else None

        if normalized.get("quadrant") is None:
            normalized["quadrant"] = PRIORITY_QUADRANTS.get(
                normalized["priority"], determine_quadrant(title)
            )

        normalized["created_at"] = now
        return self._repo.create_task(normalized)

    def quick_add(self, text: str, now: datetime) -> TaskEntity:
        result = parse_task_input(text, now, self._parser)
        if result is None:
            return self.create_task({"title": text, "due_date": None}, now)
        return self.create_task(
            {
                "title": result.title,
                "due_date": result.due_date,
                "priority": result.priority,
                "quadrant": PRIORITY_QUADRANTS.get(result.priority, determine_quadrant(text)),
                "assignee": result.assignee,
                "project": result.project,
                "duration": result.duration,
            },
            now,
        )

    def update_task(self, task_id: int, data: dict) -> TaskEntity | None:
        normalized = self._normalize_data(data)
        normalized.pop("created_at", None)
        return self._repo.update_task(task_id, normalized)

    def set_quadrant(self, task_id: int, quadrant: Quadrant | str) -> TaskEntity | None:
        return self._repo.update_task(task_id, {"quadrant": Quadrant(quadrant)})

    def reclassify(self, task_id: int) -> TaskEntity | None:
        task = self._repo.get_task(task_id)
        if not task:
            return None
        return self._repo.update_task(task_id, {"quadrant": determine_quadrant(task.title)})

    def toggle_task(self, task_id: int, now: datetime) -> TaskEntity | None:
        task = self._repo.get_task(task_id)
        if not task:
            return None
        if task.is_done:
            updated = {"status": TaskStatus.TODO, "completed_at": None}
        else:
            updated = {"status": TaskStatus.DONE, "completed_at": now}
        logger.debug("Task %s -> %s", task_id, updated["status"])
        return self._repo.update_task(task_id, updated)

    def delete_task(self, task_id: int) -> None:
        self._repo.delete_task(task_id)

    def generate_plan(self, now: datetime) -> Plan:
        tasks = self._repo.list_tasks(TaskFilters(filter_key="todo"), now.date())
        return generate_plan(tasks, now)

    def get_stats(self, now: datetime) -> dict[str, int]:
        return self._repo.get_stats(now.date())

    def _normalize_data(self, data: dict) -> dict:
        normalized = {key: value for key, value in data.items() if key in TASK_FIELDS}
        if "status" in normalized:
            normalized["status"] = coerce_enum(TaskStatus, normalized["status"], TaskStatus.TODO)
        if "priority" in normalized:
            normalized["priority"] = coerce_enum(Priority, normalized["priority"], Priority.NONE)
        if normalized.get("quadrant") is not None:
            normalized["quadrant"] = coerce_enum(Quadrant, normalized["quadrant"], None)
        if isinstance(normalized.get("recurrence"), dict):
            normalized["recurrence"] = RecurrenceRule.from_dict(normalized["recurrence"])
        return normalized
