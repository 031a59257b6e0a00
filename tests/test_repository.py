from __future__ import annotations

from datetime import datetime, timedelta

from triage.domain.enums import Quadrant
from triage.domain.filters import TaskFilters
from triage.infra.repository import TaskRepository
from triage.services.task_service import TaskService


def seed(service: TaskService, now: datetime) -> dict[str, int]:
    ids = {}
    ids["overdue"] = service.create_task(
        {"title": "Pay bill", "due_date": now - timedelta(days=2), "project": "home"}, now
    ).id
    ids["today"] = service.create_task({"title": "Call Ann", "due_date": now + timedelta(hours=3)}, now).id
    ids["soon"] = service.create_task({"title": "Plan sprint", "due_date": now + timedelta(days=5)}, now).id
    ids["done"] = service.create_task({"title": "Urgent fix", "due_date": now - timedelta(days=1)}, now).id
    service.toggle_task(ids["done"], now)
    return ids


def ids_for(service: TaskService, filters: TaskFilters, now: datetime) -> list[int]:
    return [task.id for task in service.list_tasks(filters, now)]


def test_filter_keys(service: TaskService, now: datetime) -> None:
    ids = seed(service, now)

    assert ids_for(service, TaskFilters(filter_key="overdue"), now) == [ids["overdue"]]
    assert ids_for(service, TaskFilters(filter_key="upcoming"), now) == [ids["today"], ids["soon"]]
    assert ids_for(service, TaskFilters(filter_key="done"), now) == [ids["done"]]
    assert len(ids_for(service, TaskFilters(filter_key="todo"), now)) == 3
    assert ids_for(service, TaskFilters(search="HOME"), now) == [ids["overdue"]]
    assert ids_for(service, TaskFilters(quadrant=Quadrant.DECIDE), now) == [ids["overdue"], ids["soon"]]
    assert ids_for(service, TaskFilters(due_on=now.date()), now) == [ids["today"]]


def test_stats(service: TaskService, now: datetime) -> None:
    seed(service, now)

    stats = service.get_stats(now)

    assert stats["total"] == 4
    assert stats["todo"] == 3
    assert stats["done"] == 1
    assert stats["overdue"] == 1
    assert stats["due_today"] == 1
    assert stats["do"] == 0
    assert stats["decide"] == 2
    assert stats["delegate"] == 1


def test_load_continues_id_sequence(repo: TaskRepository, service: TaskService, now: datetime) -> None:
    seed(service, now)
    snapshot = repo.snapshot()

    restored = TaskRepository()
    restored.load(snapshot)
    created = TaskService(restored).create_task({"title": "Next", "due_date": None}, now)

    assert created.id == max(snapshot) + 1
    assert restored.get_task(created.id).title == "Next"


def test_update_and_delete_missing_task(repo: TaskRepository) -> None:
    assert repo.update_task(42, {"title": "nope"}) is None
    repo.delete_task(42)
    assert repo.snapshot() == {}
