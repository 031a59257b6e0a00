from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Iterable

from triage.domain.entities import Plan, TaskEntity
from triage.domain.enums import QUADRANT_SCORES, Priority, Quadrant

# Evaluated top to bottom, first hit wins. Quadrant.DELETE is never produced
# here; it is only reachable through a manual edit.
QUADRANT_RULES: tuple[tuple[Quadrant, tuple[str, ...]], ...] = (
    (Quadrant.DO, ("urgent", "asap", "now", "deadline")),
    (Quadrant.DECIDE, ("plan", "strategy", "learn", "goal")),
    (Quadrant.DELEGATE, ("email", "call", "meeting", "send")),
)
DEFAULT_QUADRANT = Quadrant.DECIDE

PRIORITY_QUADRANTS: dict[Priority, Quadrant] = {
    Priority.CRITICAL: Quadrant.DO,
    Priority.HIGH: Quadrant.DO,
    Priority.MEDIUM: Quadrant.DECIDE,
    Priority.LOW: Quadrant.DELEGATE,
}


def determine_quadrant(title: str) -> Quadrant:
    lower = (title or "").lower()
    for quadrant, keywords in QUADRANT_RULES:
        if any(keyword in lower for keyword in keywords):
            return quadrant
    return DEFAULT_QUADRANT


def classify(title: str) -> tuple[Quadrant, int]:
    quadrant = determine_quadrant(title)
    return quadrant, QUADRANT_SCORES[quadrant]


def resolve_quadrant(task: TaskEntity) -> Quadrant:
    """An existing quadrant first, then manual priority, then the keyword rules."""
    if task.quadrant is not None:
        return task.quadrant
    if task.priority in PRIORITY_QUADRANTS:
        return PRIORITY_QUADRANTS[task.priority]
    return determine_quadrant(task.title)


def prioritize(tasks: Iterable[TaskEntity]) -> list[TaskEntity]:
    classified = [replace(task, quadrant=resolve_quadrant(task)) for task in tasks]
    # list.sort is stable, equal scores keep their input order
    classified.sort(key=lambda task: task.score, reverse=True)
    return classified


def generate_plan(tasks: Iterable[TaskEntity], now: datetime) -> Plan:
    prioritized = prioritize(tasks)
    return Plan(
        created_at=now,
        tasks=prioritized,
        summary=f"Prioritized {len(prioritized)} tasks based on urgency and importance.",
    )
