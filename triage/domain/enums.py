from __future__ import annotations

from enum import IntEnum, StrEnum


class TaskStatus(StrEnum):
    TODO = "todo"
    DONE = "done"


class Quadrant(StrEnum):
    DO = "do"
    DECIDE = "decide"
    DELEGATE = "delegate"
    DELETE = "delete"


class Priority(StrEnum):
    NONE = "none"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class Frequency(StrEnum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class EndType(StrEnum):
    NEVER = "never"
    ON_DATE = "on_date"
    AFTER_COUNT = "after_count"


class NotificationState(StrEnum):
    PENDING = "pending"
    ACTIVE = "active"
    SNOOZED = "snoozed"
    COMPLETED = "completed"
    DISMISSED = "dismissed"


class NotificationKind(StrEnum):
    DUE_DATE = "due_date"
    REMINDER = "reminder"
    OCCURRENCE = "occurrence"


class Presentation(StrEnum):
    TOAST = "toast"
    PANEL = "panel"


class AlertSignal(StrEnum):
    START = "start"
    STOP = "stop"


class Weekday(IntEnum):
    SUNDAY = 0
    MONDAY = 1
    TUESDAY = 2
    WEDNESDAY = 3
    THURSDAY = 4
    FRIDAY = 5
    SATURDAY = 6


QUADRANT_SCORES: dict[Quadrant, int] = {
    Quadrant.DO: 100,
    Quadrant.DECIDE: 80,
    Quadrant.DELEGATE: 50,
    Quadrant.DELETE: 10,
}
