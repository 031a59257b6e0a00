from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, datetime, time
from typing import Any, Optional

from .enums import (
    QUADRANT_SCORES,
    EndType,
    Frequency,
    NotificationKind,
    NotificationState,
    Priority,
    Quadrant,
    TaskStatus,
)

DEFAULT_RULE_TIME = time(9, 0)


def _clamp(value: Any, low: int, high: int | None, default: int) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    if number < low:
        return low
    if high is not None and number > high:
        return high
    return number


@dataclass(frozen=True)
class RecurrenceRule:
    """Repeat pattern owned by a task.

    Weekday indices follow the Sunday = 0 convention. Field values are clamped
    on construction, so ``dataclasses.replace`` always yields a valid rule.
    """

    enabled: bool = False
    frequency: Frequency = Frequency.WEEKLY
    interval: int = 1
    days_of_week: frozenset[int] = frozenset({1})
    day_of_month: int = 1
    time: time = DEFAULT_RULE_TIME
    end_type: EndType = EndType.NEVER
    end_date: Optional[date] = None
    end_count: int = 10

    def __post_init__(self) -> None:
        object.__setattr__(self, "frequency", Frequency(self.frequency))
        object.__setattr__(self, "end_type", EndType(self.end_type))
        object.__setattr__(self, "interval", _clamp(self.interval, 1, None, 1))
        object.__setattr__(self, "day_of_month", _clamp(self.day_of_month, 1, 31, 1))
        object.__setattr__(self, "end_count", _clamp(self.end_count, 1, None, 1))
        days = frozenset(d for d in self.days_of_week if isinstance(d, int) and 0 <= d <= 6)
        object.__setattr__(self, "days_of_week", days or frozenset({1}))

    def toggle_day(self, day: int) -> RecurrenceRule:
        if day in self.days_of_week:
            if len(self.days_of_week) == 1:
                return self
            return replace(self, days_of_week=self.days_of_week - {day})
        return replace(self, days_of_week=self.days_of_week | {day})

    def to_dict(self) -> dict:
        return {
            "enabled": self.enabled,
            "frequency": self.frequency.value,
            "interval": self.interval,
            "days_of_week": sorted(self.days_of_week),
            "day_of_month": self.day_of_month,
            "time": self.time.strftime("%H:%M"),
            "end_type": self.end_type.value,
            "end_date": self.end_date.isoformat() if self.end_date else None,
            "end_count": self.end_count,
        }

    @classmethod
    def from_dict(cls, data: dict) -> RecurrenceRule:
        raw_days = data.get("days_of_week") or []
        days = set()
        for value in raw_days:
            try:
                days.add(int(value))
            except (TypeError, ValueError):
                continue
        return cls(
            enabled=bool(data.get("enabled", False)),
            frequency=coerce_enum(Frequency, data.get("frequency"), Frequency.WEEKLY),
            interval=data.get("interval", 1),
            days_of_week=frozenset(days),
            day_of_month=data.get("day_of_month", 1),
            time=_parse_time(data.get("time")),
            end_type=coerce_enum(EndType, data.get("end_type"), EndType.NEVER),
            end_date=_parse_date(data.get("end_date")),
            end_count=data.get("end_count", 10),
        )


def coerce_enum(enum_cls, value, default):
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).strip().lower())
    except ValueError:
        return default


def _parse_time(value) -> time:
    if isinstance(value, time):
        return value
    if not value:
        return DEFAULT_RULE_TIME
    try:
        hours, minutes = str(value).split(":")[:2]
        return time(_clamp(hours, 0, 23, 9), _clamp(minutes, 0, 59, 0))
    except ValueError:
        return DEFAULT_RULE_TIME


def _parse_date(value) -> date | None:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not value:
        return None
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        return None


@dataclass(frozen=True)
class TaskEntity:
    id: int
    title: str
    status: TaskStatus
    quadrant: Optional[Quadrant]
    due_date: Optional[datetime]
    created_at: datetime
    completed_at: Optional[datetime] = None
    recurrence: Optional[RecurrenceRule] = None
    priority: Priority = Priority.NONE
    assignee: str | None = None
    project: str | None = None
    duration: str | None = None

    @property
    def score(self) -> int:
        if self.quadrant is None:
            return 0
        return QUADRANT_SCORES[self.quadrant]

    @property
    def is_done(self) -> bool:
        return self.status == TaskStatus.DONE


@dataclass(frozen=True)
class Occurrence:
    at: datetime
    index: int


@dataclass(frozen=True)
class NotificationEntity:
    id: int
    task_id: int
    message: str
    kind: NotificationKind
    state: NotificationState
    due_at: datetime
    created_at: datetime
    activated_at: Optional[datetime] = None
    snooze_count: int = 0

    @property
    def is_live(self) -> bool:
        return self.state in (NotificationState.PENDING, NotificationState.ACTIVE)


@dataclass(frozen=True)
class Plan:
    created_at: datetime
    tasks: list[TaskEntity] = field(default_factory=list)
    summary: str = ""
