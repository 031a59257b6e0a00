from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timedelta

MINUTE = 60
HOUR = 60 * MINUTE
DAY = 24 * HOUR


@dataclass(frozen=True)
class DeadlineStatus:
    label: str
    progress_percent: float
    overdue: bool
    phrase: str


def _countdown_parts(seconds: float) -> list[str]:
    units = (
        ("y", seconds // (365 * DAY)),
        ("mo", (seconds // (30 * DAY)) % 12),
        ("w", (seconds // (7 * DAY)) % 4),
        ("d", (seconds // DAY) % 7),
        ("h", (seconds // HOUR) % 24),
        ("m", (seconds // MINUTE) % 60),
    )
    return [f"{int(value)}{suffix}" for suffix, value in units if value > 0]


def deadline_phrase(days_left: int) -> str:
    if days_left < 0:
        return "Too little, too late."
    if days_left == 0:
        return "Panic mode: ON."
    if days_left <= 1:
        return "Do it now or regret it later."
    if days_left <= 3:
        return "Tick tock, the clock is ticking."
    if days_left <= 7:
        return "Don't get too comfortable."
    return "Future you will thank you."


def deadline_status(due: datetime, created_at: datetime | None, now: datetime) -> DeadlineStatus:
    created = created_at or now
    total = (due - created).total_seconds()
    elapsed = (now - created).total_seconds()
    progress = (elapsed / total) * 100 if total > 0 else 100.0
    progress = min(100.0, max(0.0, progress))

    diff = due - now
    overdue = diff < timedelta(0)
    parts = _countdown_parts(abs(diff.total_seconds()))
    if parts:
        label = f"{' '.join(parts)} {'overdue' if overdue else 'left'}"
    else:
        label = "Due now"

    days_left = math.ceil(diff.total_seconds() / DAY)
    return DeadlineStatus(
        label=label,
        progress_percent=progress,
        overdue=overdue,
        phrase=deadline_phrase(days_left),
    )
