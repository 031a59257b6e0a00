from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Optional

from triage.domain.entities import Occurrence, RecurrenceRule
from triage.domain.enums import EndType, Frequency, Weekday

# Upper bound when counting an end-dated series one occurrence at a time.
MAX_SERIES_LENGTH = 10_000

DAY_NAMES = {day.value: day.name[:3].title() for day in Weekday}


def next_occurrence(
    rule: RecurrenceRule,
    after: datetime,
    *,
    anchor: date | datetime | None = None,
    count: int = 0,
) -> Optional[datetime]:
    """Return the first occurrence strictly after ``after``.

    ``anchor`` fixes the day/week/month grid the interval is counted from and
    defaults to ``after``'s date. ``count`` is the number of occurrences the
    caller has already fired; it only matters for count-limited series.
    """
    if not rule.enabled:
        return None
    if rule.end_type == EndType.AFTER_COUNT and count >= rule.end_count:
        return None

    anchor_day = _as_date(anchor) if anchor is not None else after.date()
    interval = max(int(rule.interval or 1), 1)

    if rule.frequency == Frequency.DAILY:
        candidate = _next_daily(rule, after, anchor_day, interval)
    elif rule.frequency == Frequency.WEEKLY:
        candidate = _next_weekly(rule, after, anchor_day, interval)
    else:
        candidate = _next_monthly(rule, after, anchor_day, interval)

    if candidate is None:
        return None
    if rule.end_type == EndType.ON_DATE and rule.end_date and candidate.date() > rule.end_date:
        return None
    return candidate


def occurrences(
    rule: RecurrenceRule,
    after: datetime,
    *,
    limit: int,
    anchor: date | datetime | None = None,
    count: int = 0,
) -> list[Occurrence]:
    anchor_day = _as_date(anchor) if anchor is not None else after.date()
    result: list[Occurrence] = []
    cursor = after
    while len(result) < limit:
        fired = count + len(result)
        upcoming = next_occurrence(rule, cursor, anchor=anchor_day, count=fired)
        if upcoming is None:
            break
        result.append(Occurrence(at=upcoming, index=fired + 1))
        cursor = upcoming
    return result


def occurrences_count(rule: RecurrenceRule, *, start: datetime | None = None) -> Optional[int]:
    """Total length of the series, ``None`` when it is unbounded or unknown."""
    if not rule.enabled:
        return 0
    if rule.end_type == EndType.AFTER_COUNT:
        return rule.end_count
    if rule.end_type == EndType.NEVER or start is None or rule.end_date is None:
        return None
    return len(occurrences(rule, start, limit=MAX_SERIES_LENGTH))


def describe(rule: RecurrenceRule) -> str:
    if not rule.enabled:
        return "Not repeating"

    interval = rule.interval
    time_label = _format_time(rule)
    if rule.frequency == Frequency.DAILY:
        text = f"Daily at {time_label}" if interval == 1 else f"Every {interval} days at {time_label}"
    elif rule.frequency == Frequency.WEEKLY:
        days = ", ".join(DAY_NAMES[day] for day in sorted(rule.days_of_week))
        text = (
            f"Weekly on {days} at {time_label}"
            if interval == 1
            else f"Every {interval} weeks on {days} at {time_label}"
        )
    else:
        day = _ordinal(rule.day_of_month)
        text = (
            f"Monthly on the {day} at {time_label}"
            if interval == 1
            else f"Every {interval} months on the {day} at {time_label}"
        )

    if rule.end_type == EndType.ON_DATE and rule.end_date:
        text += f" until {rule.end_date.isoformat()}"
    elif rule.end_type == EndType.AFTER_COUNT:
        text += f", {rule.end_count}x"
    return text


def add_months(base: date, months: int) -> date:
    year = base.year + (base.month - 1 + months) // 12
    month = (base.month - 1 + months) % 12 + 1
    day = min(base.day, days_in_month(year, month))
    return date(year, month, day)


def days_in_month(year: int, month: int) -> int:
    if month == 12:
        next_month = date(year + 1, 1, 1)
    else:
        next_month = date(year, month + 1, 1)
    return (next_month - timedelta(days=1)).day


def sunday_index(day: date) -> int:
    return (day.weekday() + 1) % 7


def _week_start(day: date) -> date:
    return day - timedelta(days=sunday_index(day))


def _as_date(value: date | datetime) -> date:
    return value.date() if isinstance(value, datetime) else value


def _at(rule: RecurrenceRule, day: date, after: datetime) -> datetime:
    return datetime.combine(day, rule.time, tzinfo=after.tzinfo)


def _next_daily(
    rule: RecurrenceRule, after: datetime, anchor: date, interval: int
) -> datetime:
    start = max(after.date(), anchor)
    steps = -(-(start - anchor).days // interval)
    day = anchor + timedelta(days=steps * interval)
    candidate = _at(rule, day, after)
    if candidate <= after:
        candidate = _at(rule, day + timedelta(days=interval), after)
    return candidate


def _next_weekly(
    rule: RecurrenceRule, after: datetime, anchor: date, interval: int
) -> Optional[datetime]:
    start = max(after.date(), anchor)
    anchor_week = _week_start(anchor)
    for offset in range(interval * 7 + 7):
        day = start + timedelta(days=offset)
        if sunday_index(day) not in rule.days_of_week:
            continue
        weeks_apart = (_week_start(day) - anchor_week).days // 7
        if weeks_apart % interval:
            continue
        candidate = _at(rule, day, after)
        if candidate > after:
            return candidate
    return None


def _next_monthly(
    rule: RecurrenceRule, after: datetime, anchor: date, interval: int
) -> Optional[datetime]:
    first_month = date(anchor.year, anchor.month, 1)
    months_apart = (after.year - anchor.year) * 12 + after.month - anchor.month
    step = max(months_apart // interval, 0)
    for offset in range(step, step + 3):
        month = add_months(first_month, offset * interval)
        day = month.replace(day=min(rule.day_of_month, days_in_month(month.year, month.month)))
        if day < anchor:
            continue
        candidate = _at(rule, day, after)
        if candidate > after:
            return candidate
    return None


def _format_time(rule: RecurrenceRule) -> str:
    hours, minutes = rule.time.hour, rule.time.minute
    display = hours - 12 if hours > 12 else hours or 12
    meridiem = "PM" if hours >= 12 else "AM"
    return f"{display}:{minutes:02d} {meridiem}"


def _ordinal(day: int) -> str:
    if 11 <= day % 100 <= 13:
        return f"{day}th"
    suffix = {1: "st", 2: "nd", 3: "rd"}.get(day % 10, "th")
    return f"{day}{suffix}"
