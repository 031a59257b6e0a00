from __future__ import annotations

from datetime import date, datetime, time

from triage.domain.entities import RecurrenceRule
from triage.domain.enums import EndType, Frequency, Weekday
from triage.services.recurrence import (
    add_months,
    describe,
    next_occurrence,
    occurrences,
    occurrences_count,
    sunday_index,
)

MON_WED_FRI = frozenset({Weekday.MONDAY, Weekday.WEDNESDAY, Weekday.FRIDAY})


def weekly(**overrides) -> RecurrenceRule:
    values = {"enabled": True, "frequency": Frequency.WEEKLY, "days_of_week": MON_WED_FRI}
    values.update(overrides)
    return RecurrenceRule(**values)


def test_weekly_from_tuesday_picks_wednesday(now: datetime) -> None:
    assert sunday_index(now.date()) == Weekday.TUESDAY
    assert next_occurrence(weekly(), now) == datetime(2026, 10, 21, 9, 0)


def test_weekly_skips_off_weeks_for_larger_interval(now: datetime) -> None:
    rule = weekly(interval=2, days_of_week=frozenset({Weekday.MONDAY}))

    assert next_occurrence(rule, now, anchor=now) == datetime(2026, 11, 2, 9, 0)


def test_weekly_scan_reaches_a_full_interval_ahead() -> None:
    sunday = datetime(2026, 10, 18, 10, 0)
    rule = weekly(interval=3, days_of_week=frozenset({Weekday.SUNDAY}))

    # today's slot already passed, the next one is exactly three weeks out
    assert next_occurrence(rule, sunday, anchor=sunday) == datetime(2026, 11, 8, 9, 0)


def test_monthly_day_31_clamps_to_month_end() -> None:
    rule = RecurrenceRule(enabled=True, frequency=Frequency.MONTHLY, day_of_month=31)

    assert next_occurrence(rule, datetime(2026, 2, 10, 8, 0)) == datetime(2026, 2, 28, 9, 0)
    assert next_occurrence(rule, datetime(2028, 2, 10, 8, 0)) == datetime(2028, 2, 29, 9, 0)
    assert next_occurrence(rule, datetime(2026, 1, 31, 10, 0)) == datetime(2026, 2, 28, 9, 0)


def test_monthly_interval_counts_from_anchor() -> None:
    rule = RecurrenceRule(enabled=True, frequency=Frequency.MONTHLY, interval=2, day_of_month=15)

    upcoming = next_occurrence(rule, datetime(2026, 2, 20, 8, 0), anchor=date(2026, 1, 15))

    assert upcoming == datetime(2026, 3, 15, 9, 0)


def test_daily_interval_counts_from_anchor(now: datetime) -> None:
    rule = RecurrenceRule(enabled=True, frequency=Frequency.DAILY, interval=3)

    assert next_occurrence(rule, now, anchor=date(2026, 10, 1)) == datetime(2026, 10, 22, 9, 0)


def test_non_positive_interval_is_treated_as_one(now: datetime) -> None:
    rule = RecurrenceRule(enabled=True, frequency=Frequency.DAILY, interval=0)

    assert rule.interval == 1
    assert next_occurrence(rule, now) == datetime(2026, 10, 21, 9, 0)


def test_disabled_rule_never_fires(now: datetime) -> None:
    assert next_occurrence(RecurrenceRule(), now) is None
    assert describe(RecurrenceRule()) == "Not repeating"
    assert occurrences_count(RecurrenceRule()) == 0


def test_end_date_stops_series(now: datetime) -> None:
    rule = RecurrenceRule(
        enabled=True,
        frequency=Frequency.DAILY,
        end_type=EndType.ON_DATE,
        end_date=date(2026, 10, 20),
    )

    assert next_occurrence(rule, now) is None
    assert next_occurrence(rule, datetime(2026, 10, 20, 8, 0)) == datetime(2026, 10, 20, 9, 0)


def test_end_count_stops_series(now: datetime) -> None:
    rule = weekly(end_type=EndType.AFTER_COUNT, end_count=3)

    assert next_occurrence(rule, now, count=2) is not None
    assert next_occurrence(rule, now, count=3) is None

    series = occurrences(rule, now, limit=10)
    assert [item.index for item in series] == [1, 2, 3]
    assert [item.at.date() for item in series] == [
        date(2026, 10, 21),
        date(2026, 10, 23),
        date(2026, 10, 26),
    ]


def test_occurrences_count(now: datetime) -> None:
    daily = RecurrenceRule(enabled=True, frequency=Frequency.DAILY)
    until = RecurrenceRule(
        enabled=True,
        frequency=Frequency.DAILY,
        end_type=EndType.ON_DATE,
        end_date=date(2026, 10, 25),
    )

    assert occurrences_count(daily) is None
    assert occurrences_count(weekly(end_type=EndType.AFTER_COUNT, end_count=4)) == 4
    assert occurrences_count(until) is None
    assert occurrences_count(until, start=now) == 5


def test_rule_values_are_clamped() -> None:
    rule = RecurrenceRule.from_dict(
        {
            "enabled": True,
            "frequency": "MONTHLY",
            "interval": -4,
            "day_of_month": 40,
            "days_of_week": [],
            "time": "18:30",
            "end_type": "bogus",
            "end_count": 0,
        }
    )

    assert rule.frequency == Frequency.MONTHLY
    assert rule.interval == 1
    assert rule.day_of_month == 31
    assert rule.days_of_week == frozenset({Weekday.MONDAY})
    assert rule.time == time(18, 30)
    assert rule.end_type == EndType.NEVER
    assert rule.end_count == 1


def test_rule_dict_round_trip() -> None:
    rule = weekly(end_type=EndType.ON_DATE, end_date=date(2026, 12, 31), time=time(7, 45))

    assert RecurrenceRule.from_dict(rule.to_dict()) == rule


def test_toggle_day_never_empties_the_set() -> None:
    rule = weekly(days_of_week=frozenset({Weekday.MONDAY}))

    assert rule.toggle_day(Weekday.MONDAY) is rule
    added = rule.toggle_day(Weekday.SATURDAY)
    assert added.days_of_week == frozenset({Weekday.MONDAY, Weekday.SATURDAY})
    assert added.toggle_day(Weekday.MONDAY).days_of_week == frozenset({Weekday.SATURDAY})


def test_describe() -> None:
    assert describe(weekly()) == "Weekly on Mon, Wed, Fri at 9:00 AM"
    assert (
        describe(RecurrenceRule(enabled=True, frequency=Frequency.DAILY, interval=2, time=time(18, 30)))
        == "Every 2 days at 6:30 PM"
    )
    assert (
        describe(
            RecurrenceRule(
                enabled=True,
                frequency=Frequency.MONTHLY,
                day_of_month=22,
                time=time(12, 0),
                end_type=EndType.AFTER_COUNT,
                end_count=5,
            )
        )
        == "Monthly on the 22nd at 12:00 PM, 5x"
    )
    assert describe(weekly(end_type=EndType.ON_DATE, end_date=date(2026, 12, 31))).endswith(
        " until 2026-12-31"
    )


def test_add_months_clamps_day() -> None:
    assert add_months(date(2026, 1, 31), 1) == date(2026, 2, 28)
    assert add_months(date(2026, 11, 30), 3) == date(2027, 2, 28)
