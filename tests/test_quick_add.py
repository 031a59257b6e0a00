from __future__ import annotations

from datetime import datetime

from triage.domain.enums import Priority
from triage.services.quick_add import parse_task_input


def test_inline_markers_are_extracted(now: datetime) -> None:
    result = parse_task_input("Email report to @sam #q3 !high ~30m tomorrow at 9am", now)

    assert result is not None
    assert result.title == "Email report to"
    assert result.assignee == "sam"
    assert result.project == "q3"
    assert result.priority == Priority.HIGH
    assert result.duration == "30m"
    assert result.due_date == datetime(2026, 10, 21, 9, 0)
    assert result.has_time is True
    assert "tomorrow at 9am" in result.extracted_text


def test_priority_keyword_without_marker(now: datetime) -> None:
    result = parse_task_input("Finish slides asap", now)

    assert result is not None
    assert result.priority == Priority.CRITICAL
    assert result.title == "Finish slides"
    assert result.due_date is None


def test_two_word_assignee(now: datetime) -> None:
    result = parse_task_input("Review budget with @Jane Doe", now)

    assert result is not None
    assert result.assignee == "Jane Doe"
    assert result.title == "Review budget with"


def test_plain_text_returns_none(now: datetime) -> None:
    assert parse_task_input("buy milk", now) is None
    assert parse_task_input("", now) is None
