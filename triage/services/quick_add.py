from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from triage.domain.enums import Priority

from .phrase_parser import PhraseParser

# Checked in order, the first keyword present wins.
PRIORITY_KEYWORDS: tuple[tuple[str, Priority], ...] = (
    ("urgent", Priority.CRITICAL),
    ("asap", Priority.CRITICAL),
    ("critical", Priority.CRITICAL),
    ("high priority", Priority.HIGH),
    ("important", Priority.HIGH),
    ("high", Priority.HIGH),
    ("medium priority", Priority.MEDIUM),
    ("medium", Priority.MEDIUM),
    ("low priority", Priority.LOW),
    ("low", Priority.LOW),
    ("whenever", Priority.LOW),
)

ASSIGNEE_RE = re.compile(r"@(\w+(?:\s+\w+)?)")
PROJECT_RE = re.compile(r"#([\w-]+)")
PRIORITY_RE = re.compile(r"!(critical|high|medium|low)", re.IGNORECASE)
DURATION_RE = re.compile(r"~(\d+(?:\.\d+)?)(h|m|d)", re.IGNORECASE)

_MARKERS = (
    re.compile(r"@\w+"),
    re.compile(r"#[\w-]+"),
    re.compile(r"!(critical|high|medium|low)", re.IGNORECASE),
    re.compile(r"~\d+(?:\.\d+)?[hmd]", re.IGNORECASE),
)
_LEFTOVER_TIMES = (
    re.compile(r"\b(?:at\s+)?\d{1,2}:\d{2}(?:\s?[ap]m)?\b", re.IGNORECASE),
    re.compile(r"(?:^|\s):\d{2}(?:\s?[ap]m)?\b", re.IGNORECASE),
    re.compile(r"\b\d{1,2}\s?[ap]m\b", re.IGNORECASE),
)


@dataclass
class QuickAddResult:
    title: str
    assignee: str | None = None
    project: str | None = None
    priority: Priority = Priority.NONE
    due_date: Optional[datetime] = None
    has_time: bool = False
    duration: str | None = None
    extracted_text: list[str] = field(default_factory=list)

    @property
    def extracted_anything(self) -> bool:
        return bool(
            self.assignee
            or self.project
            or self.priority != Priority.NONE
            or self.due_date
            or self.duration
        )


def _remove_first(text: str, fragment: str) -> str:
    return re.sub(re.escape(fragment), "", text, count=1, flags=re.IGNORECASE)


def _clean_title(text: str) -> str:
    cleaned = re.sub(r"\s{2,}", " ", text)
    cleaned = re.sub(r"^[\s\"']+|[\s\"']+$", "", cleaned)
    cleaned = re.sub(r"^[,\s]+|[,\s]+$", "", cleaned)
    for pattern in _LEFTOVER_TIMES:
        cleaned = pattern.sub("", cleaned)
    return re.sub(r"\s{2,}", " ", cleaned).strip()


def parse_task_input(
    text: str, now: datetime, parser: PhraseParser | None = None
) -> Optional[QuickAddResult]:
    """Split quick-add text into a title and its inline markers.

    Understands ``@assignee``, ``#project``, ``!priority``, ``~duration``, a
    natural-language due date and plain priority keywords. Returns ``None``
    when the text carries none of them.
    """
    if not text:
        return None

    parser = parser or PhraseParser()
    result = QuickAddResult(title=text)
    working = text

    date_text = text
    for marker in _MARKERS:
        date_text = marker.sub("", date_text)
    date_text = re.sub(r"\s+", " ", date_text).strip()

    parsed = parser.parse(date_text, now)
    if parsed is not None:
        result.due_date = parsed.date
        result.has_time = parsed.has_time
        result.extracted_text.append(parsed.matched_text)
        working = _remove_first(working, parsed.matched_text)

    assignee = ASSIGNEE_RE.search(working)
    if assignee:
        result.assignee = assignee.group(1)
        result.extracted_text.append(assignee.group(0))
        working = working.replace(assignee.group(0), "", 1)

    project = PROJECT_RE.search(working)
    if project:
        result.project = project.group(1)
        result.extracted_text.append(project.group(0))
        working = working.replace(project.group(0), "", 1)

    priority = PRIORITY_RE.search(working)
    if priority:
        result.priority = Priority(priority.group(1).lower())
        result.extracted_text.append(priority.group(0))
        working = working.replace(priority.group(0), "", 1)

    duration = DURATION_RE.search(working)
    if duration:
        result.duration = duration.group(0)[1:]
        result.extracted_text.append(duration.group(0))
        working = working.replace(duration.group(0), "", 1)

    if result.priority == Priority.NONE:
        for keyword, level in PRIORITY_KEYWORDS:
            keyword_re = re.compile(rf"\b{re.escape(keyword)}\b", re.IGNORECASE)
            if keyword_re.search(working):
                result.priority = level
                result.extracted_text.append(keyword)
                working = keyword_re.sub("", working)
                break

    result.title = _clean_title(working) or text

    if not result.extracted_anything:
        return None
    return result
