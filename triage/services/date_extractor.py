"""Date and time extraction from free text, backed by parsedatetime.

``Calendar.nlp`` finds every date phrase together with its span. Its results
are then pushed forward: a clock time that already passed today moves to
tomorrow, and an hour said "tonight" or "in the evening" moves past noon.
Weekdays and month/day dates already resolve forward inside the library.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

import parsedatetime

logger = logging.getLogger(__name__)

EVENING_WORDS = re.compile(r"\b(?:tonight|evening|night|afternoon)\b", re.IGNORECASE)
EXPLICIT_AM = re.compile(r"\d\s*a\.?m\b", re.IGNORECASE)
# phrases that pin the result to now, today or the past
ANCHORED_WORDS = re.compile(
    r"\b(?:now|today|ago|yesterday|last|before|prior|prev|previous)\b", re.IGNORECASE
)


@dataclass(frozen=True)
class DateMatch:
    start: int
    end: int
    text: str
    value: datetime
    has_time: bool


def _has_time(context) -> bool:
    if hasattr(context, "hasTime"):
        return bool(context.hasTime)
    # flag style: 1 date, 2 time, 3 both
    return context in (2, 3)


def push_forward(value: datetime, phrase: str, reference: datetime) -> datetime:
    """Move a resolved clock time so it lands after ``reference``."""
    if value.hour < 12 and EVENING_WORDS.search(phrase) and not EXPLICIT_AM.search(phrase):
        value += timedelta(hours=12)
    if value.date() != reference.date() or value > reference or ANCHORED_WORDS.search(phrase):
        return value
    return value + timedelta(days=1)


class DateExtractor:
    def __init__(self, calendar: Optional[parsedatetime.Calendar] = None) -> None:
        self._calendar = calendar or parsedatetime.Calendar(
            version=parsedatetime.VERSION_CONTEXT_STYLE
        )

    def extract(self, text: str, reference: datetime) -> list[DateMatch]:
        if not text or not text.strip():
            return []

        found = self._calendar.nlp(text, sourceTime=reference.replace(tzinfo=None).timetuple())
        if not found:
            return []

        matches = []
        for value, context, start, end, phrase in found:
            has_time = _has_time(context)
            value = value.replace(tzinfo=reference.tzinfo)
            if has_time:
                value = push_forward(value, phrase, reference)
            matches.append(DateMatch(start=start, end=end, text=phrase, value=value, has_time=has_time))

        logger.debug("Extracted %d date phrase(s) from %r", len(matches), text)
        return sorted(matches, key=lambda match: match.start)
