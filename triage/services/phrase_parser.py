from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from .date_extractor import DateExtractor

logger = logging.getLogger(__name__)

# Rewrites applied before extraction. "day after tomorrow" is listed ahead of
# "day after" so the idiom keeps its own +2 days and the slang never applies
# on top of it. A bare "at 8" gains minutes so the clock is recognised.
SLANG_RE = re.compile(
    r"(?P<idiom>\bday after tomorrow\b)"
    r"|(?P<tommo>\btommo\b)"
    r"|(?P<day_after>\bday after\b)"
    r"|(?P<bare_hour>\bat\s+(?P<hour>\d{1,2})\b(?!\s*(?::\d|\.\d|[ap]\.?m\b)))",
    re.IGNORECASE,
)

SLANG_REPLACEMENTS = {
    "idiom": "in 2 days",
    "tommo": "tomorrow",
    "day_after": "in 2 days",
}


@dataclass(frozen=True)
class ParsedPhrase:
    date: datetime
    matched_text: str
    start: int
    length: int
    has_time: bool = False
    offsets_normalized: bool = False


@dataclass(frozen=True)
class Rewrite:
    """One rewritten region: ``start``/``end`` in the normalized text."""

    start: int
    end: int
    original_start: int
    original_end: int

    @property
    def shift(self) -> int:
        return (self.original_end - self.original_start) - (self.end - self.start)


def _replacement(match: re.Match) -> str:
    if match.lastgroup == "bare_hour":
        return f"at {match.group('hour')}:00"
    return SLANG_REPLACEMENTS[match.lastgroup]


def rewrite_slang(text: str) -> tuple[str, list[Rewrite]]:
    pieces: list[str] = []
    rewrites: list[Rewrite] = []
    cursor = 0
    length = 0
    for match in SLANG_RE.finditer(text):
        pieces.append(text[cursor:match.start()])
        length += match.start() - cursor
        replacement = _replacement(match)
        rewrites.append(Rewrite(length, length + len(replacement), match.start(), match.end()))
        pieces.append(replacement)
        length += len(replacement)
        cursor = match.end()
    pieces.append(text[cursor:])
    return "".join(pieces), rewrites


def normalize_slang(text: str) -> str:
    return rewrite_slang(text)[0]


def span_to_original(rewrites: list[Rewrite], start: int, end: int) -> tuple[int, int]:
    # a span that cuts into a rewrite is widened to cover all of it
    for rewrite in rewrites:
        if rewrite.start < end and start < rewrite.end:
            start = min(start, rewrite.start)
            end = max(end, rewrite.end)

    original_start, original_end = start, end
    for rewrite in rewrites:
        if rewrite.end <= start:
            original_start += rewrite.shift
        if rewrite.end <= end:
            original_end += rewrite.shift
    return original_start, original_end


class PhraseParser:
    """Pulls the first date/time phrase out of task text.

    Slang is rewritten before extraction and the reported span is mapped back
    onto the text the user typed, so callers can highlight it in place.
    """

    def __init__(self, extractor: DateExtractor | None = None) -> None:
        self._extractor = extractor or DateExtractor()

    def parse(self, text: str, reference: datetime) -> Optional[ParsedPhrase]:
        if not text:
            return None

        processed, rewrites = rewrite_slang(text)
        matches = self._extractor.extract(processed, reference)
        if not matches:
            return None

        match = matches[0]
        if not rewrites:
            return ParsedPhrase(
                date=match.value,
                matched_text=match.text,
                start=match.start,
                length=len(match.text),
                has_time=match.has_time,
            )

        if processed[match.start:match.end].lower() != match.text.lower():
            logger.debug("Could not map %r back onto the original text", match.text)
            return ParsedPhrase(
                date=match.value,
                matched_text=match.text,
                start=match.start,
                length=len(match.text),
                has_time=match.has_time,
                offsets_normalized=True,
            )

        start, end = span_to_original(rewrites, match.start, match.end)
        return ParsedPhrase(
            date=match.value,
            matched_text=text[start:end],
            start=start,
            length=end - start,
            has_time=match.has_time,
        )


def parse_date(text: str, reference: datetime) -> Optional[ParsedPhrase]:
    return PhraseParser().parse(text, reference)
