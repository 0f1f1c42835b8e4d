"""
Rule-based slot extraction.

Turns "Monday 9-11am and Wednesday 6-8pm" into TimeSlots, and
"Delete the Monday session booked from 6-9am" into DeletionCriteria.
Candidates that do not form a valid slot are dropped, never raised.
"""

import logging
import re
from dataclasses import dataclass
from typing import Iterator, Optional

from gymbuddy.core.intelligence.text import (
    DAYPART_PATTERN,
    RANGE_SEPARATOR,
    DayToken,
    find_day_tokens,
    normalize_text,
)
from .types import DeletionCriteria, TimeSlot

logger = logging.getLogger(__name__)


_START = r"(?<![\d:/.-])"
_HOUR = r"(\d{1,2})"
_MINUTE = r"(?::(\d{2}))?"
_MERIDIEM = r"\s*(am|pm)\b"

# Only connectors between two day tokens: "saturday and sunday"
_CONNECTOR_ONLY = re.compile(r"[\s,&/]*(?:(?:and|or|on)\b[\s,&/]*)*")

# Fixed ranges for daypart words
DAYPART_RANGES: dict[str, tuple[int, int]] = {
    "morning": (6, 12),
    "afternoon": (12, 17),
    "evening": (17, 21),
}


@dataclass(frozen=True)
class TimeMatcher:
    """A time-range pattern and how to read its groups."""

    name: str
    pattern: re.Pattern
    # (start hour, start minute, start meridiem, end hour, end minute, end meridiem)
    # as group indexes, 0 meaning "not captured"
    groups: tuple[int, int, int, int, int, int]
    twelve_hour: bool
    # Single times: end is start plus this many hours, capped at 23
    duration: Optional[int] = None


TIME_MATCHERS: tuple[TimeMatcher, ...] = (
    # "10am-2pm", "6:30pm to 8:30pm"
    TimeMatcher(
        name="meridiem_both",
        pattern=re.compile(_START + _HOUR + _MINUTE + _MERIDIEM + RANGE_SEPARATOR + _HOUR + _MINUTE + _MERIDIEM),
        groups=(1, 2, 3, 4, 5, 6),
        twelve_hour=True,
    ),
    # "9-11am", "6:30-8:30pm"
    TimeMatcher(
        name="meridiem_shared",
        pattern=re.compile(_START + _HOUR + _MINUTE + RANGE_SEPARATOR + _HOUR + _MINUTE + _MERIDIEM),
        groups=(1, 2, 5, 3, 4, 5),
        twelve_hour=True,
    ),
    # "9am to 11", "6pm to 8": the end takes the start's meridiem
    TimeMatcher(
        name="meridiem_start",
        pattern=re.compile(
            _START + _HOUR + _MINUTE + _MERIDIEM + RANGE_SEPARATOR + _HOUR + _MINUTE
            + r"(?![\d:])(?!\s*(?:am|pm)\b)"
        ),
        groups=(1, 2, 3, 4, 5, 3),
        twelve_hour=True,
    ),
    # "14:00-16:00"
    TimeMatcher(
        name="clock_24h",
        pattern=re.compile(_START + _HOUR + r":(\d{2})" + RANGE_SEPARATOR + _HOUR + r":(\d{2})(?![\d:])"),
        groups=(1, 2, 0, 3, 4, 0),
        twelve_hour=False,
    ),
    # "6-9", read as 24-hour
    TimeMatcher(
        name="bare_range",
        pattern=re.compile(_START + _HOUR + RANGE_SEPARATOR + _HOUR + r"(?![\d:])(?!\s*(?:am|pm)\b)"),
        groups=(1, 0, 0, 2, 0, 0),
        twelve_hour=False,
    ),
    # "at 9am", "6:30pm": a two-hour slot
    TimeMatcher(
        name="single_time",
        pattern=re.compile(_START + _HOUR + _MINUTE + _MERIDIEM),
        groups=(1, 2, 3, 0, 0, 0),
        twelve_hour=True,
        duration=2,
    ),
)


def to_24_hour(hour: int, meridiem: Optional[str]) -> Optional[int]:
    """
    Convert a clock hour to 0-23.

    pm adds 12 to 1-11 and keeps 12; am maps 12 to 0 and keeps 1-11.
    Without meridiem the hour is taken as 24-hour. Out-of-range hours give None.
    """
    if meridiem:
        if not 1 <= hour <= 12:
            return None
        if meridiem == "pm":
            return hour if hour == 12 else hour + 12
        return 0 if hour == 12 else hour

    if not 0 <= hour <= 23:
        return None
    return hour


@dataclass(frozen=True)
class _Candidate:
    """A matched time range before validation."""

    start: int
    end: int
    source: str
    start_hour: Optional[int]
    end_hour: Optional[int]
    single: bool = False

    @property
    def is_valid(self) -> bool:
        return (
            self.start_hour is not None
            and self.end_hour is not None
            and self.end_hour > self.start_hour
        )


def _read(match: re.Match, index: int) -> Optional[str]:
    return match.group(index) if index else None


def _build_candidate(matcher: TimeMatcher, match: re.Match) -> _Candidate:
    sh, sm, smer, eh, em, emer = matcher.groups
    endpoints = [(sh, sm, smer)]
    if matcher.duration is None:
        endpoints.append((eh, em, emer))

    hours = []
    for hour_idx, minute_idx, meridiem_idx in endpoints:
        minute = _read(match, minute_idx)
        if minute is not None and int(minute) > 59:
            hours.append(None)
            continue
        # Minutes are truncated to the hour
        hours.append(to_24_hour(int(match.group(hour_idx)), _read(match, meridiem_idx)))

    if matcher.duration is not None:
        start_hour = hours[0]
        hours.append(None if start_hour is None else min(start_hour + matcher.duration, 23))

    return _Candidate(
        start=match.start(),
        end=match.end(),
        source=matcher.name,
        start_hour=hours[0],
        end_hour=hours[1],
        single=matcher.duration is not None,
    )


def _numeric_candidates(segment: str) -> list[_Candidate]:
    """Apply matchers most specific first; later matchers skip claimed spans."""
    claimed: list[tuple[int, int]] = []
    found: list[_Candidate] = []

    for matcher in TIME_MATCHERS:
        for match in matcher.pattern.finditer(segment):
            if any(match.start() < end and start < match.end() for start, end in claimed):
                continue
            claimed.append((match.start(), match.end()))
            found.append(_build_candidate(matcher, match))

    found.sort(key=lambda c: c.start)
    return found


def _daypart_candidates(segment: str) -> list[_Candidate]:
    found = []
    for match in DAYPART_PATTERN.finditer(segment):
        word = match.group(0).rstrip("s")
        start_hour, end_hour = DAYPART_RANGES[word]
        found.append(
            _Candidate(
                start=match.start(),
                end=match.end(),
                source="daypart",
                start_hour=start_hour,
                end_hour=end_hour,
            )
        )
    return found


def _segment_ranges(segment: str) -> list[_Candidate]:
    """Valid ranges in a day-scoped segment, in text order."""
    numeric = _numeric_candidates(segment)
    candidates = numeric or _daypart_candidates(segment)

    valid = []
    for candidate in candidates:
        if candidate.is_valid:
            valid.append(candidate)
        else:
            logger.debug(
                f"Discarded {candidate.source} candidate "
                f"{segment[candidate.start:candidate.end]!r}"
            )
    return valid


def _day_groups(text: str, tokens: list[DayToken]) -> list[tuple[tuple, int, int]]:
    """
    Partition text into (days, segment start, segment end).

    Day tokens separated only by connectors share the following segment.
    """
    groups = []
    pending: list = []

    for i, token in enumerate(tokens):
        pending.extend(day for day in token.days if day not in pending)
        is_last = i + 1 == len(tokens)
        segment_end = len(text) if is_last else tokens[i + 1].start

        if not is_last and _CONNECTOR_ONLY.fullmatch(text[token.end:segment_end]):
            continue

        groups.append((tuple(pending), token.end, segment_end))
        pending = []

    return groups


class SlotSequence:
    """
    Lazy, restartable sequence of slots found in one message.

    Each iteration re-runs extraction over the same text.
    """

    def __init__(self, extractor: "SlotExtractor", text: str):
        self._extractor = extractor
        self._text = text

    def __iter__(self) -> Iterator[TimeSlot]:
        return self._extractor._iter_slots(self._text)

    def __bool__(self) -> bool:
        return next(iter(self), None) is not None

    def to_list(self) -> list[TimeSlot]:
        return list(self)

    def __repr__(self) -> str:
        return f"SlotSequence({self._text!r})"


class SlotExtractor:
    """Deterministic slot extraction for update and deletion messages."""

    def extract(self, text: str) -> SlotSequence:
        """
        Extract availability slots from a message.

        Args:
            text: Raw message text

        Returns:
            SlotSequence yielding TimeSlots in message order
        """
        return SlotSequence(self, text)

    def _iter_slots(self, text: str) -> Iterator[TimeSlot]:
        normalized = normalize_text(text)
        tokens = find_day_tokens(normalized)
        if not tokens:
            return

        prefix = normalized[:tokens[0].start]
        seen: set[TimeSlot] = set()

        for index, (days, seg_start, seg_end) in enumerate(_day_groups(normalized, tokens)):
            ranges = _segment_ranges(normalized[seg_start:seg_end])
            if not ranges and index == 0:
                # "9-11am on monday"
                ranges = _segment_ranges(prefix)

            for candidate in ranges:
                for day in days:
                    slot = TimeSlot(
                        day=day,
                        start_hour=candidate.start_hour,
                        end_hour=candidate.end_hour,
                    )
                    if slot in seen:
                        continue
                    seen.add(slot)
                    yield slot

    def extract_deletion_criteria(self, text: str) -> Optional[DeletionCriteria]:
        """
        Extract which existing slots a deletion message refers to.

        Args:
            text: Raw message text

        Returns:
            DeletionCriteria, or None if neither a day nor a time range
            was found
        """
        normalized = normalize_text(text)

        day = next(
            (token.days[0] for token in find_day_tokens(normalized) if not token.is_group),
            None,
        )
        time_range = next(
            (c for c in _numeric_candidates(normalized) if c.is_valid),
            None,
        )

        if day is None and time_range is None:
            logger.debug("No deletion criteria found")
            return None

        return DeletionCriteria(
            day=day,
            start_hour=time_range.start_hour if time_range else None,
            # A single time only pins the start: "remove my monday 6pm slot"
            end_hour=time_range.end_hour if time_range and not time_range.single else None,
        )


# Singleton
_extractor: Optional[SlotExtractor] = None


def get_slot_extractor() -> SlotExtractor:
    """Get singleton SlotExtractor."""
    global _extractor
    if _extractor is None:
        _extractor = SlotExtractor()
    return _extractor


def extract_slots(text: str) -> SlotSequence:
    """Convenience function to extract slots."""
    return get_slot_extractor().extract(text)


def extract_deletion_criteria(text: str) -> Optional[DeletionCriteria]:
    """Convenience function to extract deletion criteria."""
    return get_slot_extractor().extract_deletion_criteria(text)
