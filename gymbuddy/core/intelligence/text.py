"""
Text normalization and weekday tokenization.

Every keyword and time pattern in the intelligence layer runs against the
output of normalize_text(), never against raw user text.
"""

import re
from dataclasses import dataclass

from gymbuddy.core.intelligence.slots.types import Weekday

_WHITESPACE = re.compile(r"\s+")
_APOSTROPHES = re.compile(r"[\u2018\u2019\u02bc`]")
_DASHES = re.compile(r"[\u2010-\u2015\u2212]")
_MERIDIEM_DOTS = re.compile(r"(?<![a-z])([ap])\.\s?m\.?(?![a-z])")

ALL_WEEKDAYS = tuple(Weekday)
WORKDAYS = (
    Weekday.MONDAY,
    Weekday.TUESDAY,
    Weekday.WEDNESDAY,
    Weekday.THURSDAY,
    Weekday.FRIDAY,
)
WEEKEND = (Weekday.SATURDAY, Weekday.SUNDAY)

# token -> days it stands for
DAY_TOKENS: dict[str, tuple[Weekday, ...]] = {
    "monday": (Weekday.MONDAY,),
    "mondays": (Weekday.MONDAY,),
    "mon": (Weekday.MONDAY,),
    "tuesday": (Weekday.TUESDAY,),
    "tuesdays": (Weekday.TUESDAY,),
    "tues": (Weekday.TUESDAY,),
    "tue": (Weekday.TUESDAY,),
    "wednesday": (Weekday.WEDNESDAY,),
    "wednesdays": (Weekday.WEDNESDAY,),
    "wed": (Weekday.WEDNESDAY,),
    "thursday": (Weekday.THURSDAY,),
    "thursdays": (Weekday.THURSDAY,),
    "thurs": (Weekday.THURSDAY,),
    "thur": (Weekday.THURSDAY,),
    "thu": (Weekday.THURSDAY,),
    "friday": (Weekday.FRIDAY,),
    "fridays": (Weekday.FRIDAY,),
    "fri": (Weekday.FRIDAY,),
    "saturday": (Weekday.SATURDAY,),
    "saturdays": (Weekday.SATURDAY,),
    "sat": (Weekday.SATURDAY,),
    "sunday": (Weekday.SUNDAY,),
    "sundays": (Weekday.SUNDAY,),
    "sun": (Weekday.SUNDAY,),
    # Group tokens
    "weekdays": WORKDAYS,
    "weekday": WORKDAYS,
    "weekends": WEEKEND,
    "weekend": WEEKEND,
    "every day": ALL_WEEKDAYS,
    "everyday": ALL_WEEKDAYS,
    "daily": ALL_WEEKDAYS,
}

# Longest first so "mondays" wins over "mon"
DAY_PATTERN = re.compile(
    r"\b(?:"
    + "|".join(re.escape(t) for t in sorted(DAY_TOKENS, key=len, reverse=True))
    + r")\b"
)

RANGE_SEPARATOR = r"\s*(?:-|to|until|till)\s*"

# Any clock-ish expression: "6pm", "10:30", "9-11", "6 to 8"
TIME_EXPRESSION = re.compile(
    r"\b\d{1,2}(?::\d{2})?\s*(?:am|pm)\b"
    r"|\b\d{1,2}:\d{2}\b"
    r"|\b\d{1,2}(?::\d{2})?" + RANGE_SEPARATOR + r"\d{1,2}\b"
)

TIME_RANGE = re.compile(
    r"(?<![\d:/.-])\d{1,2}(?::\d{2})?\s*(?:am|pm)?" + RANGE_SEPARATOR + r"\d{1,2}(?::\d{2})?"
)

DAYPART_PATTERN = re.compile(r"\b(?:morning|afternoon|evening)s?\b")


@dataclass(frozen=True)
class DayToken:
    """A weekday token found in normalized text."""

    start: int
    end: int
    token: str
    days: tuple[Weekday, ...]

    @property
    def is_group(self) -> bool:
        """True for tokens like "weekdays" that stand for several days."""
        return len(self.days) > 1


def normalize_text(text) -> str:
    """
    Normalize user text for matching.

    Lowercases, folds typographic apostrophes and dashes, folds "a.m."/"p.m."
    to "am"/"pm", trims and collapses whitespace. Non-string input yields "".
    """
    if not isinstance(text, str):
        return ""

    text = text.lower()
    text = _APOSTROPHES.sub("'", text)
    text = _DASHES.sub("-", text)
    text = _MERIDIEM_DOTS.sub(r"\1m", text)
    return _WHITESPACE.sub(" ", text).strip()


def find_day_tokens(text: str) -> list[DayToken]:
    """Find weekday tokens in already-normalized text, in order."""
    return [
        DayToken(
            start=match.start(),
            end=match.end(),
            token=match.group(0),
            days=DAY_TOKENS[match.group(0)],
        )
        for match in DAY_PATTERN.finditer(text)
    ]
