"""Slot types for availability extraction."""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Iterator, Optional

logger = logging.getLogger(__name__)


class Weekday(str, Enum):
    """Canonical weekday names."""

    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"
    SUNDAY = "sunday"

    @property
    def display_name(self) -> str:
        """Display name ("Monday")."""
        return self.value.capitalize()


def _read_hour(data: dict, *keys: str) -> int:
    """Read an integer hour from the first key present."""
    for key in keys:
        if data.get(key) is not None:
            return int(data[key])
    raise KeyError(keys[0])


@dataclass(frozen=True)
class TimeSlot:
    """A single availability interval on one weekday, in whole hours."""

    day: Weekday
    start_hour: int
    end_hour: int

    def __post_init__(self):
        if not isinstance(self.day, Weekday):
            object.__setattr__(self, "day", Weekday(str(self.day).strip().lower()))
        for value in (self.start_hour, self.end_hour):
            if isinstance(value, bool) or not isinstance(value, int):
                raise TypeError(f"Slot hours must be integers, got {value!r}")
        if not 0 <= self.start_hour < self.end_hour <= 23:
            raise ValueError(
                f"Invalid slot {self.day.value} {self.start_hour}-{self.end_hour}: "
                "hours must be 0-23 with end after start"
            )

    @classmethod
    def from_dict(cls, data: dict) -> "TimeSlot":
        """Create from an API or context record.

        Accepts startHour/endHour, start_time/end_time or startTime/endTime.
        """
        return cls(
            day=data["day"],
            start_hour=_read_hour(data, "startHour", "start_time", "startTime"),
            end_hour=_read_hour(data, "endHour", "end_time", "endTime"),
        )

    def to_dict(self) -> dict:
        """Convert to the wire format."""
        return {
            "day": self.day.value,
            "startHour": self.start_hour,
            "endHour": self.end_hour,
        }


@dataclass(frozen=True)
class AvailabilityContext:
    """Read-only snapshot of a user's current slots, supplied by the caller."""

    slots: tuple[TimeSlot, ...] = ()

    def __iter__(self) -> Iterator[TimeSlot]:
        return iter(self.slots)

    def __len__(self) -> int:
        return len(self.slots)

    @classmethod
    def from_slots(cls, slots: Iterable[TimeSlot]) -> "AvailabilityContext":
        return cls(slots=tuple(slots))

    @classmethod
    def from_records(cls, records: Optional[Iterable[dict]]) -> "AvailabilityContext":
        """Build from raw records, skipping malformed ones."""
        slots = []
        for record in records or ():
            try:
                slots.append(TimeSlot.from_dict(record))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Skipping malformed availability record {record!r}: {e}")
        return cls(slots=tuple(slots))

    def on_day(self, day: Weekday) -> list[TimeSlot]:
        """Slots on the given day."""
        return [slot for slot in self.slots if slot.day == day]

    def to_list(self) -> list[dict]:
        return [slot.to_dict() for slot in self.slots]


@dataclass(frozen=True)
class DeletionCriteria:
    """Partial filter used to pick existing slots for removal."""

    day: Optional[Weekday] = None
    start_hour: Optional[int] = None
    end_hour: Optional[int] = None

    def __post_init__(self):
        if self.day is None and self.start_hour is None and self.end_hour is None:
            raise ValueError("DeletionCriteria needs a day or a time range")
        if self.day is not None and not isinstance(self.day, Weekday):
            object.__setattr__(self, "day", Weekday(str(self.day).strip().lower()))

    @property
    def has_time(self) -> bool:
        return self.start_hour is not None or self.end_hour is not None

    def matches(self, slot: TimeSlot) -> bool:
        """Check if every field present here equals the slot's field."""
        if self.day is not None and slot.day != self.day:
            return False
        if self.start_hour is not None and slot.start_hour != self.start_hour:
            return False
        if self.end_hour is not None and slot.end_hour != self.end_hour:
            return False
        return True

    def select(self, slots: Iterable[TimeSlot]) -> list[TimeSlot]:
        """Return the slots matching these criteria, in order."""
        return [slot for slot in slots if self.matches(slot)]

    def to_dict(self) -> dict:
        """Convert to dict, excluding absent fields."""
        result = {}
        if self.day is not None:
            result["day"] = self.day.value
        if self.start_hour is not None:
            result["startHour"] = self.start_hour
        if self.end_hour is not None:
            result["endHour"] = self.end_hour
        return result
