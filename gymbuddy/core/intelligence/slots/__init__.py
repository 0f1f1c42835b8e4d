"""Slot extraction module."""

from .types import Weekday, TimeSlot, AvailabilityContext, DeletionCriteria
from .extractor import (
    SlotExtractor,
    SlotSequence,
    get_slot_extractor,
    extract_slots,
    extract_deletion_criteria,
    to_24_hour,
)

__all__ = [
    # Types
    "Weekday",
    "TimeSlot",
    "AvailabilityContext",
    "DeletionCriteria",
    # Extractor
    "SlotExtractor",
    "SlotSequence",
    "get_slot_extractor",
    "extract_slots",
    "extract_deletion_criteria",
    "to_24_hour",
]
