"""
Intelligence Layer Module

Deterministic message understanding: intent classification and slot
extraction over normalized text. Pure functions of (text, context).

Usage:
    from gymbuddy.core.intelligence import (
        classify_intent,
        extract_slots,
        extract_deletion_criteria,
    )

    # Classify intent
    result = classify_intent("I'm free Monday 6-8pm")
    print(result.intent)  # Intent.AVAILABILITY_UPDATE

    # Extract slots
    slots = extract_slots("Monday 9-11am and Wednesday 6-8pm")
    print(slots.to_list())  # [TimeSlot(monday, 9, 11), TimeSlot(wednesday, 18, 20)]

    # Deletion criteria
    criteria = extract_deletion_criteria("Remove Tuesday 14:00-16:00")
    print(criteria.to_dict())  # {"day": "tuesday", "startHour": 14, "endHour": 16}
"""

# Slot types load first, text helpers depend on them
from gymbuddy.core.intelligence.slots.types import (
    Weekday,
    TimeSlot,
    AvailabilityContext,
    DeletionCriteria,
)
from gymbuddy.core.intelligence.slots.extractor import (
    SlotExtractor,
    SlotSequence,
    get_slot_extractor,
    extract_slots,
    extract_deletion_criteria,
)

# Intent Classification
from gymbuddy.core.intelligence.intent.types import Intent, Confidence, IntentResult
from gymbuddy.core.intelligence.intent.classifier import (
    IntentClassifier,
    get_intent_classifier,
    classify_intent,
)

# Shared helpers
from gymbuddy.core.intelligence.message import Message
from gymbuddy.core.intelligence.text import normalize_text

__all__ = [
    # Slots
    "Weekday",
    "TimeSlot",
    "AvailabilityContext",
    "DeletionCriteria",
    "SlotExtractor",
    "SlotSequence",
    "get_slot_extractor",
    "extract_slots",
    "extract_deletion_criteria",
    # Intent
    "Intent",
    "Confidence",
    "IntentResult",
    "IntentClassifier",
    "get_intent_classifier",
    "classify_intent",
    # Helpers
    "Message",
    "normalize_text",
]
