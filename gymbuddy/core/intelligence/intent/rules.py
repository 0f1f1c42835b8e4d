"""
Ordered keyword rules for intent classification.

Rules are evaluated top to bottom and the first match wins, so more
specific groups sit higher: deletion, update, query, session cancellation.
Each rule can be tested on its own via IntentRule.match().
"""

import re
from dataclasses import dataclass
from typing import Optional

from gymbuddy.core.intelligence.text import (
    DAY_PATTERN,
    DAYPART_PATTERN,
    TIME_EXPRESSION,
    TIME_RANGE,
)
from .types import Confidence, Intent


def _compile(*alternatives: str) -> re.Pattern:
    return re.compile("|".join(alternatives))


def _phrases(phrases: list[str]) -> re.Pattern:
    """Substring alternation, longest phrase first."""
    ordered = sorted(set(phrases), key=len, reverse=True)
    return re.compile("|".join(re.escape(p) for p in ordered))


ACTION_VERB = _compile(r"\b(?:clear|delete|remove|cancel|reset)\b")
SCOPE_NOUN = _compile(r"\b(?:availability|availabilities|schedule|sessions?|slots?)\b")
CONTEXTUAL_TARGET = _compile(
    r"\b(?:clear|delete|remove|cancel|reset)\s+(?:this|it|that|all|everything)\b"
)
DAY_OR_RANGE = _compile(DAY_PATTERN.pattern, TIME_RANGE.pattern)
NEGATED_AVAILABILITY = _compile(r"\b(?:not|no longer|never)\s+(?:available|free)\b")
FULL_CLEAR = _compile(r"\b(?:all|everything|entire|whole|reset)\b")

BOOKING_NOUN = _compile(r"\b(?:workouts?|gym|bookings?|training)\b")
CANCEL_PHRASE = _compile(
    r"\b(?:clear|delete|remove|cancel|reset|skip)\b",
    r"\bcall\s+off\b",
    r"\b(?:can'?t|cannot|won'?t)\s+make\b",
)
QUESTION = _compile(
    r"^(?:what|whats|when|which|where|show|check|view|see|list|display|tell|give|do|does|am|is|are)\b",
    r"\?$",
)

EXPLICIT_UPDATE = _compile(
    r"\b(?:i'?m|i am)\s+(?:free|available)\b",
    r"\bset\s+me\s+(?:as\s+)?available\b",
    r"\b(?:update|set|add|change)\s+my\s+(?:availability|schedule)\b",
    r"\badd\s+(?:some\s+)?availability\b",
    r"\b(?:available|free)\s+(?:on|for|from)\b",
    r"\bschedule\s+me\b",
    r"\bbook\s+me\b",
    r"\bcan\s+(?:work\s?out|gym|train)\b",
)
AVAILABILITY_NOUN = _compile(r"\b(?:availability|available|schedule|free)\b")
WHEN_EXPRESSION = _compile(
    TIME_EXPRESSION.pattern, DAY_PATTERN.pattern, DAYPART_PATTERN.pattern
)

QUERY_PHRASES = [
    "what's my availability",
    "whats my availability",
    "show my availability",
    "my schedule",
    "when am i available",
    "what's my schedule",
    "check my availability",
    "view my availability",
    "see my availability",
    "exact dates",
    "exact times",
    "exact dates and times",
    "when am i free",
    "my available times",
    "available this week",
    "list my availability",
    "display my schedule",
    # Also answered by the bot historically
    "whats my schedule",
    "give me my availability",
    "tell me my availability",
    "give me the exact",
    "tell me the exact",
    "when can i work out",
    "my free times",
    "free this week",
    "show me when",
    "tell me when",
]

SESSION_CANCEL = _compile(r"\b(?:cancel|skip)\b", r"\bcall\s+off\b")
CANT_MAKE_IT = _compile(r"\b(?:can'?t|cannot|won'?t)\s+make\s+it\b")


@dataclass(frozen=True)
class IntentRule:
    """One entry of the ordered rule table.

    All patterns must match; any exclude pattern vetoes the rule.
    """

    name: str
    intent: Intent
    confidence: Confidence
    patterns: tuple[re.Pattern, ...]
    excludes: tuple[re.Pattern, ...] = ()
    requires_context: bool = False

    def match(self, text: str, has_context: bool = False) -> Optional[str]:
        """Return evidence if the rule fires on normalized text, else None."""
        if self.requires_context and not has_context:
            return None
        if any(pattern.search(text) for pattern in self.excludes):
            return None

        evidence = []
        for pattern in self.patterns:
            found = pattern.search(text)
            if found is None:
                return None
            evidence.append(found.group(0))
        return " + ".join(evidence)


QUERY_PATTERN = _phrases(QUERY_PHRASES)

# Query phrases inside "update my schedule ..." or "i'm free this week ..." still update
QUERY_VETO = re.compile(
    r"(?<!update )(?<!set )(?<!add )(?<!change )(?<!i'm )(?<!i am )(?:" + QUERY_PATTERN.pattern + ")"
)

UPDATE_EXCLUDES = (CANCEL_PHRASE, QUESTION, QUERY_VETO)

DEFAULT_RULES: tuple[IntentRule, ...] = (
    # === Deletion ===
    IntentRule(
        name="deletion_scope",
        intent=Intent.AVAILABILITY_DELETION,
        confidence=Confidence.HIGH,
        patterns=(ACTION_VERB, SCOPE_NOUN),
    ),
    IntentRule(
        name="deletion_contextual",
        intent=Intent.AVAILABILITY_DELETION,
        confidence=Confidence.HIGH,
        patterns=(CONTEXTUAL_TARGET,),
        excludes=(BOOKING_NOUN, CANT_MAKE_IT),
        requires_context=True,
    ),
    IntentRule(
        name="deletion_day_or_time",
        intent=Intent.AVAILABILITY_DELETION,
        confidence=Confidence.HIGH,
        patterns=(ACTION_VERB, DAY_OR_RANGE),
        excludes=(BOOKING_NOUN,),
    ),
    IntentRule(
        name="deletion_not_available",
        intent=Intent.AVAILABILITY_DELETION,
        confidence=Confidence.HIGH,
        patterns=(NEGATED_AVAILABILITY, DAY_PATTERN),
    ),
    # === Update ===
    IntentRule(
        name="update_explicit",
        intent=Intent.AVAILABILITY_UPDATE,
        confidence=Confidence.HIGH,
        patterns=(EXPLICIT_UPDATE,),
        excludes=UPDATE_EXCLUDES,
    ),
    IntentRule(
        name="update_noun_with_time",
        intent=Intent.AVAILABILITY_UPDATE,
        confidence=Confidence.HIGH,
        patterns=(AVAILABILITY_NOUN, WHEN_EXPRESSION),
        excludes=UPDATE_EXCLUDES,
    ),
    IntentRule(
        name="update_day_with_time",
        intent=Intent.AVAILABILITY_UPDATE,
        confidence=Confidence.MEDIUM,
        patterns=(DAY_PATTERN, TIME_EXPRESSION),
        excludes=UPDATE_EXCLUDES,
    ),
    IntentRule(
        name="update_bare_day",
        intent=Intent.AVAILABILITY_UPDATE,
        confidence=Confidence.MEDIUM,
        patterns=(DAY_PATTERN,),
        excludes=UPDATE_EXCLUDES,
    ),
    IntentRule(
        name="update_bare_range",
        intent=Intent.AVAILABILITY_UPDATE,
        confidence=Confidence.MEDIUM,
        patterns=(TIME_RANGE,),
        excludes=UPDATE_EXCLUDES,
    ),
    # === Query ===
    IntentRule(
        name="query_phrase",
        intent=Intent.AVAILABILITY_QUERY,
        confidence=Confidence.HIGH,
        patterns=(QUERY_PATTERN,),
    ),
    # === Session cancellation ===
    IntentRule(
        name="session_cancel",
        intent=Intent.SESSION_CANCELLATION,
        confidence=Confidence.HIGH,
        patterns=(SESSION_CANCEL, BOOKING_NOUN),
    ),
    IntentRule(
        name="session_cant_make_it",
        intent=Intent.SESSION_CANCELLATION,
        confidence=Confidence.MEDIUM,
        patterns=(CANT_MAKE_IT,),
    ),
)
