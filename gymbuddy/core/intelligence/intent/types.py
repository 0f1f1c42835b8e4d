"""Intent types for message classification."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class Intent(str, Enum):
    """User intent categories."""

    # Handled deterministically
    AVAILABILITY_QUERY = "availability_query"          # "what's my availability"
    AVAILABILITY_UPDATE = "availability_update"        # "I'm free Monday 6-8pm"
    AVAILABILITY_DELETION = "availability_deletion"    # "remove my Monday slot"
    SESSION_CANCELLATION = "session_cancellation"      # "cancel our workout"

    # Fallback to conversational handler
    GENERAL_CHAT = "general_chat"


class Confidence(str, Enum):
    """Qualitative classification certainty."""

    HIGH = "high"       # Multi-word phrase or verb + object
    MEDIUM = "medium"   # Single weak keyword
    LOW = "low"         # Nothing matched, default label


@dataclass(frozen=True)
class IntentResult:
    """Result of intent classification."""

    intent: Intent
    confidence: Confidence

    # Text that triggered the decision, None for the default
    evidence: Optional[str] = None

    # Name of the rule that matched
    rule: Optional[str] = None

    # Deletion explicitly asked for everything ("clear all", "reset")
    full_clear: bool = False

    @property
    def is_fallback(self) -> bool:
        """Check if this is the no-match default."""
        return self.rule is None

    @property
    def is_high_confidence(self) -> bool:
        return self.confidence == Confidence.HIGH

    @property
    def allows_automatic_action(self) -> bool:
        """Low confidence must never trigger a state change."""
        return self.confidence != Confidence.LOW

    @property
    def is_availability_related(self) -> bool:
        """Check if intent touches stored availability."""
        return self.intent in {
            Intent.AVAILABILITY_QUERY,
            Intent.AVAILABILITY_UPDATE,
            Intent.AVAILABILITY_DELETION,
        }

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "intent": self.intent.value,
            "confidence": self.confidence.value,
            "evidence": self.evidence,
            "rule": self.rule,
            "full_clear": self.full_clear,
        }


FALLBACK_RESULT = IntentResult(intent=Intent.GENERAL_CHAT, confidence=Confidence.LOW)
