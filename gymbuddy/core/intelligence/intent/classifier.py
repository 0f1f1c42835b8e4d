"""
Rule-based intent classification.

Walks an ordered rule table and stops at the first rule that matches.
Messages nothing matches become general_chat at low confidence, which the
caller hands to the conversational fallback.
"""

import logging
from typing import Optional, Sequence

from gymbuddy.core.intelligence.slots.types import TimeSlot
from gymbuddy.core.intelligence.text import normalize_text
from .rules import DEFAULT_RULES, FULL_CLEAR, IntentRule
from .types import FALLBACK_RESULT, Intent, IntentResult

logger = logging.getLogger(__name__)


def _has_slots(context) -> bool:
    """Check if the caller passed a non-empty availability snapshot."""
    if context is None:
        return False
    try:
        return len(context) > 0
    except TypeError:
        return False


class IntentClassifier:
    """
    Deterministic intent classifier.

    Pure and stateless: the same text and context always produce the same
    result, and no input makes it raise.
    """

    def __init__(self, rules: Optional[Sequence[IntentRule]] = None):
        """Initialize classifier.

        Args:
            rules: Ordered rule table (defaults to DEFAULT_RULES)
        """
        self._rules = tuple(rules) if rules is not None else DEFAULT_RULES

    @property
    def rules(self) -> tuple[IntentRule, ...]:
        return self._rules

    def classify(
        self,
        text: str,
        context: Optional[Sequence[TimeSlot]] = None,
    ) -> IntentResult:
        """
        Classify a user message.

        Args:
            text: Raw message text
            context: User's current slots, used to resolve "clear this"

        Returns:
            IntentResult with intent, confidence and evidence
        """
        normalized = normalize_text(text)
        if not normalized:
            return FALLBACK_RESULT

        has_context = _has_slots(context)

        for rule in self._rules:
            evidence = rule.match(normalized, has_context)
            if evidence is None:
                continue

            full_clear = (
                rule.intent == Intent.AVAILABILITY_DELETION
                and FULL_CLEAR.search(normalized) is not None
            )
            logger.debug(
                f"Classified intent: {rule.intent.value} "
                f"(confidence: {rule.confidence.value}, rule: {rule.name}, "
                f"evidence: {evidence!r})"
            )
            return IntentResult(
                intent=rule.intent,
                confidence=rule.confidence,
                evidence=evidence,
                rule=rule.name,
                full_clear=full_clear,
            )

        logger.info("No intent rule matched, falling back to general chat")
        return FALLBACK_RESULT


# Singleton
_classifier: Optional[IntentClassifier] = None


def get_intent_classifier() -> IntentClassifier:
    """Get singleton IntentClassifier."""
    global _classifier
    if _classifier is None:
        _classifier = IntentClassifier()
    return _classifier


def classify_intent(
    text: str,
    context: Optional[Sequence[TimeSlot]] = None,
) -> IntentResult:
    """Convenience function to classify intent."""
    return get_intent_classifier().classify(text, context)
