"""
Message Router

Composes the intent classifier and slot extractor into a single
recommendation per message. Pure: the router never calls out, it only
tells the caller which action the message supports.
"""

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Optional, Sequence

from gymbuddy.core.intelligence.intent.classifier import IntentClassifier, get_intent_classifier
from gymbuddy.core.intelligence.intent.types import Intent, IntentResult
from gymbuddy.core.intelligence.slots.extractor import SlotExtractor, get_slot_extractor
from gymbuddy.core.intelligence.slots.types import TimeSlot
from gymbuddy.core.routing.types import ClarifyReason, RouteAction, RoutingDecision

logger = logging.getLogger(__name__)


@dataclass
class RoutingStats:
    """Per-router counters for operators. Never read by routing itself."""

    total: int = 0
    by_intent: Counter = field(default_factory=Counter)
    by_action: Counter = field(default_factory=Counter)
    fallbacks: int = 0

    @property
    def fallback_rate(self) -> float:
        return self.fallbacks / self.total if self.total else 0.0

    def record(self, decision: RoutingDecision) -> None:
        self.total += 1
        self.by_intent[decision.intent.intent.value] += 1
        self.by_action[decision.action.value] += 1
        if decision.intent.is_fallback:
            self.fallbacks += 1

    def to_dict(self) -> dict:
        return {
            "total": self.total,
            "by_intent": dict(self.by_intent),
            "by_action": dict(self.by_action),
            "fallbacks": self.fallbacks,
            "fallback_rate": round(self.fallback_rate, 4),
        }


class MessageRouter:
    """
    Routes user messages to a recommended action.

    The action table:
        query                                    -> show_availability
        update with slots                        -> update_availability
        update without slots                     -> clarify
        deletion with criteria matching context  -> delete_matching
        deletion with criteria, nothing matches  -> clarify
        deletion asking for everything           -> clear_all
        deletion otherwise                       -> clarify
        session cancellation                     -> cancel_session
        general chat                             -> fallback_chat
    """

    _instance: Optional["MessageRouter"] = None

    def __init__(
        self,
        classifier: Optional[IntentClassifier] = None,
        extractor: Optional[SlotExtractor] = None,
    ):
        """
        Initialize the router.

        Args:
            classifier: Intent classifier. If None, uses singleton.
            extractor: Slot extractor. If None, uses singleton.
        """
        self._classifier = classifier or get_intent_classifier()
        self._extractor = extractor or get_slot_extractor()
        self.stats = RoutingStats()

    @classmethod
    def get_instance(cls) -> "MessageRouter":
        """Get singleton instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        """Reset singleton instance (useful for testing)."""
        cls._instance = None

    def route(
        self,
        text: str,
        context: Optional[Sequence[TimeSlot]] = None,
    ) -> RoutingDecision:
        """
        Route a user message.

        Args:
            text: Raw message text
            context: User's current slots, or None if unknown

        Returns:
            RoutingDecision with the recommended action
        """
        result = self._classifier.classify(text, context)
        decision = self._decide(text, result, context)
        self.stats.record(decision)

        logger.info(
            f"Routed message: intent={result.intent.value}, "
            f"confidence={result.confidence.value}, action={decision.action.value}"
        )
        return decision

    def _decide(
        self,
        text: str,
        result: IntentResult,
        context: Optional[Sequence[TimeSlot]],
    ) -> RoutingDecision:
        if not result.allows_automatic_action:
            return RoutingDecision(intent=result, action=RouteAction.FALLBACK_CHAT)

        if result.intent == Intent.AVAILABILITY_QUERY:
            return RoutingDecision(intent=result, action=RouteAction.SHOW_AVAILABILITY)

        if result.intent == Intent.AVAILABILITY_UPDATE:
            slots = tuple(self._extractor.extract(text))
            if not slots:
                return RoutingDecision(
                    intent=result,
                    action=RouteAction.CLARIFY,
                    reason=ClarifyReason.NO_SLOTS,
                )
            return RoutingDecision(
                intent=result,
                action=RouteAction.UPDATE_AVAILABILITY,
                slots=slots,
            )

        if result.intent == Intent.AVAILABILITY_DELETION:
            return self._decide_deletion(text, result, context)

        if result.intent == Intent.SESSION_CANCELLATION:
            # Day or time narrows which booked session is meant
            return RoutingDecision(
                intent=result,
                action=RouteAction.CANCEL_SESSION,
                criteria=self._extractor.extract_deletion_criteria(text),
            )

        return RoutingDecision(intent=result, action=RouteAction.FALLBACK_CHAT)

    def _decide_deletion(
        self,
        text: str,
        result: IntentResult,
        context: Optional[Sequence[TimeSlot]],
    ) -> RoutingDecision:
        criteria = self._extractor.extract_deletion_criteria(text)

        if criteria is not None:
            if context is None:
                return RoutingDecision(
                    intent=result,
                    action=RouteAction.DELETE_MATCHING,
                    criteria=criteria,
                )
            matched = tuple(criteria.select(context))
            if not matched:
                logger.info(f"Deletion criteria {criteria.to_dict()} match no existing slot")
                return RoutingDecision(
                    intent=result,
                    action=RouteAction.CLARIFY,
                    criteria=criteria,
                    reason=ClarifyReason.NO_MATCH,
                )
            return RoutingDecision(
                intent=result,
                action=RouteAction.DELETE_MATCHING,
                criteria=criteria,
                matched_slots=matched,
            )

        if result.full_clear or result.rule == "deletion_contextual":
            return RoutingDecision(
                intent=result,
                action=RouteAction.CLEAR_ALL,
                matched_slots=tuple(context or ()),
            )

        return RoutingDecision(
            intent=result,
            action=RouteAction.CLARIFY,
            reason=ClarifyReason.NO_CRITERIA,
        )


# Singleton accessor
def get_router() -> MessageRouter:
    """Get router singleton instance."""
    return MessageRouter.get_instance()


def route_message(
    text: str,
    context: Optional[Sequence[TimeSlot]] = None,
) -> RoutingDecision:
    """Convenience function to route a message."""
    return get_router().route(text, context)
