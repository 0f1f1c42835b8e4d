"""
Routing Types

Contains the RoutingDecision dataclass returned by the MessageRouter.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from gymbuddy.core.intelligence.intent.types import IntentResult
from gymbuddy.core.intelligence.slots.types import DeletionCriteria, TimeSlot


class RouteAction(str, Enum):
    """What the caller should do with a message."""

    SHOW_AVAILABILITY = "show_availability"
    UPDATE_AVAILABILITY = "update_availability"
    DELETE_MATCHING = "delete_matching"
    CLEAR_ALL = "clear_all"
    CANCEL_SESSION = "cancel_session"
    CLARIFY = "clarify"
    FALLBACK_CHAT = "fallback_chat"


DESTRUCTIVE_ACTIONS = frozenset({RouteAction.DELETE_MATCHING, RouteAction.CLEAR_ALL})
MUTATING_ACTIONS = DESTRUCTIVE_ACTIONS | {
    RouteAction.UPDATE_AVAILABILITY,
    RouteAction.CANCEL_SESSION,
}


class ClarifyReason(str, Enum):
    """Why the router asked for clarification instead of acting."""

    NO_SLOTS = "no_slots"              # update without a usable day + time
    NO_CRITERIA = "no_criteria"        # deletion without day/time or "all"
    NO_MATCH = "no_match"              # deletion criteria match no existing slot


@dataclass(frozen=True)
class RoutingDecision:
    """
    Result from the message router.

    Attributes:
        intent: Classifier output for the message
        action: Recommended action, never performed by the router itself
        slots: Extracted slots (update only)
        criteria: Deletion criteria (deletion only, None if none recognized)
        matched_slots: Context slots the criteria select
        reason: Set when action is CLARIFY
    """

    intent: IntentResult
    action: RouteAction
    slots: tuple[TimeSlot, ...] = ()
    criteria: Optional[DeletionCriteria] = None
    matched_slots: tuple[TimeSlot, ...] = ()
    reason: Optional[ClarifyReason] = None

    @property
    def is_destructive(self) -> bool:
        """Check if acting on this decision removes stored availability."""
        return self.action in DESTRUCTIVE_ACTIONS

    @property
    def is_mutating(self) -> bool:
        """Check if acting on this decision changes any stored state."""
        return self.action in MUTATING_ACTIONS

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "intent": self.intent.to_dict(),
            "action": self.action.value,
            "slots": [slot.to_dict() for slot in self.slots],
            "criteria": self.criteria.to_dict() if self.criteria else None,
            "matched_slots": [slot.to_dict() for slot in self.matched_slots],
            "reason": self.reason.value if self.reason else None,
            "is_destructive": self.is_destructive,
        }
