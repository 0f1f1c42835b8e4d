"""
Reply templates for GymBuddy.

Every scheduling action gets a deterministic reply; the LLM is only used
for general chat.
"""

from typing import Iterable, Optional

from gymbuddy.core.intelligence.slots.types import DeletionCriteria, TimeSlot, Weekday
from gymbuddy.core.routing.types import ClarifyReason
from gymbuddy.core.scheduling.client import Session

DAY_ORDER = {day: index for index, day in enumerate(Weekday)}

UPDATE_EXAMPLES = "'Monday 9-11am', 'Tuesday evening' or 'weekends 2-4pm'"
DELETE_EXAMPLES = "'remove Monday 6-9am', 'delete my Tuesday slot' or 'clear all my availability'"


def format_hour(hour: int) -> str:
    """Format a 0-23 hour as "6:00 PM" / "12:00 AM"."""
    meridiem = "AM" if hour < 12 else "PM"
    display = hour % 12 or 12
    return f"{display}:00 {meridiem}"


def format_range(start_hour: int, end_hour: int) -> str:
    return f"{format_hour(start_hour)} - {format_hour(end_hour)}"


def format_slot(slot: TimeSlot) -> str:
    """Format a slot as "Monday: 9:00 AM - 11:00 AM"."""
    return f"{slot.day.display_name}: {format_range(slot.start_hour, slot.end_hour)}"


def sort_slots(slots: Iterable[TimeSlot]) -> list[TimeSlot]:
    """Order by weekday, then start hour."""
    return sorted(slots, key=lambda s: (DAY_ORDER[s.day], s.start_hour, s.end_hour))


def format_slots(slots: Iterable[TimeSlot]) -> str:
    """One line per slot, grouped in weekday order."""
    return "\n".join(f"- {format_slot(slot)}" for slot in sort_slots(slots))


def format_criteria(criteria: DeletionCriteria) -> str:
    """Describe deletion criteria ("Monday 6:00 AM - 9:00 AM")."""
    parts = []
    if criteria.day is not None:
        parts.append(criteria.day.display_name)
    if criteria.start_hour is not None and criteria.end_hour is not None:
        parts.append(format_range(criteria.start_hour, criteria.end_hour))
    elif criteria.start_hour is not None:
        parts.append(f"from {format_hour(criteria.start_hour)}")
    elif criteria.end_hour is not None:
        parts.append(f"until {format_hour(criteria.end_hour)}")
    return " ".join(parts)


def format_session(session: Session) -> str:
    day = session.day.display_name if session.day else (session.date or "Unknown day")
    if session.start_hour is None or session.end_hour is None:
        return day
    return f"{day} {format_range(session.start_hour, session.end_hour)}"


class ReplyFormatter:
    """Deterministic reply templates, one method per outcome."""

    def __init__(self, name: Optional[str] = None):
        """Initialize formatter.

        Args:
            name: User's display name, used in greetings
        """
        self.name = name

    @property
    def _greeting(self) -> str:
        return f"Hi {self.name}, " if self.name else ""

    # === Queries ===

    def availability(self, slots: list[TimeSlot]) -> str:
        if not slots:
            return (
                "You don't have any availability set yet. "
                "Just let me know when you're free to work out!"
            )
        return (
            f"{self._greeting}here's your current availability:\n\n"
            f"{format_slots(slots)}\n\n"
            f"Total slots: {len(slots)}"
        )

    # === Updates ===

    def updated(self, added: list[TimeSlot]) -> str:
        return f"Got it! Added to your schedule:\n{format_slots(added)}"

    def update_failed(self) -> str:
        return "I couldn't update your availability right now. Please try again in a moment."

    # === Deletions ===

    def deleted(self, removed: list[TimeSlot], remaining: list[TimeSlot]) -> str:
        noun = "slot" if len(removed) == 1 else "slots"
        reply = f"Done! Removed {len(removed)} {noun}:\n{format_slots(removed)}"
        if remaining:
            reply += f"\n\nStill on your schedule:\n{format_slots(remaining)}"
        else:
            reply += "\n\nYour schedule is now empty."
        return reply

    def cleared(self, count: int) -> str:
        if count == 0:
            return "Your schedule was already empty."
        noun = "slot" if count == 1 else "slots"
        return f"Done! Cleared {count} {noun} from your schedule."

    def delete_failed(self) -> str:
        return "I couldn't remove that availability right now. Please try again in a moment."

    # === Sessions ===

    def no_sessions(self) -> str:
        return "You don't have any confirmed sessions to cancel right now."

    def session_cancelled(self, session: Session) -> str:
        return f"Session cancelled: {format_session(session)}."

    def choose_session(self, sessions: list[Session]) -> str:
        lines = ["Your confirmed sessions:"]
        for index, session in enumerate(sessions, 1):
            lines.append(f"{index}. {format_session(session)}")
        lines.append("\nWhich one should I cancel? Tell me the day and time, e.g. 'cancel Monday's 6-8pm workout'.")
        return "\n".join(lines)

    def cancel_failed(self) -> str:
        return "I couldn't cancel that session right now. Please try again in a moment."

    # === Clarification ===

    def clarify(
        self,
        reason: Optional[ClarifyReason],
        criteria: Optional[DeletionCriteria] = None,
        current: Optional[list[TimeSlot]] = None,
    ) -> str:
        if reason == ClarifyReason.NO_SLOTS:
            return f"I didn't quite catch that time. Try something like {UPDATE_EXAMPLES}."

        if reason == ClarifyReason.NO_MATCH and criteria is not None:
            reply = f"I couldn't find any availability matching {format_criteria(criteria)}."
            if current:
                reply += f"\n\nYour current availability:\n{format_slots(current)}"
            return reply

        return (
            "Which availability should I remove? "
            f"Tell me a day or time, like {DELETE_EXAMPLES}."
        )

    # === Fallbacks ===

    def snapshot_unavailable(self) -> str:
        return (
            "I couldn't load your current availability, so I haven't changed anything. "
            "Please try again in a moment."
        )

    def unknown_user(self) -> str:
        return (
            "I don't recognise your account yet. "
            "Please link it on the GymBuddy website first."
        )

    def chat_unavailable(self) -> str:
        return (
            "I'm your GymBuddy scheduling assistant. I can show, add or remove "
            f"your workout availability, e.g. {UPDATE_EXAMPLES}."
        )
