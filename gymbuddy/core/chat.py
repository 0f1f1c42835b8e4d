"""
Conversational fallback for messages the classifier cannot place.

The LLM only chats; it never touches availability. Scheduling requests
are handled by the deterministic router before they get here.
"""

import logging
from typing import Optional

from gymbuddy.core.intelligence.slots.types import TimeSlot
from gymbuddy.core.scheduling.response import format_slots
from gymbuddy.infra.claude import ClaudeClient, ClaudeClientError, get_claude_client

logger = logging.getLogger(__name__)


SYSTEM_PROMPT = """You are GymBuddy, a helpful and enthusiastic gym partner.

You chat about fitness, motivation and workouts. Respond naturally, like
texting a friend.

Personality:
- Friendly, supportive and encouraging
- Short, casual replies
- Focus on fitness, motivation and health topics

Rules:
- Never explain bot commands or give usage instructions
- Never claim to have changed the user's schedule or sessions; scheduling
  is handled elsewhere

User: {name}
Current availability:
{availability}"""


def build_system_prompt(name: Optional[str], slots: list[TimeSlot]) -> str:
    """Fill the persona prompt with the user's name and availability."""
    availability = format_slots(slots) if slots else "No availability set yet"
    return SYSTEM_PROMPT.format(name=name or "unknown", availability=availability)


class ChatResponder:
    """Produces general-chat replies through Claude."""

    def __init__(self, claude_client: Optional[ClaudeClient] = None):
        """Initialize responder.

        Args:
            claude_client: Claude client (uses singleton if not provided)
        """
        self._claude_client = claude_client

    def _get_client(self) -> Optional[ClaudeClient]:
        if self._claude_client is None:
            self._claude_client = get_claude_client()
        return self._claude_client

    @property
    def available(self) -> bool:
        return self._get_client() is not None

    async def respond(
        self,
        text: str,
        name: Optional[str] = None,
        slots: Optional[list[TimeSlot]] = None,
    ) -> Optional[str]:
        """
        Generate a chat reply.

        Args:
            text: User message
            name: User's display name
            slots: User's current availability, for context

        Returns:
            Reply text, or None if the LLM is not configured or failed
        """
        client = self._get_client()
        if client is None:
            logger.info("Chat fallback requested but no Anthropic key is configured")
            return None

        try:
            reply = await client.chat(
                message=text,
                system=build_system_prompt(name, slots or []),
            )
        except ClaudeClientError as e:
            logger.error(f"Chat fallback failed: {e}")
            return None

        logger.debug(
            f"Chat reply from {reply.model} "
            f"({reply.input_tokens}+{reply.output_tokens} tokens, {reply.latency_ms:.0f}ms)"
        )
        return reply.text or None
