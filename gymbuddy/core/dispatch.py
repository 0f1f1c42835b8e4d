"""
Message dispatcher.

Turns a routing decision into scheduling API calls and a reply. The
router only recommends; this is the one place that mutates state, and it
performs exactly the recommended action.

Flow:
1. Resolve the user through the injected directory
2. Fetch the availability snapshot (actions that need it are refused
   when it cannot be read)
3. Route the message with the snapshot as context
4. Perform the action through the scheduling client
5. Format the reply (general chat goes to the LLM)
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Optional

from gymbuddy.core.chat import ChatResponder
from gymbuddy.core.identity import StaticUserDirectory, UserDirectory
from gymbuddy.core.intelligence.message import Message
from gymbuddy.core.intelligence.slots.types import TimeSlot
from gymbuddy.core.routing.router import MessageRouter, get_router
from gymbuddy.core.routing.types import ClarifyReason, RouteAction, RoutingDecision
from gymbuddy.core.scheduling.client import SchedulingAPIClient, get_scheduling_client
from gymbuddy.core.scheduling.response import ReplyFormatter

logger = logging.getLogger(__name__)

# Actions that read or rewrite the availability snapshot
SNAPSHOT_ACTIONS = frozenset({
    RouteAction.SHOW_AVAILABILITY,
    RouteAction.UPDATE_AVAILABILITY,
    RouteAction.DELETE_MATCHING,
    RouteAction.CLEAR_ALL,
})


@dataclass
class DispatchResponse:
    """Reply plus what the dispatcher decided and did."""

    message: str
    intent: Optional[str] = None
    confidence: Optional[str] = None
    action: Optional[str] = None
    success: bool = True
    slots: list[TimeSlot] = field(default_factory=list)
    processing_time_ms: Optional[float] = None

    def to_dict(self) -> dict:
        """Convert to dictionary for API response."""
        result = {
            "message": self.message,
            "success": self.success,
            "slots": [slot.to_dict() for slot in self.slots],
        }
        if self.intent:
            result["intent"] = self.intent
        if self.confidence:
            result["confidence"] = self.confidence
        if self.action:
            result["action"] = self.action
        if self.processing_time_ms is not None:
            result["processing_time_ms"] = self.processing_time_ms
        return result


class MessageDispatcher:
    """Runs one inbound message end to end."""

    def __init__(
        self,
        directory: Optional[UserDirectory] = None,
        client: Optional[SchedulingAPIClient] = None,
        router: Optional[MessageRouter] = None,
        chat: Optional[ChatResponder] = None,
    ):
        """Initialize dispatcher.

        Args:
            directory: User directory (defaults to the configured static one)
            client: Scheduling API client (uses singleton if not provided)
            router: Message router (uses singleton if not provided)
            chat: Conversational fallback
        """
        self._directory = directory if directory is not None else StaticUserDirectory.from_settings()
        self._client = client or get_scheduling_client()
        self._router = router or get_router()
        self._chat = chat or ChatResponder()

    @property
    def router(self) -> MessageRouter:
        return self._router

    async def process(self, message: Message) -> DispatchResponse:
        """
        Process one inbound message.

        Args:
            message: Message from the transport layer

        Returns:
            DispatchResponse with the reply text and routing metadata
        """
        start_time = time.time()

        email = self._directory.resolve(message.user_id)
        if email is None:
            return DispatchResponse(
                message=ReplyFormatter().unknown_user(),
                success=False,
            )

        user = await self._client.get_user_by_email(email)
        formatter = ReplyFormatter(name=user.name if user else None)

        current = await self._client.get_availability(email)
        decision = self._router.route(message.text, current)

        if current is None and decision.action in SNAPSHOT_ACTIONS:
            logger.warning(
                f"Refusing {decision.action.value} for user {message.user_id}: "
                "current availability unknown"
            )
            response = DispatchResponse(message=formatter.snapshot_unavailable(), success=False)
        else:
            response = await self._perform(decision, email, message.text, current or [], formatter)
        response.intent = decision.intent.intent.value
        response.confidence = decision.intent.confidence.value
        response.action = decision.action.value
        response.processing_time_ms = (time.time() - start_time) * 1000

        logger.info(
            f"Processed message from user {message.user_id}: "
            f"action={response.action}, success={response.success}, "
            f"time={response.processing_time_ms:.0f}ms"
        )
        return response

    async def _perform(
        self,
        decision: RoutingDecision,
        email: str,
        text: str,
        current: list[TimeSlot],
        formatter: ReplyFormatter,
    ) -> DispatchResponse:
        action = decision.action

        if action == RouteAction.SHOW_AVAILABILITY:
            return DispatchResponse(message=formatter.availability(current), slots=list(current))

        if action == RouteAction.UPDATE_AVAILABILITY:
            added = list(decision.slots)
            result = await self._client.upsert_slots(email, added, current)
            if not result.success:
                return DispatchResponse(message=formatter.update_failed(), success=False)
            return DispatchResponse(message=formatter.updated(added), slots=added)

        if action == RouteAction.DELETE_MATCHING:
            result = await self._client.delete_matching(email, decision.criteria, current)
            if result.removed and result.success:
                return DispatchResponse(
                    message=formatter.deleted(result.removed, result.slots),
                    slots=result.removed,
                )
            if not result.removed:
                return DispatchResponse(
                    message=formatter.clarify(ClarifyReason.NO_MATCH, decision.criteria, current),
                    success=False,
                )
            return DispatchResponse(message=formatter.delete_failed(), success=False)

        if action == RouteAction.CLEAR_ALL:
            if not current:
                return DispatchResponse(message=formatter.cleared(0))
            result = await self._client.clear_availability(email)
            if not result.success:
                return DispatchResponse(message=formatter.delete_failed(), success=False)
            return DispatchResponse(message=formatter.cleared(len(current)), slots=list(current))

        if action == RouteAction.CANCEL_SESSION:
            return await self._cancel_session(decision, email, formatter)

        if action == RouteAction.CLARIFY:
            return DispatchResponse(
                message=formatter.clarify(decision.reason, decision.criteria, current),
                success=False,
            )

        reply = await self._chat.respond(text, name=formatter.name, slots=current)
        return DispatchResponse(message=reply or formatter.chat_unavailable())

    async def _cancel_session(
        self,
        decision: RoutingDecision,
        email: str,
        formatter: ReplyFormatter,
    ) -> DispatchResponse:
        sessions = [s for s in await self._client.list_sessions(email) if s.status == "confirmed"]
        if not sessions:
            return DispatchResponse(message=formatter.no_sessions())

        criteria = decision.criteria
        if criteria is not None:
            candidates = [
                s for s in sessions
                if (criteria.day is None or s.day == criteria.day)
                and (criteria.start_hour is None or s.start_hour == criteria.start_hour)
                and (criteria.end_hour is None or s.end_hour == criteria.end_hour)
            ]
        else:
            candidates = sessions

        # Only cancel when exactly one session fits
        if len(candidates) != 1:
            return DispatchResponse(message=formatter.choose_session(sessions), success=False)

        session = candidates[0]
        result = await self._client.cancel_session(email, session.id)
        if not result.success:
            return DispatchResponse(message=formatter.cancel_failed(), success=False)
        return DispatchResponse(message=formatter.session_cancelled(session))


# Singleton
_dispatcher: Optional[MessageDispatcher] = None


def get_dispatcher() -> MessageDispatcher:
    """Get singleton MessageDispatcher."""
    global _dispatcher
    if _dispatcher is None:
        _dispatcher = MessageDispatcher()
    return _dispatcher


async def process_message(message: Message) -> DispatchResponse:
    """Convenience function to process a message."""
    return await get_dispatcher().process(message)
