"""
Message API Endpoints.

POST /messages runs a message end to end (identity, routing, scheduling
API, reply). POST /messages/classify is side-effect free and returns the
routing decision only.
"""

import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from gymbuddy.core.dispatch import MessageDispatcher, get_dispatcher
from gymbuddy.core.intelligence.message import Message
from gymbuddy.core.intelligence.slots.types import AvailabilityContext
from gymbuddy.core.routing.router import MessageRouter, get_router

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/messages", tags=["Messages"])


class SlotModel(BaseModel):
    """One availability slot."""

    day: str = Field(..., examples=["monday"])
    startHour: int = Field(..., ge=0, le=23, examples=[9])
    endHour: int = Field(..., ge=0, le=23, examples=[11])


class MessageRequest(BaseModel):
    """Inbound message from the transport layer."""

    text: str = Field(
        ...,
        max_length=2000,
        description="Raw message text",
        examples=["I'm free Monday 9-11am and Wednesday 6-8pm"],
    )
    user_id: str = Field(
        ...,
        min_length=1,
        description="Messaging-platform user id",
        examples=["1195143765"],
    )
    timestamp: Optional[datetime] = Field(default=None)


class MessageResponse(BaseModel):
    """Reply and what was done."""

    message: str = Field(..., description="Reply text for the user")
    success: bool
    intent: Optional[str] = None
    confidence: Optional[str] = None
    action: Optional[str] = None
    slots: list[SlotModel] = Field(default_factory=list)
    processing_time_ms: Optional[float] = None


class ClassifyRequest(BaseModel):
    """Text plus an optional availability snapshot."""

    text: str = Field(..., max_length=2000, examples=["remove my Monday slot"])
    context: Optional[list[SlotModel]] = Field(
        default=None,
        description="User's current slots; omit if unknown",
    )


@router.post(
    "",
    response_model=MessageResponse,
    status_code=status.HTTP_200_OK,
    summary="Process a message",
    description="Classify the message, perform the scheduling action and return the reply.",
)
async def process_message(
    request: MessageRequest,
    dispatcher: MessageDispatcher = Depends(get_dispatcher),
) -> MessageResponse:
    """Process one message end to end."""
    message = Message(text=request.text, user_id=request.user_id, timestamp=request.timestamp)
    response = await dispatcher.process(message)
    return MessageResponse(**response.to_dict())


@router.post(
    "/classify",
    status_code=status.HTTP_200_OK,
    summary="Classify a message",
    description="Return the routing decision without calling the scheduling API.",
)
async def classify_message(
    request: ClassifyRequest,
    message_router: MessageRouter = Depends(get_router),
) -> dict:
    """Route text against an optional snapshot. No side effects."""
    context = None
    if request.context is not None:
        context = AvailabilityContext.from_records(
            [slot.model_dump() for slot in request.context]
        )
    return message_router.route(request.text, context).to_dict()


@router.get(
    "/stats",
    summary="Routing counters",
    description="Per-intent and per-action counts, and the general-chat fallback rate.",
)
async def routing_stats(
    message_router: MessageRouter = Depends(get_router),
) -> dict:
    """Return routing counters since startup."""
    return message_router.stats.to_dict()
