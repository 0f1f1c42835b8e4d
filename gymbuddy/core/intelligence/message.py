"""Inbound message value."""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class Message:
    """One inbound message as delivered by the transport layer."""

    text: str
    user_id: str
    timestamp: Optional[datetime] = None
