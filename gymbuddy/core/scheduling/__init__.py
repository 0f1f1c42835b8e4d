"""
Scheduling Module

HTTP client for the scheduling backend and the reply templates used for
each scheduling action.

Usage:
    from gymbuddy.core.scheduling import get_scheduling_client, ReplyFormatter

    client = get_scheduling_client()
    slots = await client.get_availability("ivan@example.com")
    print(ReplyFormatter(name="Ivan").availability(slots))
"""

# Scheduling API Client
from gymbuddy.core.scheduling.client import (
    SchedulingAPIClient,
    get_scheduling_client,
    UserRecord,
    Session,
    AvailabilityResult,
    merge_slots,
)

# Replies
from gymbuddy.core.scheduling.response import (
    ReplyFormatter,
    format_hour,
    format_slot,
    format_slots,
)

__all__ = [
    # Client
    "SchedulingAPIClient",
    "get_scheduling_client",
    "UserRecord",
    "Session",
    "AvailabilityResult",
    "merge_slots",
    # Replies
    "ReplyFormatter",
    "format_hour",
    "format_slot",
    "format_slots",
]
