"""Message routing module."""

from .types import RouteAction, ClarifyReason, RoutingDecision
from .router import MessageRouter, RoutingStats, get_router, route_message

__all__ = [
    "RouteAction",
    "ClarifyReason",
    "RoutingDecision",
    "MessageRouter",
    "RoutingStats",
    "get_router",
    "route_message",
]
