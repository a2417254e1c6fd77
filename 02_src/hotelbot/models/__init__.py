"""Core data models for the hotel bot."""

from .dialog import DialogFrame, Session
from .hotels import Hotel, Review
from .intents import NONE_INTENT, Entity, IntentResult
from .messages import Activity, Card, CardAction, InboundMessage
from .tracing import TraceEvent

__all__ = [
    # Messages
    "InboundMessage",
    "Activity",
    "Card",
    "CardAction",
    # Intents
    "NONE_INTENT",
    "Entity",
    "IntentResult",
    # Dialog
    "DialogFrame",
    "Session",
    # Hotels
    "Hotel",
    "Review",
    # Tracing
    "TraceEvent",
]
