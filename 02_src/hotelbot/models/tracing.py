"""Tracing and observability data models."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class TraceEvent:
    """A single observability event of the dialog runtime."""

    id: str
    event_type: str  # e.g. "message_received", "dialog_started"
    actor: str  # who created this event
    data: dict  # self-contained data for display
    timestamp: datetime
