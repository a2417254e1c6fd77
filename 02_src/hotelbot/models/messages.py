"""Inbound and outbound message models."""

from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Literal


@dataclass
class InboundMessage:
    """A message received from the user through the transport."""

    address: str  # opaque, stable conversation key
    text: str
    timestamp: datetime
    reply_url: str | None = None


@dataclass
class CardAction:
    """A button on a card."""

    type: str  # "openUrl", "imBack", ...
    title: str
    value: str


@dataclass
class Card:
    """A renderable attachment built from a domain object."""

    kind: Literal["hero", "thumbnail"]
    title: str
    subtitle: str | None = None
    text: str | None = None
    images: list[str] = field(default_factory=list)
    buttons: list[CardAction] = field(default_factory=list)


@dataclass
class Activity:
    """A single outbound activity.

    ``delay`` is the number of seconds the transport waits after the
    previous activity of the same conversation before sending this one.
    """

    type: Literal["message", "typing"]
    text: str | None = None
    attachments: list[Card] = field(default_factory=list)
    attachment_layout: Literal["list", "carousel"] = "list"
    delay: float = 0.0

    def to_dict(self) -> dict:
        return asdict(self)
