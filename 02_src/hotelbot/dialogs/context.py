"""Step execution context and step outcomes."""

import random
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Awaitable, Callable, TypeVar

from ..models import Activity, Card, DialogFrame, InboundMessage, IntentResult, Session
from ..search import IHotelStore

T = TypeVar("T")


class Outcome(str, Enum):
    """What the engine does after a step returns."""

    ADVANCE = "advance"  # run the next step now
    SUSPEND = "suspend"  # prompt and wait for the next message
    END = "end"  # pop this frame
    END_CASCADE = "end_cascade"  # clear the whole stack
    BEGIN = "begin"  # push a child dialog
    REPLACE = "replace"  # swap this frame for another dialog


class Interruption(str, Enum):
    """Decision of an interruption handler."""

    DEFER = "defer"
    ALLOW = "allow"


@dataclass(frozen=True)
class StepResult:
    outcome: Outcome
    value: Any = None
    prompt: str | None = None
    dialog: str | None = None


@dataclass
class Services:
    """Shared collaborators available to steps."""

    store: IHotelStore
    rng: random.Random = field(default_factory=random.Random)


class Outbox:
    """Ordered (delay, activity) queue collected during one turn."""

    def __init__(self) -> None:
        self.activities: list[Activity] = []
        self._pending_delay = 0.0

    def pause(self, seconds: float) -> None:
        self._pending_delay += seconds

    def add(self, activity: Activity) -> None:
        activity.delay = self._pending_delay
        self._pending_delay = 0.0
        self.activities.append(activity)


class StepContext:
    """Everything a dialog step may read or do during one turn."""

    def __init__(
        self,
        session: Session,
        frame: DialogFrame,
        message: InboundMessage,
        intent: IntentResult,
        services: Services,
        outbox: Outbox,
        checkpoint: Callable[[], Awaitable[None]],
    ):
        self.session = session
        self.frame = frame
        self.message = message
        self.intent = intent
        self.services = services
        self._outbox = outbox
        self._checkpoint = checkpoint

    @property
    def dialog_data(self) -> dict[str, Any]:
        """Scratch data private to the current frame."""
        return self.frame.dialog_data

    @property
    def now(self) -> datetime:
        """Arrival time of the message being handled."""
        return self.message.timestamp

    # Sending
    def send(self, text: str) -> None:
        self._outbox.add(Activity(type="message", text=text))

    def send_cards(self, cards: list[Card], text: str | None = None) -> None:
        self._outbox.add(
            Activity(
                type="message",
                text=text,
                attachments=list(cards),
                attachment_layout="carousel",
            )
        )

    def typing(self) -> None:
        self._outbox.add(Activity(type="typing"))

    def pause(self, seconds: float) -> None:
        """Delay the next activity, simulating think time."""
        self._outbox.pause(seconds)

    async def wait_for(self, awaitable: Awaitable[T]) -> T:
        """Persist the session, then await a long-latency collaborator."""
        await self._checkpoint()
        return await awaitable

    # Outcomes
    def next(self, value: Any = None) -> StepResult:
        return StepResult(Outcome.ADVANCE, value=value)

    def prompt(self, text: str) -> StepResult:
        return StepResult(Outcome.SUSPEND, prompt=text)

    def end(self, value: Any = None) -> StepResult:
        return StepResult(Outcome.END, value=value)

    def end_conversation(self) -> StepResult:
        return StepResult(Outcome.END_CASCADE)

    def begin_dialog(self, dialog: str, args: Any = None) -> StepResult:
        return StepResult(Outcome.BEGIN, value=args, dialog=dialog)

    def replace_dialog(self, dialog: str, args: Any = None) -> StepResult:
        return StepResult(Outcome.REPLACE, value=args, dialog=dialog)
