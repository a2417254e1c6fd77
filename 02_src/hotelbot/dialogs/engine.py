"""DialogEngine: routes inbound messages through the dialog stack."""

import asyncio
import weakref
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any

from ..errors import StorageError
from ..logging_config import get_logger
from ..models import Activity, DialogFrame, InboundMessage, IntentResult, Session
from ..recognizers import IIntentRecognizer, ISpellService
from ..storage import IStorage
from ..tracker import ITracker
from .context import Interruption, Outbox, Outcome, Services, StepContext, StepResult
from .registry import DialogRegistry

logger = get_logger(__name__)

ERROR_MESSAGE = "Sorry, something went wrong. Please start again."


@dataclass
class TurnResult:
    """Effects of handling one inbound message."""

    session: Session
    activities: list[Activity] = field(default_factory=list)
    intent: IntentResult | None = None
    persisted: bool = True


@dataclass
class _Turn:
    session: Session
    message: InboundMessage
    intent: IntentResult
    outbox: Outbox = field(default_factory=Outbox)
    events: list[tuple[str, str]] = field(default_factory=list)  # (event_type, dialog)


class DialogEngine:
    """Drives the per-conversation dialog stack.

    Turns for the same address are serialized; different addresses run
    concurrently and share only the registry and the collaborators.
    """

    def __init__(
        self,
        registry: DialogRegistry,
        storage: IStorage,
        services: Services,
        recognizer: IIntentRecognizer | None = None,
        spell_service: ISpellService | None = None,
        tracker: ITracker | None = None,
        spell_timeout: float = 3.0,
        classify_timeout: float = 10.0,
    ):
        self._registry = registry
        self._storage = storage
        self._services = services
        self._recognizer = recognizer
        self._spell = spell_service
        self._tracker = tracker
        self._spell_timeout = spell_timeout
        self._classify_timeout = classify_timeout
        self._locks: weakref.WeakValueDictionary[str, asyncio.Lock] = (
            weakref.WeakValueDictionary()
        )

    @property
    def registry(self) -> DialogRegistry:
        return self._registry

    async def handle_message(self, message: InboundMessage) -> TurnResult:
        """Handle one inbound message and persist the updated session."""
        lock = self._lock_for(message.address)
        async with lock:
            session = await self._load_session(message.address)

            text = await self._preprocess(message.text)
            if text != message.text:
                message = replace(message, text=text)
            session.last_message = text

            intent = await self._classify(text)
            logger.info(
                "Message from %s classified as %s (%.2f)",
                message.address,
                intent.intent,
                intent.score,
                extra={"address": message.address},
            )
            await self._track(
                "message_received",
                {
                    "address": message.address,
                    "text": text,
                    "intent": intent.intent,
                    "score": intent.score,
                },
            )

            turn = _Turn(session=session, message=message, intent=intent)
            await self._route(turn)
            return await self._finish(turn)

    async def begin_dialog(
        self,
        address: str,
        dialog: str,
        args: Any = None,
        timestamp: datetime | None = None,
    ) -> TurnResult:
        """Begin a named dialog without intent routing (e.g. on conversation start)."""
        self._registry.get(dialog)

        lock = self._lock_for(address)
        async with lock:
            session = await self._load_session(address)
            message = InboundMessage(
                address=address,
                text="",
                timestamp=timestamp or datetime.now().astimezone(),
            )
            turn = _Turn(session=session, message=message, intent=IntentResult.none())
            await self._guarded(turn, self._start(turn, dialog, args))
            return await self._finish(turn)

    # Routing
    async def _route(self, turn: _Turn) -> None:
        session = turn.session
        frame = session.active_frame

        if frame is not None and frame.dialog not in self._registry:
            logger.warning(
                "Session %s references unknown dialog %s, clearing stack",
                session.address,
                frame.dialog,
            )
            session.clear()
            frame = None

        triggered = self._registry.find_by_intent(turn.intent.intent)

        if frame is not None:
            definition = self._registry.get(frame.dialog)
            if (
                definition.on_interrupted is not None
                and triggered is not None
                and triggered.name != frame.dialog
                and triggered.name != self._registry.fallback.name
            ):
                await self._guarded(
                    turn, self._interrupt(turn, frame, triggered.name)
                )
                return

            # Waiting for a direct answer
            await self._guarded(turn, self._run(turn, turn.message.text))
            return

        target = triggered if triggered is not None else self._registry.fallback
        await self._guarded(turn, self._start(turn, target.name, turn.intent))

    async def _interrupt(self, turn: _Turn, frame: DialogFrame, dialog: str) -> None:
        definition = self._registry.get(frame.dialog)
        decision = await definition.on_interrupted(self._context(turn, frame), dialog)
        logger.info(
            "Dialog %s interrupted by %s for %s: %s",
            frame.dialog,
            dialog,
            turn.session.address,
            decision.value,
        )
        await self._track(
            "dialog_interrupted",
            {
                "address": turn.session.address,
                "dialog": frame.dialog,
                "interrupted_by": dialog,
                "decision": decision.value,
            },
        )
        if decision is Interruption.ALLOW:
            await self._start(turn, dialog, turn.intent)

    async def _start(self, turn: _Turn, dialog: str, args: Any) -> None:
        self._push(turn, dialog)
        await self._run(turn, args)

    def _push(self, turn: _Turn, dialog: str) -> DialogFrame:
        self._registry.get(dialog)
        frame = turn.session.push(dialog)
        logger.debug("Dialog %s started for %s", dialog, turn.session.address)
        turn.events.append(("dialog_started", dialog))
        return frame

    # Step execution
    async def _run(self, turn: _Turn, value: Any) -> None:
        """Execute steps of the top frame until the turn suspends or the stack empties."""
        session = turn.session

        while session.stack:
            frame = session.active_frame
            definition = self._registry.get(frame.dialog)

            if frame.step_index >= len(definition.steps):
                result = StepResult(Outcome.END, value=value)
            else:
                step = definition.steps[frame.step_index]
                frame.awaiting_input = False
                frame.prompt = None
                result = await step(self._context(turn, frame), value)
                if not isinstance(result, StepResult):
                    raise TypeError(
                        f"Step {frame.step_index} of {frame.dialog} returned "
                        f"{result!r} instead of a StepResult"
                    )

            outcome = result.outcome

            if outcome is Outcome.ADVANCE:
                frame.step_index += 1
                value = result.value
                continue

            if outcome is Outcome.SUSPEND:
                frame.step_index += 1
                frame.awaiting_input = True
                frame.prompt = result.prompt
                if result.prompt:
                    turn.outbox.add(Activity(type="message", text=result.prompt))
                return

            if outcome is Outcome.BEGIN:
                frame.step_index += 1
                self._push(turn, result.dialog)
                value = result.value
                continue

            if outcome is Outcome.REPLACE:
                session.pop()
                turn.events.append(("dialog_ended", frame.dialog))
                self._push(turn, result.dialog)
                value = result.value
                continue

            if outcome is Outcome.END_CASCADE:
                for ended in reversed(session.stack):
                    turn.events.append(("dialog_ended", ended.dialog))
                session.clear()
                return

            # Outcome.END
            session.pop()
            turn.events.append(("dialog_ended", frame.dialog))
            parent = session.active_frame
            if parent is None:
                return
            if parent.awaiting_input:
                # Parent was suspended on a prompt when the child was pushed
                if parent.prompt:
                    turn.outbox.add(Activity(type="message", text=parent.prompt))
                return
            value = result.value

    async def _guarded(self, turn: _Turn, work) -> None:
        """Run routing work; any unexpected error ends the conversation."""
        try:
            await work
        except Exception as e:
            top = turn.session.active_frame
            logger.error(
                "Dialog step failed for %s: %s",
                turn.session.address,
                e,
                exc_info=True,
                extra={
                    "address": turn.session.address,
                    "dialog": top.dialog if top else None,
                    "context": {"stack": [f.dialog for f in turn.session.stack]},
                },
            )
            turn.session.clear()
            turn.outbox.add(Activity(type="message", text=ERROR_MESSAGE))

    def _context(self, turn: _Turn, frame: DialogFrame) -> StepContext:
        async def checkpoint() -> None:
            await self._save_session(turn.session)

        return StepContext(
            session=turn.session,
            frame=frame,
            message=turn.message,
            intent=turn.intent,
            services=self._services,
            outbox=turn.outbox,
            checkpoint=checkpoint,
        )

    # Collaborators
    async def _preprocess(self, text: str) -> str:
        if self._spell is None or not text:
            return text
        try:
            corrected = await asyncio.wait_for(
                self._spell.correct(text), timeout=self._spell_timeout
            )
        except Exception as e:
            logger.warning("Spell correction failed, using original text: %s", e)
            return text
        return corrected or text

    async def _classify(self, text: str) -> IntentResult:
        if self._recognizer is None or not text:
            return IntentResult.none()
        try:
            return await asyncio.wait_for(
                self._recognizer.classify(text), timeout=self._classify_timeout
            )
        except Exception as e:
            logger.warning("Intent classification failed: %s", e)
            return IntentResult.none()

    async def _load_session(self, address: str) -> Session:
        try:
            session = await self._storage.get_session(address)
        except StorageError as e:
            logger.error("Failed to load session %s, starting fresh: %s", address, e)
            session = None
        return session if session is not None else Session(address=address)

    async def _save_session(self, session: Session) -> bool:
        try:
            await self._storage.save_session(session)
        except StorageError as e:
            logger.error("Failed to save session %s: %s", session.address, e)
            return False
        return True

    async def _finish(self, turn: _Turn) -> TurnResult:
        persisted = await self._save_session(turn.session)
        for event_type, dialog in turn.events:
            await self._track(
                event_type, {"address": turn.session.address, "dialog": dialog}
            )
        await self._track(
            "turn_completed",
            {
                "address": turn.session.address,
                "stack": [f.dialog for f in turn.session.stack],
                "activity_count": len(turn.outbox.activities),
                "persisted": persisted,
            },
        )
        return TurnResult(
            session=turn.session,
            activities=turn.outbox.activities,
            intent=turn.intent,
            persisted=persisted,
        )

    async def _track(self, event_type: str, data: dict) -> None:
        if self._tracker is not None:
            await self._tracker.track(event_type, "dialog_engine", data)

    def _lock_for(self, address: str) -> asyncio.Lock:
        lock = self._locks.get(address)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[address] = lock
        return lock
