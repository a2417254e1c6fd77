"""Application bootstrap and lifecycle management."""

import os
import random
from typing import Protocol

from .config import env_flag, env_float, resolve_db_path
from .delivery import Dispatcher, WebhookSender
from .dialogs import ENTITY_TYPES, DialogEngine, Services, build_registry
from .llm import LLMProvider
from .logging_config import get_logger
from .recognizers import (
    BingSpellService,
    IIntentRecognizer,
    ISpellService,
    LLMRecognizer,
    LuisRecognizer,
)
from .search import HotelStore, IHotelStore
from .storage import IStorage, Storage
from .tracker import ITracker, Tracker

logger = get_logger(__name__)


class IApplication(Protocol):
    """Bootstrap and lifecycle."""

    async def start(self) -> None:
        """Initialize components in dependency order."""
        ...

    async def stop(self) -> None:
        """Shutdown in reverse order."""
        ...

    async def reset(self) -> None:
        """Reset data between test runs."""
        ...


class Application:
    """Main application bootstrap."""

    def __init__(
        self,
        db_path: str | None = None,
        recognizer: IIntentRecognizer | None = None,
        store: IHotelStore | None = None,
        spell_service: ISpellService | None = None,
        rng: random.Random | None = None,
    ):
        env_db_path = os.getenv("DATABASE_URL") if db_path is None else db_path
        self._db_path = resolve_db_path(env_db_path)

        # Overrides, mostly for tests; otherwise built from the environment
        self._recognizer_override = recognizer
        self._store_override = store
        self._spell_override = spell_service
        self._rng = rng or random.Random()

        # Components (will be initialized in start())
        self._storage: IStorage | None = None
        self._tracker: ITracker | None = None
        self._recognizer: IIntentRecognizer | None = None
        self._spell: ISpellService | None = None
        self._store: IHotelStore | None = None
        self._engine: DialogEngine | None = None
        self._sender: WebhookSender | None = None
        self._dispatcher: Dispatcher | None = None

    async def start(self) -> None:
        """Initialize components in dependency order."""
        logger.info("Starting application")

        # 1. Storage (no dependencies)
        self._storage = Storage(self._db_path)
        await self._storage.init()
        logger.info("Storage initialized")

        # 2. Tracker (depends on Storage)
        self._tracker = Tracker(self._storage)

        # 3. Registry is validated here; a bad registration aborts startup
        registry = build_registry()
        logger.info("Dialog registry built with %d dialogs", len(registry))

        # 4. External collaborators
        self._recognizer = self._recognizer_override or self._build_recognizer(
            list(registry.triggers)
        )
        self._spell = self._spell_override or self._build_spell_service()
        self._store = self._store_override or HotelStore(
            latency=env_float("HOTEL_STORE_LATENCY", 1.0), rng=self._rng
        )

        # 5. DialogEngine
        self._engine = DialogEngine(
            registry=registry,
            storage=self._storage,
            services=Services(store=self._store, rng=self._rng),
            recognizer=self._recognizer,
            spell_service=self._spell,
            tracker=self._tracker,
            spell_timeout=env_float("SPELL_CHECK_TIMEOUT", 3.0),
            classify_timeout=env_float("CLASSIFY_TIMEOUT", 10.0),
        )
        logger.info("DialogEngine started")

        # 6. Outbound delivery
        self._sender = WebhookSender()
        self._dispatcher = Dispatcher(self._sender)
        logger.info("All components initialized successfully")

    async def stop(self) -> None:
        """Shutdown in reverse order."""
        if self._dispatcher:
            await self._dispatcher.stop()
        if self._sender:
            await self._sender.close()
        for collaborator, override in (
            (self._spell, self._spell_override),
            (self._recognizer, self._recognizer_override),
        ):
            # Overrides belong to the caller
            if collaborator is not override and hasattr(collaborator, "close"):
                await collaborator.close()
        if self._storage:
            await self._storage.close()
            logger.info("Storage closed")

    async def reset(self) -> None:
        """Reset data between test runs."""
        if self._dispatcher:
            await self._dispatcher.drain()
        if self._storage:
            await self._storage.clear()
            logger.info("Reset complete")

    def _build_recognizer(self, intents: list[str]) -> IIntentRecognizer | None:
        luis_url = os.getenv("LUIS_MODEL_URL")
        if luis_url:
            logger.info("Using LUIS recognizer")
            return LuisRecognizer(luis_url)

        if os.getenv("ANTHROPIC_API_KEY"):
            logger.info("Using LLM recognizer")
            return LLMRecognizer(LLMProvider(), intents, list(ENTITY_TYPES))

        logger.warning("No intent recognizer configured, every message is the None intent")
        return None

    def _build_spell_service(self) -> ISpellService | None:
        if not env_flag("IS_SPELL_CORRECTION_ENABLED"):
            return None
        try:
            return BingSpellService()
        except ValueError as e:
            logger.warning("Spell correction enabled but unavailable: %s", e)
            return None

    @property
    def storage(self) -> IStorage:
        """Get storage instance."""
        if not self._storage:
            raise RuntimeError("Application not started")
        return self._storage

    @property
    def engine(self) -> DialogEngine:
        """Get dialog engine instance."""
        if not self._engine:
            raise RuntimeError("Application not started")
        return self._engine

    @property
    def dispatcher(self) -> Dispatcher:
        """Get outbound dispatcher instance."""
        if not self._dispatcher:
            raise RuntimeError("Application not started")
        return self._dispatcher

    @property
    def sender(self) -> WebhookSender:
        """Get webhook sender instance."""
        if not self._sender:
            raise RuntimeError("Application not started")
        return self._sender
