"""Hotel bot dialog runtime."""

from .app import Application, IApplication
from .delivery import Dispatcher, IDispatcher
from .dialogs import (
    DialogDefinition,
    DialogEngine,
    DialogRegistry,
    Interruption,
    Outcome,
    Services,
    StepContext,
    StepResult,
    TurnResult,
    build_registry,
    find_entity,
)
from .errors import (
    HotelBotError,
    RecognizerError,
    RegistryError,
    SpellCheckError,
    StorageError,
)
from .models import (
    Activity,
    Card,
    CardAction,
    DialogFrame,
    Entity,
    Hotel,
    InboundMessage,
    IntentResult,
    Review,
    Session,
    TraceEvent,
)
from .recognizers import IIntentRecognizer, ISpellService
from .search import HotelStore, IHotelStore
from .storage import IStorage, Storage
from .tracker import ITracker, Tracker

__all__ = [
    # Application
    "Application",
    "IApplication",
    # Models
    "Activity",
    "Card",
    "CardAction",
    "DialogFrame",
    "Entity",
    "Hotel",
    "InboundMessage",
    "IntentResult",
    "Review",
    "Session",
    "TraceEvent",
    # Dialog runtime
    "DialogDefinition",
    "DialogEngine",
    "DialogRegistry",
    "Interruption",
    "Outcome",
    "Services",
    "StepContext",
    "StepResult",
    "TurnResult",
    "build_registry",
    "find_entity",
    # Components
    "IDispatcher",
    "Dispatcher",
    "IIntentRecognizer",
    "ISpellService",
    "IHotelStore",
    "HotelStore",
    "IStorage",
    "Storage",
    "ITracker",
    "Tracker",
    # Errors
    "HotelBotError",
    "RecognizerError",
    "RegistryError",
    "SpellCheckError",
    "StorageError",
]
