"""Dialog runtime: registry, step context and engine."""

from .builtin import ENTITY_TYPES, build_registry
from .context import Interruption, Outbox, Outcome, Services, StepContext, StepResult
from .engine import DialogEngine, TurnResult
from .entities import find_entity, find_first_entity
from .registry import DialogDefinition, DialogRegistry

__all__ = [
    "DialogEngine",
    "TurnResult",
    "DialogDefinition",
    "DialogRegistry",
    "build_registry",
    "ENTITY_TYPES",
    "Interruption",
    "Outbox",
    "Outcome",
    "Services",
    "StepContext",
    "StepResult",
    "find_entity",
    "find_first_entity",
]
