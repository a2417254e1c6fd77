"""Immutable registry of dialog definitions."""

from collections.abc import Iterable
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Awaitable, Callable

from ..errors import RegistryError
from ..models import NONE_INTENT
from .context import Interruption, StepContext, StepResult

Step = Callable[[StepContext, Any], Awaitable[StepResult]]
InterruptionHandler = Callable[[StepContext, str], Awaitable[Interruption]]


@dataclass(frozen=True)
class DialogDefinition:
    """A named waterfall of steps.

    ``trigger`` is the intent that starts the dialog from the top level.
    ``on_interrupted`` runs when this dialog is active and another dialog's
    trigger fires; it receives the name of the interrupting dialog.
    """

    name: str
    steps: tuple[Step, ...]
    trigger: str | None = None
    on_interrupted: InterruptionHandler | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "steps", tuple(self.steps))


class DialogRegistry:
    """Dialog lookup by name and by trigger intent."""

    def __init__(
        self,
        definitions: Iterable[DialogDefinition],
        fallback: str = NONE_INTENT,
    ):
        dialogs: dict[str, DialogDefinition] = {}
        triggers: dict[str, str] = {}

        for definition in definitions:
            if not definition.steps:
                raise RegistryError(f"Dialog {definition.name!r} has no steps")
            if definition.name in dialogs:
                raise RegistryError(f"Dialog {definition.name!r} registered twice")
            if definition.trigger is not None:
                owner = triggers.get(definition.trigger)
                if owner is not None:
                    raise RegistryError(
                        f"Intent {definition.trigger!r} is claimed by both "
                        f"{owner!r} and {definition.name!r}"
                    )
                triggers[definition.trigger] = definition.name
            dialogs[definition.name] = definition

        if fallback not in dialogs:
            raise RegistryError(f"Fallback dialog {fallback!r} is not registered")

        self._dialogs = MappingProxyType(dialogs)
        self._triggers = MappingProxyType(triggers)
        self._fallback = fallback

    def get(self, name: str) -> DialogDefinition:
        try:
            return self._dialogs[name]
        except KeyError:
            raise RegistryError(f"Unknown dialog {name!r}") from None

    def find_by_intent(self, intent: str) -> DialogDefinition | None:
        name = self._triggers.get(intent)
        return self._dialogs[name] if name is not None else None

    @property
    def fallback(self) -> DialogDefinition:
        return self._dialogs[self._fallback]

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(self._dialogs)

    @property
    def triggers(self) -> tuple[str, ...]:
        return tuple(self._triggers)

    def __contains__(self, name: object) -> bool:
        return name in self._dialogs

    def __len__(self) -> int:
        return len(self._dialogs)
