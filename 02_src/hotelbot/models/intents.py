"""Intent classification data models."""

from dataclasses import dataclass, field

NONE_INTENT = "None"


@dataclass(frozen=True)
class Entity:
    """A typed value extracted from text by the classifier."""

    type: str  # e.g. "builtin.geography.city"
    value: str
    score: float = 1.0


@dataclass(frozen=True)
class IntentResult:
    """Classifier answer for one inbound message."""

    intent: str
    score: float = 1.0
    entities: tuple[Entity, ...] = field(default_factory=tuple)

    @classmethod
    def none(cls) -> "IntentResult":
        """Result used when nothing matched or the classifier failed."""
        return cls(intent=NONE_INTENT, score=0.0)
