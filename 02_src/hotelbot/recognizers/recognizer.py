"""Intent recognizer interface and the LLM-backed implementation."""

import json
from typing import Protocol

from pydantic import BaseModel, Field, ValidationError

from ..errors import RecognizerError
from ..llm import ILLMProvider
from ..logging_config import get_logger
from ..models import NONE_INTENT, Entity, IntentResult

logger = get_logger(__name__)


class IIntentRecognizer(Protocol):
    """Maps raw text to an intent name plus extracted entities."""

    async def classify(self, text: str) -> IntentResult:
        """Classify text. Raises RecognizerError on failure."""
        ...


class _EntityPayload(BaseModel):
    type: str
    value: str
    score: float = 1.0


class _ClassificationPayload(BaseModel):
    intent: str = NONE_INTENT
    score: float = Field(default=1.0, ge=0.0, le=1.0)
    entities: list[_EntityPayload] = Field(default_factory=list)


SYSTEM_PROMPT = """You classify messages sent to a hotel booking assistant.

Known intents:
{intents}

Known entity types:
{entity_types}

Answer with a single JSON object and nothing else:
{{"intent": "<intent>", "score": <0..1>, "entities": [{{"type": "<entity type>", "value": "<text from the message>", "score": <0..1>}}]}}

Use "{none}" when no known intent fits. Only report entities whose value appears in the message."""


class LLMRecognizer:
    """Classifies intents by asking Claude for a JSON answer."""

    def __init__(
        self,
        llm_provider: ILLMProvider,
        intents: list[str],
        entity_types: list[str],
    ):
        self._llm = llm_provider
        self._intents = list(intents)
        self._system = SYSTEM_PROMPT.format(
            intents="\n".join(f"- {name}" for name in self._intents),
            entity_types="\n".join(f"- {name}" for name in entity_types),
            none=NONE_INTENT,
        )

    async def classify(self, text: str) -> IntentResult:
        """Classify text via the LLM."""
        try:
            raw = await self._llm.complete(
                messages=[{"role": "user", "content": text}],
                system=self._system,
            )
        except Exception as e:
            raise RecognizerError(f"LLM classification failed: {e}") from e

        payload = self._parse(raw)
        intent = payload.intent if payload.intent in self._intents else NONE_INTENT
        if intent != payload.intent:
            logger.debug("LLM answered unknown intent %r, using None", payload.intent)

        return IntentResult(
            intent=intent,
            score=payload.score,
            entities=tuple(
                Entity(type=e.type, value=e.value, score=e.score)
                for e in payload.entities
            ),
        )

    @staticmethod
    def _parse(raw: str) -> _ClassificationPayload:
        # Models sometimes wrap the JSON in prose or a code fence
        start, end = raw.find("{"), raw.rfind("}")
        if start == -1 or end < start:
            raise RecognizerError(f"No JSON object in LLM answer: {raw[:100]}")
        try:
            return _ClassificationPayload.model_validate(json.loads(raw[start : end + 1]))
        except (ValueError, ValidationError) as e:
            raise RecognizerError(f"Malformed LLM classification: {e}") from e
