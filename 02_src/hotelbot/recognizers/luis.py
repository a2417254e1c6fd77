"""LUIS (Language Understanding) recognizer over HTTP."""

from urllib.parse import quote

import httpx

from ..errors import RecognizerError
from ..models import NONE_INTENT, Entity, IntentResult


class LuisRecognizer:
    """Calls a published LUIS v2 endpoint (LUIS_MODEL_URL)."""

    def __init__(
        self,
        model_url: str,
        client: httpx.AsyncClient | None = None,
        timeout: float = 5.0,
    ):
        if not model_url:
            raise ValueError("LUIS model URL is empty")
        self._model_url = model_url
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def classify(self, text: str) -> IntentResult:
        """Classify text with LUIS."""
        # Portal URLs end with "&q=" and expect the utterance appended
        if self._model_url.endswith("q="):
            url, params = self._model_url + quote(text), None
        else:
            url, params = self._model_url, {"q": text}

        try:
            response = await self._client.get(url, params=params)
            response.raise_for_status()
            body = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise RecognizerError(f"LUIS request failed: {e}") from e

        return self.parse_response(body)

    @staticmethod
    def parse_response(body: dict) -> IntentResult:
        """Convert a LUIS v2 JSON body into an IntentResult."""
        top = body.get("topScoringIntent")
        if not top:
            intents = body.get("intents") or []
            top = max(intents, key=lambda i: i.get("score", 0), default=None)
        if not top:
            return IntentResult.none()

        entities = tuple(
            Entity(
                type=item["type"],
                value=item["entity"],
                score=item.get("score", 1.0),
            )
            for item in body.get("entities") or []
            if "type" in item and "entity" in item
        )
        return IntentResult(
            intent=top.get("intent") or NONE_INTENT,
            score=top.get("score", 0.0),
            entities=entities,
        )

    async def close(self) -> None:
        await self._client.aclose()
