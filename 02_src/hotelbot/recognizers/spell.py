"""Bing Spell Check collaborator."""

import os
from typing import Protocol

import httpx

from ..errors import SpellCheckError

SPELL_CHECK_API_URL = "https://api.cognitive.microsoft.com/bing/v7.0/spellcheck?mode=proof"


class ISpellService(Protocol):
    """Optional pre-processing hook that corrects user text."""

    async def correct(self, text: str) -> str:
        """Return corrected text. Raises SpellCheckError on failure."""
        ...


def apply_corrections(text: str, flagged_tokens: list[dict]) -> str:
    """Replace every flagged token with its first suggestion."""
    result = []
    previous_offset = 0
    for token in sorted(flagged_tokens, key=lambda t: t["offset"]):
        suggestions = token.get("suggestions") or []
        if not suggestions:
            continue
        result.append(text[previous_offset : token["offset"]])
        result.append(suggestions[0]["suggestion"])
        previous_offset = token["offset"] + len(token["token"])
    result.append(text[previous_offset:])
    return "".join(result)


class BingSpellService:
    """Spell correction through the Bing Spell Check API."""

    def __init__(
        self,
        api_key: str | None = None,
        url: str = SPELL_CHECK_API_URL,
        client: httpx.AsyncClient | None = None,
    ):
        self._api_key = api_key or os.getenv("BING_SPELL_CHECK_API_KEY")
        if not self._api_key:
            raise ValueError("BING_SPELL_CHECK_API_KEY environment variable not set")
        self._url = url
        self._client = client or httpx.AsyncClient()

    async def correct(self, text: str) -> str:
        if not text:
            return text

        try:
            response = await self._client.post(
                self._url,
                headers={"Ocp-Apim-Subscription-Key": self._api_key},
                data={"text": text},
            )
            response.raise_for_status()
            body = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise SpellCheckError(f"Spell check failed: {e}") from e

        try:
            return apply_corrections(text, body.get("flaggedTokens") or [])
        except (KeyError, TypeError, IndexError) as e:
            raise SpellCheckError(f"Malformed spell check answer: {e}") from e

    async def close(self) -> None:
        await self._client.aclose()
