"""Tests for intent recognizers and spell correction."""

from urllib.parse import parse_qs

import httpx
import pytest

from hotelbot.errors import RecognizerError, SpellCheckError
from hotelbot.models import Entity, IntentResult
from hotelbot.recognizers import (
    BingSpellService,
    LLMRecognizer,
    LuisRecognizer,
    apply_corrections,
)

INTENTS = ["None", "Help", "SearchHotels", "ShowHotelsReviews"]
ENTITY_TYPES = ["builtin.geography.city", "AirportCode", "Hotel"]

LUIS_BODY = {
    "query": "search hotels in Seattle",
    "topScoringIntent": {"intent": "SearchHotels", "score": 0.97},
    "intents": [
        {"intent": "SearchHotels", "score": 0.97},
        {"intent": "None", "score": 0.02},
    ],
    "entities": [
        {
            "entity": "seattle",
            "type": "builtin.geography.city",
            "startIndex": 17,
            "endIndex": 23,
            "score": 0.91,
        }
    ],
}


def mock_client(handler):
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestLLMRecognizer:
    """Tests for LLMRecognizer."""

    async def test_classify_parses_json(self, mock_llm):
        """Test that a JSON answer becomes an IntentResult."""
        mock_llm.complete.return_value = (
            '{"intent": "SearchHotels", "score": 0.93, "entities": '
            '[{"type": "builtin.geography.city", "value": "Seattle", "score": 0.8}]}'
        )
        recognizer = LLMRecognizer(mock_llm, INTENTS, ENTITY_TYPES)

        result = await recognizer.classify("search hotels in Seattle")

        assert result == IntentResult(
            "SearchHotels", 0.93, (Entity("builtin.geography.city", "Seattle", 0.8),)
        )

    async def test_system_prompt_lists_intents(self, mock_llm):
        """Test that known intents and entity types reach the model."""
        recognizer = LLMRecognizer(mock_llm, INTENTS, ENTITY_TYPES)

        await recognizer.classify("hi")

        call_args = mock_llm.complete.call_args
        assert "- SearchHotels" in call_args.kwargs["system"]
        assert "- AirportCode" in call_args.kwargs["system"]
        assert call_args.kwargs["messages"] == [{"role": "user", "content": "hi"}]

    async def test_fenced_answer(self, mock_llm):
        """Test that JSON wrapped in a code fence is accepted."""
        mock_llm.complete.return_value = '```json\n{"intent": "Help", "score": 0.7}\n```'
        recognizer = LLMRecognizer(mock_llm, INTENTS, ENTITY_TYPES)

        result = await recognizer.classify("what can you do")

        assert result.intent == "Help"
        assert result.entities == ()

    async def test_unknown_intent_becomes_none(self, mock_llm):
        """Test that an invented intent is mapped to None."""
        mock_llm.complete.return_value = '{"intent": "BookFlight", "score": 0.9}'
        recognizer = LLMRecognizer(mock_llm, INTENTS, ENTITY_TYPES)

        result = await recognizer.classify("book a flight")

        assert result.intent == "None"

    @pytest.mark.parametrize(
        "answer",
        ["no json here", '{"intent": "Help", "score": 3}', '{"intent": '],
    )
    async def test_malformed_answer_raises(self, mock_llm, answer):
        """Test that unusable answers raise RecognizerError."""
        mock_llm.complete.return_value = answer
        recognizer = LLMRecognizer(mock_llm, INTENTS, ENTITY_TYPES)

        with pytest.raises(RecognizerError):
            await recognizer.classify("hi")

    async def test_llm_failure_raises(self, mock_llm):
        """Test that provider errors become RecognizerError."""
        mock_llm.complete.side_effect = RuntimeError("LLM API error: overloaded")
        recognizer = LLMRecognizer(mock_llm, INTENTS, ENTITY_TYPES)

        with pytest.raises(RecognizerError, match="overloaded"):
            await recognizer.classify("hi")


class TestLuisRecognizer:
    """Tests for LuisRecognizer."""

    async def test_appends_query_to_portal_url(self):
        """Test that a URL ending in q= gets the utterance appended."""
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json=LUIS_BODY)

        recognizer = LuisRecognizer(
            "https://luis.example/apps/123?subscription-key=k&verbose=true&q=",
            client=mock_client(handler),
        )

        result = await recognizer.classify("search hotels in Seattle")

        assert seen[0].url.params["q"] == "search hotels in Seattle"
        assert seen[0].url.params["subscription-key"] == "k"
        assert result.intent == "SearchHotels"
        assert result.score == 0.97
        assert result.entities == (Entity("builtin.geography.city", "seattle", 0.91),)

    async def test_query_param_for_plain_url(self):
        """Test that other URLs get q as a query parameter."""
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json=LUIS_BODY)

        recognizer = LuisRecognizer("https://luis.example/apps/123", client=mock_client(handler))

        await recognizer.classify("help")

        assert seen[0].url.params["q"] == "help"

    async def test_http_error_raises(self):
        """Test that a failing endpoint raises RecognizerError."""
        recognizer = LuisRecognizer(
            "https://luis.example/apps/123",
            client=mock_client(lambda request: httpx.Response(500)),
        )

        with pytest.raises(RecognizerError):
            await recognizer.classify("help")

    def test_empty_url_rejected(self):
        """Test that an empty model URL is a configuration error."""
        with pytest.raises(ValueError):
            LuisRecognizer("")

    def test_parse_without_top_scoring_intent(self):
        """Test that the best of the intents list is used."""
        body = {
            "intents": [
                {"intent": "None", "score": 0.1},
                {"intent": "Help", "score": 0.8},
            ],
        }

        result = LuisRecognizer.parse_response(body)

        assert result.intent == "Help"
        assert result.entities == ()

    def test_parse_empty_body(self):
        """Test that an answer without intents is None."""
        assert LuisRecognizer.parse_response({}) == IntentResult.none()


class TestSpellCorrection:
    """Tests for spell correction."""

    def test_apply_corrections(self):
        """Test that flagged tokens are replaced by their first suggestion."""
        flagged = [
            {"offset": 16, "token": "Seatle", "suggestions": [{"suggestion": "Seattle"}]},
            {"offset": 7, "token": "hotls", "suggestions": [{"suggestion": "hotels"}]},
        ]

        assert apply_corrections("search hotls in Seatle", flagged) == "search hotels in Seattle"

    def test_apply_corrections_skips_tokens_without_suggestions(self):
        """Test that tokens without suggestions stay as typed."""
        flagged = [{"offset": 0, "token": "Zzyzx", "suggestions": []}]

        assert apply_corrections("Zzyzx hotels", flagged) == "Zzyzx hotels"

    async def test_bing_service_posts_text(self):
        """Test the request format and the corrected answer."""
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(
                200,
                json={
                    "flaggedTokens": [
                        {
                            "offset": 7,
                            "token": "hotls",
                            "type": "UnknownToken",
                            "suggestions": [{"suggestion": "hotels", "score": 0.9}],
                        }
                    ]
                },
            )

        service = BingSpellService(api_key="secret", client=mock_client(handler))

        corrected = await service.correct("search hotls")

        assert corrected == "search hotels"
        assert seen[0].headers["Ocp-Apim-Subscription-Key"] == "secret"
        assert parse_qs(seen[0].content.decode()) == {"text": ["search hotls"]}

    async def test_bing_service_error_raises(self):
        """Test that HTTP failures raise SpellCheckError."""
        service = BingSpellService(
            api_key="secret",
            client=mock_client(lambda request: httpx.Response(401)),
        )

        with pytest.raises(SpellCheckError):
            await service.correct("search hotls")

    def test_bing_service_requires_key(self, monkeypatch):
        """Test that a missing key is a configuration error."""
        monkeypatch.delenv("BING_SPELL_CHECK_API_KEY", raising=False)

        with pytest.raises(ValueError):
            BingSpellService()
