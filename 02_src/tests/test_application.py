"""Tests for Application."""

import pytest

from hotelbot.app import Application
from hotelbot.models import IntentResult
from hotelbot.recognizers import BingSpellService, LLMRecognizer, LuisRecognizer
from hotelbot.search import HotelStore


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Start every test without collaborator configuration."""
    for name in (
        "LUIS_MODEL_URL",
        "ANTHROPIC_API_KEY",
        "IS_SPELL_CORRECTION_ENABLED",
        "BING_SPELL_CHECK_API_KEY",
        "DATABASE_URL",
    ):
        monkeypatch.delenv(name, raising=False)


class TestApplicationStart:
    """Tests for Application.start()."""

    async def test_start_initializes_components(self, mock_recognizer, mock_store):
        """Test that start initializes all components."""
        app = Application(db_path=":memory:", recognizer=mock_recognizer, store=mock_store)
        await app.start()

        assert app._storage is not None
        assert app._tracker is not None
        assert app._engine is not None
        assert app._dispatcher is not None
        assert app._recognizer is mock_recognizer
        assert app._store is mock_store
        assert app._spell is None
        await app.stop()

    async def test_start_wires_dependencies(self, mock_recognizer, mock_store):
        """Test that components share the same storage."""
        app = Application(db_path=":memory:", recognizer=mock_recognizer, store=mock_store)
        await app.start()

        assert app._tracker._storage is app._storage
        assert app._engine._storage is app._storage
        assert app._engine._tracker is app._tracker
        assert "SearchHotels" in app._engine.registry
        await app.stop()

    async def test_start_without_configuration(self):
        """Test defaults when nothing is configured."""
        app = Application(db_path=":memory:")
        await app.start()

        assert app._recognizer is None
        assert isinstance(app._store, HotelStore)
        await app.stop()

    async def test_luis_recognizer_from_env(self, monkeypatch):
        """Test that LUIS_MODEL_URL selects the LUIS recognizer."""
        monkeypatch.setenv("LUIS_MODEL_URL", "https://luis.example/apps/1?q=")
        monkeypatch.setenv("ANTHROPIC_API_KEY", "test_key")

        app = Application(db_path=":memory:")
        await app.start()

        assert isinstance(app._recognizer, LuisRecognizer)
        await app.stop()

    async def test_llm_recognizer_from_env(self, monkeypatch):
        """Test that an Anthropic key selects the LLM recognizer."""
        monkeypatch.setenv("ANTHROPIC_API_KEY", "test_key")

        app = Application(db_path=":memory:")
        await app.start()

        assert isinstance(app._recognizer, LLMRecognizer)
        await app.stop()

    async def test_spell_service_needs_flag_and_key(self, monkeypatch):
        """Test that spell correction is only built when enabled and keyed."""
        monkeypatch.setenv("IS_SPELL_CORRECTION_ENABLED", "true")

        app = Application(db_path=":memory:")
        await app.start()
        assert app._spell is None
        await app.stop()

        monkeypatch.setenv("BING_SPELL_CHECK_API_KEY", "secret")
        app = Application(db_path=":memory:")
        await app.start()
        assert isinstance(app._spell, BingSpellService)
        await app.stop()


class TestApplicationStop:
    """Tests for Application.stop()."""

    async def test_stop_closes_storage(self, mock_recognizer, mock_store):
        """Test that stop closes the database connection."""
        app = Application(db_path=":memory:", recognizer=mock_recognizer, store=mock_store)
        await app.start()
        await app.stop()

        assert app._storage._conn is None

    async def test_stop_leaves_overrides_open(self, mock_recognizer, mock_store):
        """Test that injected collaborators are not closed."""
        app = Application(db_path=":memory:", recognizer=mock_recognizer, store=mock_store)
        await app.start()
        await app.stop()

        mock_recognizer.close.assert_not_called()


class TestApplicationReset:
    """Tests for Application.reset()."""

    async def test_reset_clears_sessions(self, mock_recognizer, mock_store, make_message):
        """Test that reset drops conversation state."""
        mock_recognizer.classify.return_value = IntentResult("SearchHotels", 0.9)
        app = Application(db_path=":memory:", recognizer=mock_recognizer, store=mock_store)
        await app.start()

        result = await app.engine.handle_message(make_message("search hotels"))
        assert result.session.stack

        await app.reset()

        assert await app.storage.get_session("user1") is None
        assert await app.storage.get_trace_events() == []
        await app.stop()

    async def test_engine_works_after_reset(self, mock_recognizer, mock_store, make_message):
        """Test that components keep working after reset."""
        mock_recognizer.classify.return_value = IntentResult("Help", 0.9)
        app = Application(db_path=":memory:", recognizer=mock_recognizer, store=mock_store)
        await app.start()
        await app.reset()

        result = await app.engine.handle_message(make_message("help"))

        assert result.activities
        await app.stop()


class TestApplicationProperties:
    """Tests for Application properties."""

    @pytest.mark.parametrize("name", ["storage", "engine", "dispatcher", "sender"])
    def test_property_raises_when_not_started(self, name):
        """Test that properties raise before start."""
        app = Application(db_path=":memory:")

        with pytest.raises(RuntimeError, match="not started"):
            getattr(app, name)

    async def test_properties_after_start(self, mock_recognizer, mock_store):
        """Test property access after start."""
        app = Application(db_path=":memory:", recognizer=mock_recognizer, store=mock_store)
        await app.start()

        assert app.storage is app._storage
        assert app.engine is app._engine
        assert app.dispatcher is app._dispatcher
        assert app.sender is app._sender
        await app.stop()
