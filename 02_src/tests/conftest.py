"""Pytest configuration and fixtures."""

import random
import sys
from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import AsyncMock, Mock

import pytest
import pytest_asyncio

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))


@pytest_asyncio.fixture
async def storage():
    """Create in-memory storage for testing."""
    from hotelbot.storage import Storage

    st = Storage(":memory:")
    await st.init()
    yield st
    await st.close()


@pytest.fixture
def tracker(storage):
    """Create Tracker with storage."""
    from hotelbot.tracker import Tracker

    return Tracker(storage)


@pytest.fixture
def mock_recognizer():
    """Create mock intent recognizer answering the None intent."""
    from hotelbot.models import IntentResult

    recognizer = Mock()
    recognizer.classify = AsyncMock(return_value=IntentResult.none())
    return recognizer


@pytest.fixture
def mock_llm():
    """Create mock LLM provider."""
    llm = Mock()
    llm.complete = AsyncMock(return_value='{"intent": "None", "score": 0.1}')
    return llm


@pytest.fixture
def hotels():
    """Two hotels, cheapest first."""
    from hotelbot.models import Hotel

    return [
        Hotel(
            name="Seattle Hotel 1",
            location="Seattle",
            rating=4,
            number_of_reviews=120,
            price_starting=95,
            image="https://example.com/1.png",
        ),
        Hotel(
            name="Seattle Hotel 2",
            location="Seattle",
            rating=5,
            number_of_reviews=3400,
            price_starting=310,
            image="https://example.com/2.png",
        ),
    ]


@pytest.fixture
def reviews():
    from hotelbot.models import Review

    return [
        Review(title="“Positive surprise”", text="Nice.", image="https://example.com/r.gif"),
    ]


@pytest.fixture
def mock_store(hotels, reviews):
    """Create mock hotel store with canned results."""
    store = Mock()
    store.search_hotels = AsyncMock(return_value=hotels)
    store.search_hotel_reviews = AsyncMock(return_value=reviews)
    return store


@pytest.fixture
def services(mock_store):
    from hotelbot.dialogs import Services

    return Services(store=mock_store, rng=random.Random(7))


@pytest.fixture
def engine(storage, tracker, mock_recognizer, services):
    """Create DialogEngine over the built-in dialogs."""
    from hotelbot.dialogs import DialogEngine, build_registry

    return DialogEngine(
        registry=build_registry(),
        storage=storage,
        services=services,
        recognizer=mock_recognizer,
        tracker=tracker,
    )


@pytest.fixture
def make_message():
    """Factory for inbound messages at a fixed morning timestamp."""
    from hotelbot.models import InboundMessage

    def _make(text: str, address: str = "user1", hour: int = 10) -> InboundMessage:
        return InboundMessage(
            address=address,
            text=text,
            timestamp=datetime(2024, 3, 1, hour, 30, tzinfo=timezone.utc),
        )

    return _make
