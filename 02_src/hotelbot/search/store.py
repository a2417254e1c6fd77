"""Hotel search collaborator with demo data."""

import asyncio
import random
from typing import Protocol

from ..models import Hotel, Review

REVIEW_TITLES = [
    "“Very stylish, great stay, great staff”",
    "“good hotel awful meals”",
    "“Need more attention to little things”",
    "“Lovely small hotel ideally situated to explore the area.”",
    "“Positive surprise”",
    "“Beautiful suite and resort”",
]

REVIEW_TEXT = (
    "Lorem ipsum dolor sit amet, consectetur adipiscing elit. Mauris odio magna, "
    "sodales vel ligula sit amet, vulputate vehicula velit. Nulla quis consectetur "
    "neque, sed commodo metus."
)

REVIEWER_IMAGE = "https://upload.wikimedia.org/wikipedia/en/e/ee/Unknown-person.gif"

RESULT_COUNT = 5


class IHotelStore(Protocol):
    """Long-latency hotel lookups."""

    async def search_hotels(self, destination: str) -> list[Hotel]:
        ...

    async def search_hotel_reviews(self, hotel_name: str) -> list[Review]:
        ...


class HotelStore:
    """Generates demo results after a simulated service latency."""

    def __init__(self, latency: float = 1.0, rng: random.Random | None = None):
        self._latency = latency
        self._rng = rng or random.Random()

    async def search_hotels(self, destination: str) -> list[Hotel]:
        hotels = [
            Hotel(
                name=f"{destination} Hotel {i}",
                location=destination,
                rating=self._rng.randint(1, 5),
                number_of_reviews=self._rng.randint(1, 5000),
                price_starting=self._rng.randint(80, 529),
                image=f"https://placeholdit.imgix.net/~text?txtsize=35&txt=Hotel+{i}&w=500&h=260",
            )
            for i in range(1, RESULT_COUNT + 1)
        ]
        hotels.sort(key=lambda hotel: hotel.price_starting)

        await asyncio.sleep(self._latency)
        return hotels

    async def search_hotel_reviews(self, hotel_name: str) -> list[Review]:
        reviews = [
            Review(
                title=self._rng.choice(REVIEW_TITLES),
                text=REVIEW_TEXT,
                image=REVIEWER_IMAGE,
            )
            for _ in range(RESULT_COUNT)
        ]

        await asyncio.sleep(self._latency)
        return reviews
