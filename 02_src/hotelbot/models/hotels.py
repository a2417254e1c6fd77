"""Hotel search domain models."""

from dataclasses import dataclass


@dataclass
class Hotel:
    """A hotel returned by the search collaborator."""

    name: str
    location: str
    rating: int
    number_of_reviews: int
    price_starting: int
    image: str


@dataclass
class Review:
    """A hotel review."""

    title: str
    text: str
    image: str
