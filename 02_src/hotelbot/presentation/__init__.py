"""Presentation module."""

from .cards import hotel_as_card, review_as_card

__all__ = ["hotel_as_card", "review_as_card"]
