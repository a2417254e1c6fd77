"""Search module."""

from .store import HotelStore, IHotelStore

__all__ = ["HotelStore", "IHotelStore"]
