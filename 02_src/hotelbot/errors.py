"""Exception hierarchy for the hotel bot."""


class HotelBotError(Exception):
    """Base class for all hotel bot errors."""


class RegistryError(HotelBotError):
    """Dialog registry was configured inconsistently."""


class StorageError(HotelBotError):
    """Session or trace persistence failed."""


class RecognizerError(HotelBotError):
    """Intent classification service failed or answered garbage."""


class SpellCheckError(HotelBotError):
    """Spell correction service failed."""
