"""Intent recognition and text pre-processing collaborators."""

from .luis import LuisRecognizer
from .recognizer import IIntentRecognizer, LLMRecognizer
from .spell import BingSpellService, ISpellService, apply_corrections

__all__ = [
    "IIntentRecognizer",
    "LLMRecognizer",
    "LuisRecognizer",
    "ISpellService",
    "BingSpellService",
    "apply_corrections",
]
