"""Terminal user interface for live-translate."""

from .keyboard_input import KeyboardInputHandler
from .translation_screen import TranslationScreen

__all__ = [
    "KeyboardInputHandler",
    "TranslationScreen",
]
