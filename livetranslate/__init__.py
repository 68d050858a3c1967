"""live-translate: continuous speech translation sessions with token renewal."""

__version__ = "0.1.0"
