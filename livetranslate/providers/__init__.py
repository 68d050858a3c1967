"""Streaming translation provider adapters."""

from .base import AbstractTranslationProvider, ProviderConfig, ProviderHandlers
from .channel import SessionEventChannel

__all__ = [
    "AbstractTranslationProvider",
    "ProviderConfig",
    "ProviderHandlers",
    "SessionEventChannel",
]
