"""I/O boundary adapters (e.g. database, external APIs)."""

from .tts import (
    BotnoiProvider,
    TTSProvider,
    Voice,
)

__all__ = [
    "BotnoiProvider",
    "TTSProvider",
    "Voice",
]
