"""TTS provider implementations (Botnoi)."""

# Re-export for easier access, e.g. `from voicecollections.infrastructure.tts import BotnoiProvider`
from .base import TTSProvider, Voice
from .botnoi_provider import BotnoiProvider

__all__ = [
    "BotnoiProvider",
    "TTSProvider",
    "Voice",
]
