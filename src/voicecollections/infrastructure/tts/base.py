from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from voicecollections.models import SpeechRequest, SynthesisResult


@dataclass
class Voice:
    """Represents a voice option for a TTS provider."""

    id: str
    name: str
    gender: str | None = None
    description: str | None = None
    tags: list[str] = field(default_factory=list)


class TTSProvider(ABC):
    """Abstract base class for hosted TTS providers."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the (unique) short-name for this provider (e.g. 'botnoi')."""

    @abstractmethod
    def list_voices(self) -> list[Voice]:
        """Return all available voices for this provider."""

    @abstractmethod
    async def synthesize(self, request: SpeechRequest) -> SynthesisResult:
        """Send *request* to the provider and return the reference to the produced audio."""
