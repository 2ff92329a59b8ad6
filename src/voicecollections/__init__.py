"""
Voice Collections – turn uploaded or typed text into saved Botnoi speech.

This top-level package exposes the core request models of the
document -> text -> speech -> collection pipeline.
"""

from .models import (
    CreateCollectionRequest,
    DocumentFormat,
    GenerateSpeechRequest,
    SpeechRequest,
    VoiceParameters,
)

__all__ = [
    "CreateCollectionRequest",
    "DocumentFormat",
    "GenerateSpeechRequest",
    "SpeechRequest",
    "VoiceParameters",
]
