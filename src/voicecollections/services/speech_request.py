"""Assemble and validate requests for the TTS provider."""

from __future__ import annotations

from voicecollections.errors import EmptyTextError, InvalidParameterError, MissingCredentialError
from voicecollections.models import (
    MAX_SPEED,
    MIN_SPEED,
    OutputFormat,
    SpeechRequest,
    VoiceParameters,
)


def build_speech_request(
    text: str | None,
    voice: VoiceParameters,
    output_format: OutputFormat = OutputFormat.MP3,
    credential: str | None = None,
) -> SpeechRequest:
    """Return a ``SpeechRequest`` or raise the first validation failure.

    Checks run in order: non-blank text, credential present, speed within
    [MIN_SPEED, MAX_SPEED]. Speaker and volume are passed through untouched.
    """
    if not text or not text.strip():
        raise EmptyTextError()

    if not credential or not credential.strip():
        raise MissingCredentialError()

    if not MIN_SPEED <= voice.speed <= MAX_SPEED:
        raise InvalidParameterError(
            f"Speed must be between {MIN_SPEED} and {MAX_SPEED}, got {voice.speed}"
        )

    return SpeechRequest(
        text=text.strip(),
        voice=voice,
        output_format=output_format,
        credential=credential,
    )
