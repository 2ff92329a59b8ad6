"""Speech generation actions: generate, generate-and-save, regenerate."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from voicecollections.database import VoiceCollection
from voicecollections.errors import GenerationInProgressError, InvalidParameterError
from voicecollections.infrastructure.tts import TTSProvider
from voicecollections.models import (
    CollectionDetails,
    Language,
    OutputFormat,
    Speaker,
    SynthesisResult,
    VoiceParameters,
    Volume,
)
from voicecollections.services.collection_service import CollectionService
from voicecollections.services.profile_service import ProfileService
from voicecollections.services.speech_request import build_speech_request
from voicecollections.session import SessionContext

logger = logging.getLogger(__name__)


class GenerationGuard:
    """Rejects a generation while another one for the same key is pending.

    Keys are a collection id, or the session id for text that is not saved yet.
    All access happens on the event loop thread, so a plain set is enough.
    """

    def __init__(self) -> None:
        self._pending: set[str] = set()

    def is_pending(self, key: str) -> bool:
        return key in self._pending

    @asynccontextmanager
    async def hold(self, key: str) -> AsyncIterator[None]:
        if key in self._pending:
            raise GenerationInProgressError(key)
        self._pending.add(key)
        try:
            yield
        finally:
            self._pending.discard(key)


generation_guard = GenerationGuard()


def stored_voice(record: VoiceCollection) -> VoiceParameters:
    """Voice parameters saved with a collection."""
    return VoiceParameters(
        speaker=Speaker(record.speaker),
        volume=Volume(record.volume),
        speed=record.speed,
        language=Language(record.language),
    )


class SpeechGenerator:
    """Runs build -> synthesize -> persist for one user action.

    Each step waits for the previous one; a failure stops the action before
    anything is written.
    """

    def __init__(
        self,
        provider: TTSProvider,
        collections: CollectionService,
        profiles: ProfileService,
        guard: GenerationGuard | None = None,
    ) -> None:
        self.provider = provider
        self.collections = collections
        self.profiles = profiles
        self.guard = guard or generation_guard

    async def _synthesize(
        self,
        session: SessionContext,
        text: str,
        voice: VoiceParameters,
        output_format: OutputFormat,
    ) -> SynthesisResult:
        credential = await self.profiles.get_credential(session.user_id)
        request = build_speech_request(text, voice, output_format, credential)
        return await self.provider.synthesize(request)

    async def generate(
        self,
        session: SessionContext,
        text: str,
        voice: VoiceParameters,
        output_format: OutputFormat = OutputFormat.MP3,
    ) -> SynthesisResult:
        """Generate audio for unsaved text. Nothing is persisted."""
        async with self.guard.hold(f"session:{session.session_id}"):
            result = await self._synthesize(session, text, voice, output_format)
        logger.info(f"Generated speech for user {session.user_id}")
        return result

    async def generate_and_save(
        self,
        session: SessionContext,
        text: str,
        voice: VoiceParameters,
        details: CollectionDetails,
        output_format: OutputFormat = OutputFormat.MP3,
    ) -> tuple[SynthesisResult, VoiceCollection]:
        """Generate audio, then save text and audio as a new collection."""
        if not details.title or not details.title.strip():
            raise InvalidParameterError("Please enter both title and text before saving.")

        async with self.guard.hold(f"session:{session.session_id}"):
            result = await self._synthesize(session, text, voice, output_format)
            record = await self.collections.create(
                session.user_id, details, text, voice, audio_url=result.audio_url
            )
        return result, record

    async def regenerate(
        self,
        session: SessionContext,
        collection_id: str,
        voice: VoiceParameters | None = None,
        output_format: OutputFormat = OutputFormat.MP3,
    ) -> VoiceCollection:
        """Generate audio for a stored collection and attach it.

        Uses the stored voice settings unless *voice* is given.
        """
        record = await self.collections.get(session.user_id, collection_id)
        voice = voice or stored_voice(record)

        async with self.guard.hold(f"collection:{collection_id}"):
            result = await self._synthesize(session, record.original_text, voice, output_format)
            return await self.collections.attach_audio(
                session.user_id, collection_id, result.audio_url, voice
            )
