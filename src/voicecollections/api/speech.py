"""Voice options and speech generation for unsaved text."""

import logging

from fastapi import APIRouter, Depends

from voicecollections.api.auth import get_current_session
from voicecollections.api.utils import get_speech_generator, get_tts_provider, to_http_exception
from voicecollections.errors import InvalidParameterError, VoiceCollectionsError
from voicecollections.infrastructure.tts import TTSProvider
from voicecollections.models import (
    GenerateSpeechRequest,
    Language,
    OutputFormat,
    SpeechResponse,
    VoiceOption,
    VoiceOptionsResponse,
    Volume,
)
from voicecollections.services.collection_service import to_response
from voicecollections.services.speech_generator import SpeechGenerator
from voicecollections.session import SessionContext

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["Speech"])


@router.get("/voices", response_model=VoiceOptionsResponse)
def list_voices(provider: TTSProvider = Depends(get_tts_provider)) -> VoiceOptionsResponse:
    """List speakers and the accepted voice settings."""
    return VoiceOptionsResponse(
        provider=provider.name,
        speakers=[VoiceOption(**v.__dict__) for v in provider.list_voices()],
        volumes={v.name.lower(): v.value for v in Volume},
        languages=[lang.value for lang in Language],
        output_formats=[fmt.value for fmt in OutputFormat],
    )


@router.post("/speech", response_model=SpeechResponse)
async def generate_speech(
    request: GenerateSpeechRequest,
    session: SessionContext = Depends(get_current_session),
    generator: SpeechGenerator = Depends(get_speech_generator),
) -> SpeechResponse:
    """Generate speech for text, and save it as a collection when ``save`` is set."""
    logger.info(f"Generating speech for user {session.user_id} (save={request.save})")

    try:
        if request.save:
            if request.details is None:
                raise InvalidParameterError("Please enter both title and text before saving.")
            result, record = await generator.generate_and_save(
                session, request.text, request.voice, request.details, request.output_format
            )
            return SpeechResponse(audio_url=result.audio_url, collection=to_response(record))

        result = await generator.generate(
            session, request.text, request.voice, request.output_format
        )
        return SpeechResponse(audio_url=result.audio_url)

    except VoiceCollectionsError as e:
        logger.warning(f"Speech generation failed for user {session.user_id}: {e}")
        raise to_http_exception(e) from e
