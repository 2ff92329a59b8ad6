import logging

from fastapi import Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from voicecollections.api.settings import get_settings
from voicecollections.database import get_db
from voicecollections.errors import (
    BulkDeleteError,
    CollectionNotFoundError,
    ExtractionError,
    GenerationInProgressError,
    MalformedResponseError,
    PersistenceError,
    RemoteError,
    SynthesisTimeoutError,
    UnsupportedFormatError,
    ValidationError,
    VoiceCollectionsError,
)
from voicecollections.infrastructure.tts import BotnoiProvider, TTSProvider
from voicecollections.services import CollectionService, ProfileService, SpeechGenerator

logger = logging.getLogger(__name__)


def to_http_exception(error: VoiceCollectionsError) -> HTTPException:
    """Map a pipeline error to the single notification the caller sees."""
    if isinstance(error, UnsupportedFormatError):
        return HTTPException(status.HTTP_415_UNSUPPORTED_MEDIA_TYPE, detail=str(error))
    if isinstance(error, ExtractionError):
        return HTTPException(
            422,
            detail="Failed to process the file. Please try again.",
        )
    if isinstance(error, ValidationError):
        return HTTPException(status.HTTP_400_BAD_REQUEST, detail=str(error))
    if isinstance(error, RemoteError):
        return HTTPException(
            status.HTTP_502_BAD_GATEWAY,
            detail={
                "message": "Botnoi API error",
                "provider_status": error.status,
                "provider_body": error.body,
            },
        )
    if isinstance(error, MalformedResponseError):
        return HTTPException(status.HTTP_502_BAD_GATEWAY, detail=str(error))
    if isinstance(error, SynthesisTimeoutError):
        return HTTPException(status.HTTP_504_GATEWAY_TIMEOUT, detail=str(error))
    if isinstance(error, BulkDeleteError):
        return HTTPException(
            status.HTTP_404_NOT_FOUND,
            detail={"message": str(error), "missing_ids": error.missing_ids},
        )
    if isinstance(error, CollectionNotFoundError):
        return HTTPException(status.HTTP_404_NOT_FOUND, detail=str(error))
    if isinstance(error, GenerationInProgressError):
        return HTTPException(status.HTTP_409_CONFLICT, detail=str(error))
    if isinstance(error, PersistenceError):
        return HTTPException(status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(error))
    logger.error(f"Unmapped error: {error!r}")
    return HTTPException(status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(error))


def get_tts_provider() -> TTSProvider:
    settings = get_settings()
    return BotnoiProvider(api_url=settings.botnoi_api_url, timeout=settings.botnoi_timeout_seconds)


def get_collection_service(db: AsyncSession = Depends(get_db)) -> CollectionService:
    return CollectionService(db)


def get_profile_service(db: AsyncSession = Depends(get_db)) -> ProfileService:
    return ProfileService(db)


def get_speech_generator(
    provider: TTSProvider = Depends(get_tts_provider),
    collections: CollectionService = Depends(get_collection_service),
    profiles: ProfileService = Depends(get_profile_service),
) -> SpeechGenerator:
    return SpeechGenerator(provider=provider, collections=collections, profiles=profiles)
