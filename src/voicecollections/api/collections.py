"""Voice collection endpoints: save, browse, edit, generate, delete."""

import logging

from fastapi import APIRouter, Depends, Query

from voicecollections.api.auth import get_current_session
from voicecollections.api.utils import (
    get_collection_service,
    get_speech_generator,
    to_http_exception,
)
from voicecollections.errors import VoiceCollectionsError
from voicecollections.models import (
    BulkDeleteRequest,
    BulkDeleteResponse,
    CollectionFilters,
    CollectionListResponse,
    CollectionResponse,
    CollectionSort,
    CreateCollectionRequest,
    GenerateCollectionAudioRequest,
    MessageResponse,
    UpdateCollectionRequest,
)
from voicecollections.services.collection_service import (
    CollectionService,
    group_by_series,
    to_response,
)
from voicecollections.services.speech_generator import SpeechGenerator
from voicecollections.session import SessionContext

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/collections", tags=["Collections"])


@router.post("", response_model=CollectionResponse, status_code=201)
async def create_collection(
    request: CreateCollectionRequest,
    session: SessionContext = Depends(get_current_session),
    collections: CollectionService = Depends(get_collection_service),
) -> CollectionResponse:
    """Save text as a collection. Audio can be generated later."""
    logger.info(f"Saving collection for user {session.user_id}: {request.title}")
    try:
        record = await collections.create(
            session.user_id, request, request.original_text, request.voice
        )
    except VoiceCollectionsError as e:
        raise to_http_exception(e) from e
    return to_response(record)


@router.get("", response_model=CollectionListResponse)
async def list_collections(
    page: int = Query(1, ge=1, description="Page number"),
    page_size: int = Query(20, ge=1, le=100, description="Items per page"),
    search: str | None = Query(None, description="Search title, category and series"),
    category: str | None = Query(None, description="Filter by category"),
    series: str | None = Query(None, description="Filter by book series"),
    generated: bool | None = Query(None, description="Only generated / ungenerated collections"),
    sort_by: CollectionSort = Query(CollectionSort.CREATED_AT, description="Sort order"),
    group_by_series_: bool = Query(False, alias="group_by_series", description="Group ids by series"),
    session: SessionContext = Depends(get_current_session),
    collections: CollectionService = Depends(get_collection_service),
) -> CollectionListResponse:
    """List the current user's collections with filtering, sorting and pagination."""
    logger.info(f"Listing collections for user {session.user_id}")

    filters = CollectionFilters(
        search=search, category=category, series=series, generated=generated, sort_by=sort_by
    )
    try:
        records, total = await collections.list_collections(
            session.user_id, filters, page=page, page_size=page_size
        )
        categories, all_series = await collections.facets(session.user_id)
    except VoiceCollectionsError as e:
        raise to_http_exception(e) from e

    groups = None
    if group_by_series_:
        groups = {
            name: [r.id for r in members] for name, members in group_by_series(records).items()
        }

    return CollectionListResponse(
        collections=[to_response(r) for r in records],
        total=total,
        page=page,
        page_size=page_size,
        total_pages=(total + page_size - 1) // page_size,
        categories=categories,
        series=all_series,
        groups=groups,
    )


@router.post("/bulk-delete", response_model=BulkDeleteResponse)
async def bulk_delete_collections(
    request: BulkDeleteRequest,
    session: SessionContext = Depends(get_current_session),
    collections: CollectionService = Depends(get_collection_service),
) -> BulkDeleteResponse:
    """Delete several collections. If any id is unknown, nothing is deleted."""
    logger.info(f"Bulk deleting {len(request.ids)} collections for user {session.user_id}")
    try:
        deleted = await collections.bulk_delete(session.user_id, request.ids)
    except VoiceCollectionsError as e:
        raise to_http_exception(e) from e
    return BulkDeleteResponse(deleted=len(deleted), ids=deleted)


@router.get("/{collection_id}", response_model=CollectionResponse)
async def get_collection(
    collection_id: str,
    session: SessionContext = Depends(get_current_session),
    collections: CollectionService = Depends(get_collection_service),
) -> CollectionResponse:
    try:
        record = await collections.get(session.user_id, collection_id)
    except VoiceCollectionsError as e:
        raise to_http_exception(e) from e
    return to_response(record)


@router.patch("/{collection_id}", response_model=CollectionResponse)
async def update_collection(
    collection_id: str,
    request: UpdateCollectionRequest,
    session: SessionContext = Depends(get_current_session),
    collections: CollectionService = Depends(get_collection_service),
) -> CollectionResponse:
    """Edit title, category, series or cover image."""
    logger.info(f"Updating collection {collection_id} for user {session.user_id}")
    try:
        record = await collections.update_details(session.user_id, collection_id, request)
    except VoiceCollectionsError as e:
        raise to_http_exception(e) from e
    return to_response(record)


@router.post("/{collection_id}/generate", response_model=CollectionResponse)
async def generate_collection_audio(
    collection_id: str,
    request: GenerateCollectionAudioRequest | None = None,
    session: SessionContext = Depends(get_current_session),
    generator: SpeechGenerator = Depends(get_speech_generator),
) -> CollectionResponse:
    """Generate (or regenerate) audio for a saved collection."""
    request = request or GenerateCollectionAudioRequest()
    logger.info(f"Generating audio for collection {collection_id} for user {session.user_id}")
    try:
        record = await generator.regenerate(
            session, collection_id, request.voice, request.output_format
        )
    except VoiceCollectionsError as e:
        logger.warning(f"Audio generation failed for collection {collection_id}: {e}")
        raise to_http_exception(e) from e
    return to_response(record)


@router.delete("/{collection_id}", response_model=MessageResponse)
async def delete_collection(
    collection_id: str,
    session: SessionContext = Depends(get_current_session),
    collections: CollectionService = Depends(get_collection_service),
) -> MessageResponse:
    logger.info(f"Deleting collection {collection_id} for user {session.user_id}")
    try:
        await collections.delete(session.user_id, collection_id)
    except VoiceCollectionsError as e:
        raise to_http_exception(e) from e
    return MessageResponse(message="Collection deleted successfully")
