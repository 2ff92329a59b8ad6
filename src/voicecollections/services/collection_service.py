"""Persistence of voice collections for a single owner."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import datetime

from sqlalchemy import and_, delete, func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from voicecollections.database import VoiceCollection
from voicecollections.errors import (
    BulkDeleteError,
    CollectionNotFoundError,
    EmptyTextError,
    InvalidParameterError,
    PersistenceError,
)
from voicecollections.models import (
    DEFAULT_CATEGORY,
    NO_SERIES,
    CollectionDetails,
    CollectionFilters,
    CollectionResponse,
    CollectionSort,
    UpdateCollectionRequest,
    VoiceParameters,
)

logger = logging.getLogger(__name__)


def _clean_optional(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


def to_response(record: VoiceCollection) -> CollectionResponse:
    """Convert a database record to its API representation."""
    return CollectionResponse(
        id=record.id,
        user_id=record.user_id,
        title=record.title,
        original_text=record.original_text,
        audio_url=record.audio_url,
        is_generated=record.is_generated,
        status="generated" if record.is_generated else "ungenerated",
        speaker=record.speaker,
        volume=record.volume,
        speed=record.speed,
        language=record.language,
        category=record.category,
        book_series=record.book_series,
        cover_image_url=record.cover_image_url,
        created_at=record.created_at,
        updated_at=record.updated_at,
    )


def group_by_series(records: Iterable[VoiceCollection]) -> dict[str, list[VoiceCollection]]:
    """Group records by book series, keeping their order. Records without one go under NO_SERIES."""
    groups: dict[str, list[VoiceCollection]] = {}
    for record in records:
        groups.setdefault(record.book_series or NO_SERIES, []).append(record)
    return groups


class CollectionService:
    """CRUD and queries over one owner's voice collections.

    Every store failure is rolled back and re-raised as ``PersistenceError``.
    """

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def _commit(self, action: str) -> None:
        try:
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Failed to {action}: {e!s}", exc_info=True)
            raise PersistenceError(f"Failed to {action}") from e

    async def create(
        self,
        owner_id: str,
        details: CollectionDetails,
        original_text: str,
        voice: VoiceParameters,
        audio_url: str | None = None,
    ) -> VoiceCollection:
        """Insert a new collection. ``audio_url=None`` stores it as ungenerated."""
        title = details.title.strip() if details.title else ""
        text = original_text.strip() if original_text else ""
        if not title:
            raise InvalidParameterError("Please enter both title and text before saving.")
        if not text:
            raise EmptyTextError("Please enter both title and text before saving.")

        record = VoiceCollection(
            user_id=owner_id,
            title=title,
            original_text=text,
            audio_url=audio_url,
            speaker=voice.speaker.value,
            volume=voice.volume.value,
            speed=voice.speed,
            language=voice.language.value,
            category=_clean_optional(details.category) or DEFAULT_CATEGORY,
            book_series=_clean_optional(details.book_series),
            cover_image_url=_clean_optional(details.cover_image_url),
        )
        self.db.add(record)
        await self._commit("save collection")
        await self.db.refresh(record)

        logger.info(
            f"Saved collection {record.id} for user {owner_id} "
            f"({'with audio' if audio_url else 'ungenerated'})"
        )
        return record

    async def get(self, owner_id: str, collection_id: str) -> VoiceCollection:
        try:
            result = await self.db.execute(
                select(VoiceCollection).where(
                    and_(VoiceCollection.id == collection_id, VoiceCollection.user_id == owner_id)
                )
            )
        except SQLAlchemyError as e:
            raise PersistenceError("Failed to load collection") from e

        record = result.scalar_one_or_none()
        if record is None:
            logger.info("Collection %s not found or access denied for user %s", collection_id, owner_id)
            raise CollectionNotFoundError(collection_id)
        return record

    async def list_collections(
        self,
        owner_id: str,
        filters: CollectionFilters | None = None,
        page: int = 1,
        page_size: int = 20,
    ) -> tuple[list[VoiceCollection], int]:
        """Return one page of the owner's collections and the total matching count."""
        filters = filters or CollectionFilters()
        query = select(VoiceCollection).where(VoiceCollection.user_id == owner_id)

        if filters.search and filters.search.strip():
            term = filters.search.strip().lower()
            query = query.where(
                or_(
                    func.lower(VoiceCollection.title).contains(term, autoescape=True),
                    func.lower(VoiceCollection.category).contains(term, autoescape=True),
                    func.lower(VoiceCollection.book_series).contains(term, autoescape=True),
                )
            )
        if filters.category:
            query = query.where(VoiceCollection.category == filters.category)
        if filters.series:
            query = query.where(VoiceCollection.book_series == filters.series)
        if filters.generated is True:
            query = query.where(VoiceCollection.audio_url.is_not(None))
        elif filters.generated is False:
            query = query.where(VoiceCollection.audio_url.is_(None))

        if filters.sort_by == CollectionSort.TITLE:
            order = (VoiceCollection.title.asc(),)
        elif filters.sort_by == CollectionSort.CATEGORY:
            order = (VoiceCollection.category.asc(),)
        elif filters.sort_by == CollectionSort.SERIES:
            order = (func.coalesce(VoiceCollection.book_series, "").asc(),)
        else:
            order = ()
        query_ordered = query.order_by(*order, VoiceCollection.created_at.desc())

        try:
            count_query = select(func.count()).select_from(query.subquery())
            total = (await self.db.execute(count_query)).scalar() or 0

            offset = (page - 1) * page_size
            result = await self.db.execute(query_ordered.offset(offset).limit(page_size))
            records = list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error(f"Failed to list collections: {e!s}", exc_info=True)
            raise PersistenceError("Failed to list collections") from e

        return records, total

    async def facets(self, owner_id: str) -> tuple[list[str], list[str]]:
        """Distinct categories and series used by the owner, for filter menus."""
        try:
            categories = await self.db.execute(
                select(VoiceCollection.category)
                .where(VoiceCollection.user_id == owner_id)
                .distinct()
                .order_by(VoiceCollection.category)
            )
            series = await self.db.execute(
                select(VoiceCollection.book_series)
                .where(
                    and_(
                        VoiceCollection.user_id == owner_id,
                        VoiceCollection.book_series.is_not(None),
                    )
                )
                .distinct()
                .order_by(VoiceCollection.book_series)
            )
        except SQLAlchemyError as e:
            raise PersistenceError("Failed to load collection filters") from e

        return [c for c in categories.scalars().all() if c], [s for s in series.scalars().all() if s]

    async def update_details(
        self, owner_id: str, collection_id: str, changes: UpdateCollectionRequest
    ) -> VoiceCollection:
        """Edit title, category, series or cover image."""
        record = await self.get(owner_id, collection_id)
        fields = changes.model_dump(exclude_unset=True)

        if "title" in fields:
            title = (fields["title"] or "").strip()
            if not title:
                raise InvalidParameterError("Title cannot be empty.")
            record.title = title
        if "category" in fields:
            record.category = _clean_optional(fields["category"]) or DEFAULT_CATEGORY
        if "book_series" in fields:
            record.book_series = _clean_optional(fields["book_series"])
        if "cover_image_url" in fields:
            record.cover_image_url = _clean_optional(fields["cover_image_url"])

        await self._commit("update collection")
        await self.db.refresh(record)
        return record

    async def attach_audio(
        self,
        owner_id: str,
        collection_id: str,
        audio_url: str,
        voice: VoiceParameters,
    ) -> VoiceCollection:
        """Store newly generated audio. Only the audio URL and voice settings change."""
        record = await self.get(owner_id, collection_id)

        record.audio_url = audio_url
        record.speaker = voice.speaker.value
        record.volume = voice.volume.value
        record.speed = voice.speed
        record.language = voice.language.value
        record.updated_at = datetime.utcnow()

        await self._commit("attach audio to collection")
        await self.db.refresh(record)
        logger.info(f"Attached audio to collection {collection_id}")
        return record

    async def delete(self, owner_id: str, collection_id: str) -> None:
        record = await self.get(owner_id, collection_id)
        await self.db.delete(record)
        await self._commit("delete collection")
        logger.info(f"Deleted collection {collection_id} for user {owner_id}")

    async def bulk_delete(self, owner_id: str, collection_ids: Iterable[str]) -> list[str]:
        """Delete all of *collection_ids* or none of them.

        Raises ``BulkDeleteError`` listing the ids that do not exist for the
        owner; in that case nothing is deleted.
        """
        ids = list(dict.fromkeys(collection_ids))
        if not ids:
            raise InvalidParameterError("No collections selected.")

        try:
            result = await self.db.execute(
                select(VoiceCollection.id).where(
                    and_(VoiceCollection.user_id == owner_id, VoiceCollection.id.in_(ids))
                )
            )
        except SQLAlchemyError as e:
            raise PersistenceError("Failed to delete collections") from e

        found = set(result.scalars().all())
        missing = [i for i in ids if i not in found]
        if missing:
            logger.info(f"Bulk delete rejected for user {owner_id}: missing {missing}")
            raise BulkDeleteError(missing)

        try:
            await self.db.execute(
                delete(VoiceCollection).where(
                    and_(VoiceCollection.user_id == owner_id, VoiceCollection.id.in_(ids))
                )
            )
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise PersistenceError("Failed to delete collections") from e
        await self._commit("delete collections")

        logger.info(f"Deleted {len(ids)} collections for user {owner_id}")
        return ids
