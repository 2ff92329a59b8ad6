"""Document upload and text extraction endpoints."""

import logging

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status

from voicecollections.api.auth import get_current_user
from voicecollections.api.settings import get_settings
from voicecollections.api.utils import to_http_exception
from voicecollections.database import User
from voicecollections.errors import ExtractionError
from voicecollections.models import DocumentFormat, ExtractedDocumentResponse
from voicecollections.services.document_extractor import (
    charset_from_content_type,
    detect_format,
    extract_text_async,
    title_from_filename,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/documents", tags=["Documents"])


@router.post("/extract", response_model=ExtractedDocumentResponse)
async def extract_document(
    file: UploadFile = File(..., description="A .txt, .pdf or .docx file"),
    current_user: User = Depends(get_current_user),
) -> ExtractedDocumentResponse:
    """Extract plain text from an uploaded document.

    Nothing is stored; the caller edits the text and decides whether to save it.
    """
    settings = get_settings()
    fmt = detect_format(file.content_type, file.filename)
    logger.info(
        f"Extracting {file.filename!r} ({file.content_type or 'no content type'}) "
        f"as {fmt.value} for user {current_user.id}"
    )

    data = await file.read(settings.max_upload_bytes + 1)
    if len(data) > settings.max_upload_bytes:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"File is larger than {settings.max_upload_bytes} bytes",
        )

    encoding = (
        charset_from_content_type(file.content_type)
        if fmt == DocumentFormat.PLAIN_TEXT
        else None
    )

    try:
        text = await extract_text_async(fmt, data, encoding)
    except ExtractionError as e:
        logger.warning(f"Extraction failed for {file.filename!r}: {e}")
        raise to_http_exception(e) from e

    logger.info(f"Extracted {len(text)} characters from {file.filename!r}")
    return ExtractedDocumentResponse(
        title=title_from_filename(file.filename),
        filename=file.filename,
        format=fmt,
        text=text,
        character_count=len(text),
    )
